"""
Dot-separated paths.

A path addresses an element of a tree, with ``.`` between the keys.
Tree operations use root-relative paths that start with the separator
(``.box.width``); ``""`` and ``"."`` address the root itself.
"""

from __future__ import annotations

import re as _re

import treeconf.tree.errors as errors

SEPARATOR = "."

_REGEX_REMOVE = _re.compile(r"^\.+|\.+$|\r|\n")
_REGEX_REPLACE_PERIODS = _re.compile(r"\.{2,}")


def join(*segments: str) -> str:
    """Concatenate segments with the separator."""
    return SEPARATOR.join(segments)


def split(path: str) -> list[str]:
    """
    Split a path at every separator.

    An empty string splits into a single empty segment.
    """
    return path.split(SEPARATOR)


def clean(path: str) -> str:
    """
    Normalize a path.

    Removes leading and trailing separators and any newline or carriage
    return, then collapses runs of separators into one.

    Example:
        >>> clean(".foo.\\n\\r.bar.")
        'foo.bar'
    """
    path = _REGEX_REMOVE.sub("", path)
    return _REGEX_REPLACE_PERIODS.sub(SEPARATOR, path)


def new_path(*elements: str) -> str:
    """Join path elements and clean the result."""
    return clean(join(*elements))


def is_root(path: str) -> bool:
    """Check whether a path addresses the root."""
    return clean(path) == ""


def contains(path: str, prefix: str) -> bool:
    """
    Check whether prefix is a segment-wise prefix of path.

    Both paths are cleaned first. A path contains itself, and the root
    contains every path.

    Example:
        >>> contains(".a.b.c", ".a.b")
        True
        >>> contains(".a.bc", ".a.b")
        False
    """
    prefix = clean(prefix)
    if prefix == "":
        return True
    path_segments = split(clean(path))
    prefix_segments = split(prefix)
    if len(prefix_segments) > len(path_segments):
        return False
    return path_segments[: len(prefix_segments)] == prefix_segments


def segments(path: str) -> list[str]:
    """
    Return the keys a root-relative path walks through.

    Raises:
        PathInvalidError: If a non-root path lacks the leading separator.
    """
    if path in ("", SEPARATOR):
        return []
    if not path.startswith(SEPARATOR):
        raise errors.PathInvalidError(path, f"path must start with {SEPARATOR!r}")
    return split(path)[1:]
