"""JSON file storage."""

from __future__ import annotations

import json as _json
import math as _math
import pathlib as _pathlib
import re as _re
import typing as _typing

import treeconf.stores.file as file
import treeconf.tree as tree

_JSON_NUMBER = _re.compile(r"-?(?:0|[1-9]\d*)(?:\.\d+)?(?:[eE][+-]?\d+)?")


class JSONFile(file.FileStorage):
    """
    A configuration layer stored as JSON file.

    Numbers are read as exact text and written back unchanged, so a value
    like ``1.50`` or a 30-digit integer survives a write unmodified.
    NaN and infinities have no JSON spelling and can't be written.

    Args:
        path: Location of the file. It doesn't need to exist.
        indent: Spaces per indentation level when writing.
        watch: Whether changes on disk trigger a reload.
    """

    def __init__(
        self,
        path: str | _pathlib.Path,
        *,
        indent: int = 4,
        watch: bool = True,
    ) -> None:
        super().__init__(path, watch=watch)
        self._indent = indent

    def _decode(self, text: str) -> tree.Node:
        if not text.strip():
            return tree.Node()
        data = _json.loads(
            text,
            parse_int=tree.Number,
            parse_float=tree.Number,
            parse_constant=tree.Number,
        )
        if not isinstance(data, dict):
            raise tree.UnexpectedTypeError("", type(data).__name__, "object")
        result = tree.codec.to_tree(data)
        result.check()
        return result

    def _encode(self, node: tree.Node) -> str:
        return dumps(node, self._indent) + "\n"


def dumps(value: _typing.Any, indent: int = 4) -> str:
    """Serialize a tree value as JSON, numbers verbatim."""
    return _encode_value(value, indent, 0)


def _encode_number(value: tree.Number) -> str:
    if _JSON_NUMBER.fullmatch(value.text):
        return value.text
    # YAML style literals (0x1f, 1_000, 010, 1:30) have to be spelled the JSON way
    if value.is_integer():
        return str(value.to_int())
    number = value.to_float()
    if not _math.isfinite(number):
        raise tree.UnexpectedTypeError("", f"number {value.text}", "finite number")
    return _json.dumps(number)


def _encode_value(value: _typing.Any, indent: int, level: int) -> str:
    if isinstance(value, tree.Number):
        return _encode_number(value)
    if isinstance(value, tree.Node):
        if not value:
            return "{}"
        items = [
            f"{_json.dumps(key)}: {_encode_value(child, indent, level + 1)}"
            for key, child in value.items()
        ]
        return _wrap("{", items, "}", indent, level)
    if isinstance(value, list):
        if not value:
            return "[]"
        items = [_encode_value(element, indent, level + 1) for element in value]
        return _wrap("[", items, "]", indent, level)
    if value is None or isinstance(value, (bool, str)):
        return _json.dumps(value)
    raise tree.UnexpectedTypeError("", type(value).__name__)


def _wrap(opening: str, items: list[str], closing: str, indent: int, level: int) -> str:
    inner = " " * (indent * (level + 1))
    outer = " " * (indent * level)
    return f"{opening}\n{inner}" + f",\n{inner}".join(items) + f"\n{outer}{closing}"
