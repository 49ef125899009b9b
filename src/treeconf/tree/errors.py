"""
Error types raised by tree operations and the value codec.

All errors derive from TreeError so callers can catch tree problems
without caring about the specific kind.
"""

from __future__ import annotations


class TreeError(Exception):
    """Base exception for tree errors."""

    pass


class ElementNotFoundError(TreeError):
    """Raised when there is no element at the given path."""

    def __init__(self, path: str) -> None:
        self.path = path
        super().__init__(f"Element at {path!r} not found")


class PathInsideValueError(TreeError):
    """Raised when a path tries to descend through a non-node value."""

    def __init__(self, path: str) -> None:
        self.path = path
        super().__init__(f"Element at {path!r} is pointing inside value")


class PathInvalidError(TreeError):
    """Raised when a path or key is malformed."""

    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Path {path!r} is invalid: {reason}")


class UnexpectedTypeError(TreeError):
    """
    Raised when a value differs from the expected type.

    Attributes:
        path: Location of the value, or "" when not known.
        got: Name of the type that was found.
        expected: Name of the expected type, or "" when any legal type would do.
    """

    def __init__(self, path: str, got: str, expected: str = "") -> None:
        self.path = path
        self.got = got
        self.expected = expected
        super().__init__(self._format())

    def _format(self) -> str:
        if self.path:
            if self.expected:
                return f"Element at {self.path!r} is of type {self.got} instead of {self.expected}"
            return f"Element at {self.path!r} is of unexpected type {self.got}"
        if self.expected:
            return f"Element is of type {self.got} instead of {self.expected}"
        return f"Element is of unexpected type {self.got}"


class KeyIsNotStringError(TreeError):
    """Raised when a mapping key is not a string."""

    def __init__(self, key: object, type_name: str) -> None:
        self.key = key
        self.type_name = type_name
        super().__init__(f"Key {key!r} is of type {type_name}. Only strings are supported")


class CannotModifyError(TreeError):
    """Raised when decoding into a destination that can't be modified in place."""

    def __init__(self, value: object, type_name: str) -> None:
        self.value = value
        self.type_name = type_name
        super().__init__(
            f"Trying to write into immutable value {value!r} of type {type_name}"
        )
