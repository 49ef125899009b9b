"""
Exact-text numbers.

Numbers are kept as the decimal text they were read or written as, so
merging, comparing and persisting a tree never changes how a number looks
(``1.50`` stays ``1.50``, large integers keep every digit).

Interpreting the text follows YAML 1.1 as well as Python literals: a
leading zero means octal (``010`` is 8) and colons separate base 60
digits (``1:30`` is 90).
"""

from __future__ import annotations

import decimal as _decimal
import re as _re
import typing as _typing

import treeconf.tree.errors as errors


class Number:
    """
    A number represented by its exact text.

    Two numbers are equal when their text is equal. Use the ``to_*`` methods
    to interpret the text as a Python number.

    Example:
        >>> Number.create(123)
        Number('123')
        >>> Number("123.456").to_float()
        123.456
    """

    __slots__ = ("_text",)

    def __init__(self, text: str) -> None:
        if not isinstance(text, str):
            raise errors.UnexpectedTypeError("", type(text).__name__, "str")
        self._text = text

    @classmethod
    def create(cls, value: _typing.Any) -> Number:
        """
        Create a number from any Python number type.

        Floats use their shortest round-trip representation.

        Raises:
            UnexpectedTypeError: If value is not a number (bools included).
        """
        if isinstance(value, Number):
            return value
        if isinstance(value, bool):
            raise errors.UnexpectedTypeError("", "bool", "number")
        if isinstance(value, int):
            return cls(str(value))
        if isinstance(value, float):
            return cls(repr(value))
        if isinstance(value, _decimal.Decimal):
            return cls(str(value))
        raise errors.UnexpectedTypeError("", type(value).__name__, "number")

    @property
    def text(self) -> str:
        """The exact text of the number."""
        return self._text

    def is_integer(self) -> bool:
        """Check whether the text is an integer literal."""
        return _parse_int(self._text) is not None

    def to_int(self) -> int:
        """Interpret the number as integer (base prefixes allowed)."""
        value = _parse_int(self._text)
        if value is None:
            raise errors.UnexpectedTypeError("", f"number {self._text}", "int")
        return value

    def to_float(self) -> float:
        """Interpret the number as float."""
        try:
            return float(self.to_decimal())
        except errors.UnexpectedTypeError:
            raise errors.UnexpectedTypeError("", f"number {self._text}", "float") from None

    def to_decimal(self) -> _decimal.Decimal:
        """Interpret the number as Decimal, without any rounding."""
        value = _parse_int(self._text)
        if value is not None:
            return _decimal.Decimal(value)
        if _SEXAGESIMAL.fullmatch(self._text):
            return _parse_sexagesimal(self._text)
        try:
            return _decimal.Decimal(self._text)
        except _decimal.InvalidOperation:
            raise errors.UnexpectedTypeError("", f"number {self._text}", "decimal") from None

    def __str__(self) -> str:
        return self._text

    def __repr__(self) -> str:
        return f"Number({self._text!r})"

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Number):
            return self._text == other._text
        return NotImplemented

    def __hash__(self) -> int:
        return hash(("Number", self._text))

    def __copy__(self) -> Number:
        return self

    def __deepcopy__(self, memo: dict[int, _typing.Any]) -> Number:
        return self

    def __reduce__(self) -> tuple[type[Number], tuple[str]]:
        return (Number, (self._text,))


# YAML 1.1 integer and float forms that int() and Decimal() don't read
_OCTAL = _re.compile(r"[-+]?0[0-7_]+")
_SEXAGESIMAL = _re.compile(r"[-+]?[0-9][0-9_]*(?::[0-5]?[0-9])+(?:\.[0-9_]*)?")


def _parse_int(text: str) -> int | None:
    try:
        return int(text, 0)
    except ValueError:
        pass
    if _OCTAL.fullmatch(text):
        return int(text.replace("_", ""), 8)
    if _SEXAGESIMAL.fullmatch(text) and "." not in text:
        return int(_parse_sexagesimal(text))
    return None


def _parse_sexagesimal(text: str) -> _decimal.Decimal:
    """Read base 60 text like "1:30" (90) or "1:30.5" (90.5)."""
    sign = -1 if text.startswith("-") else 1
    value = _decimal.Decimal(0)
    for part in text.lstrip("+-").replace("_", "").split(":"):
        value = value * 60 + _decimal.Decimal(part)
    return sign * value
