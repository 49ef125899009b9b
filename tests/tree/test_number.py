"""Tests for exact-text numbers."""

import copy as _copy
import decimal as _decimal
import pickle as _pickle

import pytest as _pytest

import treeconf.tree as tree


class TestCreate:
    """Tests for Number.create()."""

    def test_int(self) -> None:
        """Integers keep every digit."""
        assert tree.Number.create(12345678901234567890).text == "12345678901234567890"

    def test_float_shortest_form(self) -> None:
        """Floats use the shortest text that reads back the same."""
        assert tree.Number.create(0.1).text == "0.1"
        assert tree.Number.create(123.456).text == "123.456"

    def test_decimal(self) -> None:
        """Decimals keep their exact text, trailing zeros included."""
        assert tree.Number.create(_decimal.Decimal("1.50")).text == "1.50"

    def test_bool_rejected(self) -> None:
        """Bools are not numbers."""
        with _pytest.raises(tree.UnexpectedTypeError):
            tree.Number.create(True)

    def test_non_number_rejected(self) -> None:
        """Strings are not converted implicitly."""
        with _pytest.raises(tree.UnexpectedTypeError):
            tree.Number.create("123")

    def test_text_required(self) -> None:
        """The constructor only takes text."""
        with _pytest.raises(tree.UnexpectedTypeError):
            tree.Number(123)  # type: ignore[arg-type]


class TestConversion:
    """Tests for interpreting the text."""

    def test_to_int(self) -> None:
        """Base prefixes and underscores are accepted."""
        assert tree.Number("-5").to_int() == -5
        assert tree.Number("0x1F").to_int() == 31
        assert tree.Number("1_000").to_int() == 1000

    def test_to_int_fails_for_fraction(self) -> None:
        """Fractions are not integers."""
        with _pytest.raises(tree.UnexpectedTypeError):
            tree.Number("1.5").to_int()

    def test_to_float(self) -> None:
        """Floats and integer literals convert to float."""
        assert tree.Number("123.456").to_float() == 123.456
        assert tree.Number("0x10").to_float() == 16.0

    def test_to_float_fails_for_garbage(self) -> None:
        """Text that is no number raises."""
        with _pytest.raises(tree.UnexpectedTypeError):
            tree.Number("abc").to_float()

    def test_to_decimal_is_exact(self) -> None:
        """No rounding happens on the way to Decimal."""
        assert tree.Number("0.1000000000000000000001").to_decimal() == _decimal.Decimal(
            "0.1000000000000000000001"
        )

    def test_is_integer(self) -> None:
        """Only integer literals count."""
        assert tree.Number("42").is_integer()
        assert not tree.Number("42.0").is_integer()
        assert not tree.Number("1e3").is_integer()


class TestYAMLForms:
    """Tests for YAML 1.1 integer and float spellings."""

    def test_leading_zero_is_octal(self) -> None:
        """A leading zero makes an octal integer."""
        assert tree.Number("010").to_int() == 8
        assert tree.Number("-0755").to_int() == -493
        assert tree.Number("0o10").to_int() == 8
        assert tree.Number("010").is_integer()

    def test_sexagesimal_integer(self) -> None:
        """Colons separate base 60 digits."""
        assert tree.Number("1:30").to_int() == 90
        assert tree.Number("-1:00:00").to_int() == -3600
        assert tree.Number("1:30").is_integer()

    def test_sexagesimal_float(self) -> None:
        """Base 60 floats have a fraction after the last digit."""
        number = tree.Number("190:20:30.15")
        assert not number.is_integer()
        assert number.to_decimal() == _decimal.Decimal("685230.15")
        assert number.to_float() == 685230.15

    def test_octal_float_and_decimal(self) -> None:
        """Float and Decimal views agree with the integer one."""
        assert tree.Number("010").to_float() == 8.0
        assert tree.Number("010").to_decimal() == _decimal.Decimal(8)

    def test_to_decimal_fails_for_garbage(self) -> None:
        """Text that is no number raises."""
        with _pytest.raises(tree.UnexpectedTypeError):
            tree.Number("1:2:x").to_decimal()


class TestIdentity:
    """Tests for equality, hashing and copying."""

    def test_equality_by_text(self) -> None:
        """Numbers with the same value but different text differ."""
        assert tree.Number("1.5") == tree.Number("1.5")
        assert tree.Number("1.5") != tree.Number("1.50")
        assert tree.Number("1") != 1

    def test_hash(self) -> None:
        """Equal numbers hash equally."""
        assert {tree.Number("7"), tree.Number("7")} == {tree.Number("7")}

    def test_copy_and_pickle(self) -> None:
        """Numbers are immutable and survive pickling."""
        number = tree.Number("3.14")
        assert _copy.deepcopy(number) is number
        assert _pickle.loads(_pickle.dumps(number)) == number

    def test_str_and_repr(self) -> None:
        """str() is the text itself."""
        assert str(tree.Number("3.14")) == "3.14"
        assert repr(tree.Number("3.14")) == "Number('3.14')"
