"""Tests for dot-separated path helpers."""

import pytest as _pytest

import treeconf.tree as tree
import treeconf.tree.path as path_


class TestClean:
    """Tests for path normalization."""

    @_pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("foo.bar", "foo.bar"),
            (".foo.bar.", "foo.bar"),
            (".foo.\n\r.bar.", "foo.bar"),
            ("...foo...bar...", "foo.bar"),
            ("", ""),
            (".", ""),
        ],
    )
    def test_clean(self, raw: str, expected: str) -> None:
        """Leading/trailing separators and newlines go, runs collapse."""
        assert path_.clean(raw) == expected


class TestNewPath:
    """Tests for joining path elements."""

    @_pytest.mark.parametrize(
        ("elements", "expected"),
        [
            (("foo", "bar"), "foo.bar"),
            (("foo", ".bar"), "foo.bar"),
            (("foo.", "bar"), "foo.bar"),
            ((".foo.", ".bar."), "foo.bar"),
            (("foo.", "foo.baz", "bar"), "foo.foo.baz.bar"),
        ],
    )
    def test_new_path(self, elements: tuple[str, ...], expected: str) -> None:
        """Elements are joined and the result cleaned."""
        assert path_.new_path(*elements) == expected

    def test_join_keeps_separators(self) -> None:
        """join() doesn't clean."""
        assert path_.join("", "a", "b") == ".a.b"

    def test_split_empty(self) -> None:
        """An empty path splits into one empty segment."""
        assert path_.split("") == [""]
        assert path_.split(".a.b") == ["", "a", "b"]


class TestContains:
    """Tests for the segment-wise prefix check."""

    @_pytest.mark.parametrize(
        ("path", "prefix", "expected"),
        [
            (".a.b.c", ".a.b", True),
            (".a.b", ".a.b", True),
            ("a.b.c", ".a.b.", True),
            (".a.bc", ".a.b", False),
            (".a", ".a.b", False),
            (".x.a.b", ".a.b", False),
            (".anything", "", True),
            (".anything", ".", True),
            ("", "", True),
        ],
    )
    def test_contains(self, path: str, prefix: str, expected: bool) -> None:
        """Prefixes are matched by whole segments only."""
        assert path_.contains(path, prefix) is expected


class TestSegments:
    """Tests for root-relative path addressing."""

    def test_root(self) -> None:
        """Both root spellings address no keys."""
        assert path_.segments("") == []
        assert path_.segments(".") == []

    def test_keys(self) -> None:
        """The leading separator is dropped, empty keys are kept."""
        assert path_.segments(".box.width") == ["box", "width"]
        assert path_.segments(".a..b") == ["a", "", "b"]

    def test_missing_leading_separator(self) -> None:
        """A non-root path must start with the separator."""
        with _pytest.raises(tree.PathInvalidError):
            path_.segments("box.width")

    def test_is_root(self) -> None:
        """Only empty and separator-only paths are the root."""
        assert path_.is_root("")
        assert path_.is_root("..")
        assert not path_.is_root(".a")
