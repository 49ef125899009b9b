"""
Shared pytest fixtures for treeconf tests.

This file is automatically loaded by pytest. Fixtures defined here are
available to all test files without explicit imports.
"""

import os as _os
import threading as _threading
import time as _time
import typing as _typing
import unittest.mock as _mock

import pytest as _pytest

import treeconf.settings as settings_
import treeconf.tree as tree

# Seconds to wait for background threads before a test fails
TIMEOUT = 5.0


# =============================================================================
# Settings
# =============================================================================


@_pytest.fixture
def clean_env() -> dict[str, str]:
    """Return environment dict without any TREECONF_ variables."""
    return {k: v for k, v in _os.environ.items() if not k.startswith("TREECONF_")}


@_pytest.fixture
def isolated_env(clean_env: dict[str, str]):
    """
    Context manager that isolates tests from environment variables.

    Usage:
        def test_something(isolated_env):
            with isolated_env:
                settings = settings_.Settings()
    """
    return _mock.patch.dict(_os.environ, clean_env, clear=True)


@_pytest.fixture
def settings(isolated_env) -> settings_.Settings:
    """Default settings with file watching disabled, for deterministic tests."""
    with isolated_env:
        return settings_.Settings(watch_files=False)


# =============================================================================
# Listener recording
# =============================================================================


class Recorder:
    """
    Records listener callbacks and lets tests wait for them.

    Use the instance itself as callback for Config.register().
    """

    def __init__(self) -> None:
        self._cond = _threading.Condition()
        self.calls: list[tuple[list[str], list[str], list[str]]] = []

    def __call__(
        self,
        config: _typing.Any,
        modified: list[str],
        added: list[str],
        removed: list[str],
    ) -> None:
        with self._cond:
            self.calls.append((sorted(modified), sorted(added), sorted(removed)))
            self._cond.notify_all()

    def wait_for(
        self, count: int, timeout: float = TIMEOUT
    ) -> list[tuple[list[str], list[str], list[str]]]:
        """Wait until at least count calls were recorded and return them."""
        with self._cond:
            if not self._cond.wait_for(lambda: len(self.calls) >= count, timeout):
                _pytest.fail(f"expected {count} callbacks, got {len(self.calls)}: {self.calls}")
            return list(self.calls)


@_pytest.fixture
def recorder() -> Recorder:
    """A fresh listener callback recorder."""
    return Recorder()


@_pytest.fixture
def make_recorder() -> _typing.Callable[[], Recorder]:
    """Factory for tests that need more than one recorder."""
    return Recorder


def _wait_until(predicate: _typing.Callable[[], bool], timeout: float = TIMEOUT) -> None:
    deadline = _time.monotonic() + timeout
    while not predicate():
        if _time.monotonic() > deadline:
            _pytest.fail("condition not met in time")
        _time.sleep(0.01)


@_pytest.fixture
def wait_until() -> _typing.Callable[..., None]:
    """Poll a predicate until it's true, failing the test after a timeout."""
    return _wait_until


# =============================================================================
# Trees
# =============================================================================


def build_tree_a() -> tree.Node:
    """A tree with every kind of value, nested nodes and lists."""
    return tree.Node(
        {
            "someString": "someString",
            "someNumber": tree.Number("123"),
            "subnode": tree.Node(
                {
                    "a": tree.Node({"foo": "bar"}),
                    "b": tree.Node({"someFloat": tree.Number("123.456")}),
                    "c": tree.Node({"sub": tree.Node({"sub": tree.Node()})}),
                    "e": tree.Node({"sub": tree.Node({"val": "string"})}),
                    "f": [tree.Node({"sub": tree.Node()}), tree.Node({"val": True})],
                    "g": [
                        tree.Node({"sub": tree.Node({"val": False})}),
                        tree.Node({"val": True}),
                    ],
                }
            ),
        }
    )


def build_tree_b() -> tree.Node:
    """tree A with strings edited, a node replaced by a value and vice versa."""
    return tree.Node(
        {
            "someString": "someStringEdited",
            "someNumber": tree.Number("123"),
            "subnode": tree.Node(
                {
                    "a": tree.Node({"foo": tree.Node({"sub": tree.Node()})}),
                    "b": tree.Node({"someFloat": tree.Number("123.4567")}),
                    "c": "NothingToSeeHere",
                    "d": tree.Node({"sub": tree.Node({"sub": tree.Node()})}),
                    "f": [
                        tree.Node({"sub": tree.Node({"val": False})}),
                        tree.Node({"val": True}),
                    ],
                    "g": [
                        tree.Node({"sub": tree.Node({"val": False})}),
                        tree.Node({"val": True}),
                    ],
                }
            ),
        }
    )


def build_tree_ab() -> tree.Node:
    """Expected result of merging tree B into tree A."""
    result = build_tree_b()
    result["subnode"]["e"] = tree.Node({"sub": tree.Node({"val": "string"})})
    return result


@_pytest.fixture
def tree_a() -> tree.Node:
    return build_tree_a()


@_pytest.fixture
def tree_b() -> tree.Node:
    return build_tree_b()


@_pytest.fixture
def tree_ab() -> tree.Node:
    return build_tree_ab()
