"""In-memory storage."""

from __future__ import annotations

import threading as _threading
import typing as _typing

import treeconf.stores.base as base
import treeconf.tree as tree


class MemoryStorage(base.Storage):
    """
    A virtual storage that only keeps data in RAM.

    Use it as top priority layer to allow overriding settings without
    persisting them anywhere, or in tests.

    Args:
        init_path: Path the initial data is written at.
        init_data: Initial data, converted with the tree codec.

    Example:
        >>> defaults = MemoryStorage(".box", {"width": 100, "height": 50})
        >>> defaults.read()
        Node({'box': Node({'width': Number('100'), 'height': Number('50')})})
    """

    def __init__(self, init_path: str = "", init_data: _typing.Any = None) -> None:
        self._lock = _threading.Lock()
        self._tree = tree.Node()
        self._notify: base.Notifier | None = None
        if init_data is not None:
            self._tree.set(init_path, init_data)

    def read(self) -> tree.Node:
        with self._lock:
            return self._tree.copy()

    def write(self, node: tree.Node) -> None:
        with self._lock:
            self._tree = node.copy()

    def register_watcher(self, notify: base.Notifier | None) -> None:
        with self._lock:
            self._notify = notify

    def replace(self, node: tree.Node) -> None:
        """
        Replace the content as an outside party would, and notify the watcher.
        """
        with self._lock:
            self._tree = node.copy()
            notify = self._notify
        if notify is not None:
            notify()
