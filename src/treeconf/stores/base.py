"""
Storage contract.

A storage is a backing medium for one configuration layer. The core only
needs three things from it: read the whole tree, write the whole tree, and
tell a single subscriber that something changed.
"""

from __future__ import annotations

import abc as _abc
import pathlib as _pathlib
import typing as _typing

import treeconf.tree as tree

# Called by a storage when its content changed. Must not block.
Notifier = _typing.Callable[[], None]


class StorageError(Exception):
    """Error reading, writing or watching a storage."""

    def __init__(self, location: str | _pathlib.Path, message: str) -> None:
        self.location = location
        super().__init__(f"Storage {location}: {message}")


class Storage(_abc.ABC):
    """
    Abstract base class for configuration storages.

    Implementations must treat a missing medium (e.g. a file that doesn't
    exist yet) as an empty tree, and should write atomically so a crash
    never corrupts what was stored before.
    """

    @_abc.abstractmethod
    def read(self) -> tree.Node:
        """
        Return the stored tree.

        The returned node belongs to the caller and may be modified freely.

        Raises:
            StorageError: If the medium exists but can't be read or parsed.
        """
        ...

    @_abc.abstractmethod
    def write(self, node: tree.Node) -> None:
        """
        Replace the stored tree with node.

        Raises:
            StorageError: If writing fails.
        """
        ...

    @_abc.abstractmethod
    def register_watcher(self, notify: Notifier | None) -> None:
        """
        Register the notifier called when the stored data changes.

        Only one notifier can be registered at a time; registering a new one
        replaces the previous one. Pass None to unregister.

        Raises:
            StorageError: If watching can't be set up.
        """
        ...
