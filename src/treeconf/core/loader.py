"""Reading and merging all storages."""

from __future__ import annotations

import logging as _logging
import typing as _typing

import treeconf.stores as stores
import treeconf.tree as tree

_logger = _logging.getLogger(__name__)


def load_all(storages: _typing.Sequence[stores.Storage]) -> tree.Node:
    """
    Read every storage and merge them into one tree.

    Storages are given in descending priority. They are merged starting
    with the last one, so values from storages earlier in the list win.

    Raises:
        StorageError: From the first storage that fails to read. No partial
            tree is returned.
    """
    result = tree.Node()
    for storage in reversed(storages):
        layer = storage.read()
        _logger.debug("Merging %r (%d top-level keys)", storage, len(layer))
        result.merge(layer)
    return result
