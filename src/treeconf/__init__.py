"""
treeconf - hierarchical configuration with layered storages.

Merges several storages (files or memory) by priority into one tree,
reads and writes values at dot-separated paths, persists writes to the
top priority storage, reloads when a storage changes and tells listeners
which paths were modified, added or removed.
"""

import importlib.metadata as _metadata

# Version is defined in pyproject.toml - read it and parse into tuple (primary representation)
_raw_version = _metadata.version("treeconf")
__version_info__: tuple[int, int, int] = tuple(int(x) for x in _raw_version.split(".")[:3])  # type: ignore[assignment]
__version__: str = ".".join(str(x) for x in __version_info__)

from treeconf.core import Config, ConfigClosedError, NoWritableStoreError  # noqa: E402
from treeconf.settings import Settings  # noqa: E402
from treeconf.stores import JSONFile, MemoryStorage, Storage, StorageError, YAMLFile  # noqa: E402
from treeconf.tree import Node, Number, TreeError  # noqa: E402

__all__ = [
    "__version__",
    "__version_info__",
    "Config",
    "ConfigClosedError",
    "JSONFile",
    "MemoryStorage",
    "Node",
    "NoWritableStoreError",
    "Number",
    "Settings",
    "Storage",
    "StorageError",
    "TreeError",
    "YAMLFile",
]
