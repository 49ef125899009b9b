"""
Configuration storages.

Each storage backs one configuration layer: a file on disk, or plain
memory. Storages are passed to treeconf.Config in priority order.
"""

from treeconf.stores.base import Notifier, Storage, StorageError
from treeconf.stores.factory import use_file
from treeconf.stores.file import FileStorage
from treeconf.stores.json_file import JSONFile
from treeconf.stores.memory import MemoryStorage
from treeconf.stores.yaml_file import YAMLFile

__all__ = [
    "FileStorage",
    "JSONFile",
    "MemoryStorage",
    "Notifier",
    "Storage",
    "StorageError",
    "YAMLFile",
    "use_file",
]
