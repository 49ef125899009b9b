"""
Config machinery: storage merging, serialized writes, listener dispatch.
"""

from treeconf.core.config import Config
from treeconf.core.errors import ConfigClosedError, NoWritableStoreError
from treeconf.core.loader import load_all
from treeconf.core.messages import Callback

__all__ = [
    "Callback",
    "Config",
    "ConfigClosedError",
    "NoWritableStoreError",
    "load_all",
]
