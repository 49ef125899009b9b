"""
In-memory configuration trees.

Provides the Node structure with path access, structural compare, deep
merge and copy, exact-text Number values, path helpers and the codec that
converts application values to and from tree form.
"""

import treeconf.tree.codec as codec
import treeconf.tree.path as path
from treeconf.tree.errors import (
    CannotModifyError,
    ElementNotFoundError,
    KeyIsNotStringError,
    PathInsideValueError,
    PathInvalidError,
    TreeError,
    UnexpectedTypeError,
)
from treeconf.tree.node import Node, copy_value, kind
from treeconf.tree.number import Number

__all__ = [
    "CannotModifyError",
    "ElementNotFoundError",
    "KeyIsNotStringError",
    "Node",
    "Number",
    "PathInsideValueError",
    "PathInvalidError",
    "TreeError",
    "UnexpectedTypeError",
    "codec",
    "copy_value",
    "kind",
    "path",
]
