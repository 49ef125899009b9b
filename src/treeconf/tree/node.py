"""
Hierarchical tree nodes.

A Node maps string keys to children. Every child is exactly one of:

- Node (nested mapping)
- list (elements are tree values themselves, never merged element-wise)
- bool, str, Number or None

Use Node.check() to validate that a structure only contains these types.
Trees coming out of the codec and the stores always pass check().
"""

from __future__ import annotations

import typing as _typing

import treeconf.tree.codec as codec
import treeconf.tree.errors as errors
import treeconf.tree.number as number
import treeconf.tree.path as path_

_T = _typing.TypeVar("_T")


class Node(dict[str, _typing.Any]):
    """
    A mapping from key to child, addressed with dot-separated paths.

    Keys must not contain the path separator. Empty keys are legal.

    Example:
        >>> tree = Node()
        >>> tree.set(".box.width", 100)
        >>> tree
        Node({'box': Node({'width': Number('100')})})
        >>> tree.get(".box.width", int)
        100

    Note:
        Node is a dict, but ``get`` and ``copy`` don't keep the dict contract.
        ``get(path, target)`` takes a path like ``".box"`` and a target type,
        not a key and a default. A bare key raises PathInvalidError and a
        missing element raises ElementNotFoundError.
        ``copy`` is deep. Code expecting a plain mapping should get
        ``codec.to_plain(node)`` or use item access (``tree["box"]``).
    """

    def __repr__(self) -> str:
        return f"Node({dict.__repr__(self)})"

    # =========================================================================
    # Path access
    # =========================================================================

    def create_path(self, path: str) -> Node:
        """
        Make sure every node along path exists and return the last one.

        Existing values that are not nodes are overwritten with empty nodes.

        Raises:
            PathInvalidError: If path doesn't start with the separator.
        """
        return self._create(path_.segments(path))

    def _create(self, keys: list[str]) -> Node:
        current = self
        for key in keys:
            child = current[key] if key in current else None
            if not isinstance(child, Node):
                child = Node()
                current[key] = child
            current = child
        return current

    def set(self, path: str, value: _typing.Any) -> None:
        """
        Convert value into tree form and write it at path.

        Writing to the root path merges the top-level keys of the converted
        value into this node; other root keys are kept. Any other path
        replaces the element at that key, creating nodes along the way.

        Raises:
            PathInvalidError: If path is malformed.
            UnexpectedTypeError: If value can't be converted, or the root
                is written with something other than a mapping.
            KeyIsNotStringError: If a mapping inside value has non-string keys.
        """
        keys = path_.segments(path)
        converted = codec.to_tree(value)

        if not keys:
            if not isinstance(converted, Node):
                raise errors.UnexpectedTypeError(path, kind(converted), "Node")
            self.update(converted)
            return

        parent = self._create(keys[:-1])
        parent[keys[-1]] = converted

    def _lookup(self, path: str) -> _typing.Any:
        current: _typing.Any = self
        for key in path_.segments(path):
            if not isinstance(current, Node):
                raise errors.PathInsideValueError(path)
            if key not in current:
                raise errors.ElementNotFoundError(path)
            current = current[key]
        return current

    @_typing.overload
    def get(self, path: str) -> _typing.Any: ...

    @_typing.overload
    def get(self, path: str, target: type[_T]) -> _T: ...

    def get(self, path: str, target: _typing.Any = None) -> _typing.Any:
        """
        Read the element at path.

        Args:
            path: Root-relative path.
            target: Type to convert into. None returns a copy of the tree value.

        Raises:
            ElementNotFoundError: If an element along path doesn't exist.
            PathInsideValueError: If path descends through a value.
            UnexpectedTypeError: If the element doesn't fit target.
        """
        value = self._lookup(path)
        if target is None:
            return copy_value(value)
        return codec.from_tree(value, target, path=path)

    def get_into(self, path: str, destination: _typing.Any) -> None:
        """
        Decode the element at path into an existing mutable object.

        Raises:
            CannotModifyError: If destination can't be modified in place.
        """
        codec.decode_into(self._lookup(path), destination, path=path)

    def get_bool(self, path: str, fallback: bool = False) -> bool:
        """Return the bool at path, or fallback on any error."""
        return self._get_or(path, bool, fallback)

    def get_str(self, path: str, fallback: str = "") -> str:
        """Return the string at path, or fallback on any error."""
        return self._get_or(path, str, fallback)

    def get_int(self, path: str, fallback: int = 0) -> int:
        """Return the integer at path, or fallback on any error."""
        return self._get_or(path, int, fallback)

    def get_float(self, path: str, fallback: float = 0.0) -> float:
        """Return the float at path, or fallback on any error."""
        return self._get_or(path, float, fallback)

    def _get_or(self, path: str, target: type[_T], fallback: _T) -> _T:
        try:
            return self.get(path, target)
        except errors.TreeError:
            return fallback

    def remove(self, path: str) -> None:
        """
        Remove the element at path.

        The root path can't be detached, so removing it clears all children.
        Removing something that doesn't exist does nothing.

        Raises:
            PathInvalidError: If path is malformed.
            PathInsideValueError: If path descends through a value.
        """
        keys = path_.segments(path)
        if not keys:
            self.clear()
            return

        current: _typing.Any = self
        for key in keys[:-1]:
            if key not in current:
                return
            current = current[key]
            if not isinstance(current, Node):
                raise errors.PathInsideValueError(path)
        current.pop(keys[-1], None)

    # =========================================================================
    # Structural operations
    # =========================================================================

    def compare(self, new: Node) -> tuple[list[str], list[str], list[str]]:
        """
        Compare this tree with new.

        Returns:
            Tuple of (modified, added, removed) paths, in no particular order.
            A type change between node and value reports the key as modified
            and every path below the vanished/appeared node as removed/added.
            Changes inside a list are reported as a change of the list.
        """
        modified: list[str] = []
        added: list[str] = []
        removed: list[str] = []
        _compare(self, new, "", modified, added, removed)
        return modified, added, removed

    def merge(self, new: Node) -> None:
        """
        Merge new into this tree, in place.

        - If both elements are nodes, their children are merged
        - Otherwise the element of new wins, lists included
        - Elements only present in this tree are kept
        - Elements only present in new are added
        """
        for key, new_value in new.items():
            value = self[key] if key in self else None
            if isinstance(value, Node) and isinstance(new_value, Node):
                value.merge(new_value)
            else:
                self[key] = copy_value(new_value)

    def copy(self) -> Node:  # type: ignore[override]
        """Return a deep copy. Scalars are shared, containers are not."""
        return Node((key, copy_value(value)) for key, value in self.items())

    def check(self) -> None:
        """
        Validate the whole structure.

        List elements are reported with their index as pseudo path segment.

        Raises:
            UnexpectedTypeError: For the first value of an illegal type.
            KeyIsNotStringError: For a key that is not a string.
            PathInvalidError: For a key containing the separator.
        """
        _check(self, "")


def kind(value: _typing.Any) -> str:
    """Name the kind of a tree value, for messages."""
    if value is None:
        return "None"
    return type(value).__name__


def copy_value(value: _typing.Any) -> _typing.Any:
    """Deep copy a tree value."""
    if isinstance(value, Node):
        return value.copy()
    if isinstance(value, list):
        return [copy_value(element) for element in value]
    return value


def _collect(node: Node, prefix: str, out: list[str]) -> None:
    for key, value in node.items():
        child = prefix + path_.SEPARATOR + key
        out.append(child)
        if isinstance(value, Node):
            _collect(value, child, out)


def _compare(
    old: Node,
    new: Node,
    prefix: str,
    modified: list[str],
    added: list[str],
    removed: list[str],
) -> None:
    for key, value in old.items():
        child = prefix + path_.SEPARATOR + key
        if key not in new:
            removed.append(child)
            if isinstance(value, Node):
                _collect(value, child, removed)
            continue

        new_value = new[key]
        old_is_node = isinstance(value, Node)
        new_is_node = isinstance(new_value, Node)
        if old_is_node and new_is_node:
            _compare(value, new_value, child, modified, added, removed)
        elif old_is_node:
            modified.append(child)
            _collect(value, child, removed)
        elif new_is_node:
            modified.append(child)
            _collect(new_value, child, added)
        elif type(value) is not type(new_value) or value != new_value:
            modified.append(child)

    for key, new_value in new.items():
        if key in old:
            continue
        child = prefix + path_.SEPARATOR + key
        added.append(child)
        if isinstance(new_value, Node):
            _collect(new_value, child, added)


def _check(value: _typing.Any, location: str) -> None:
    if isinstance(value, Node):
        for key, child in value.items():
            if not isinstance(key, str):
                raise errors.KeyIsNotStringError(key, type(key).__name__)
            if path_.SEPARATOR in key:
                raise errors.PathInvalidError(
                    location + path_.SEPARATOR + key, "key contains the path separator"
                )
            _check(child, location + path_.SEPARATOR + key)
    elif isinstance(value, list):
        for index, element in enumerate(value):
            _check(element, location + path_.SEPARATOR + str(index))
    elif value is None or isinstance(value, (bool, str, number.Number)):
        return
    else:
        raise errors.UnexpectedTypeError(location or path_.SEPARATOR, type(value).__name__)
