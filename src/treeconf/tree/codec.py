"""
Conversion between Python values and tree values.

to_tree() turns application values (primitives, sequences, mappings,
dataclasses, pydantic models) into the legal tree value set. from_tree()
goes the other way, validating against a target type with pydantic.

The tree engine only calls this module from Node.set/Node.get, so the
conversion rules can evolve without touching merge or compare.
"""

from __future__ import annotations

import collections.abc as _abc
import dataclasses as _dataclasses
import decimal as _decimal
import enum as _enum
import functools as _functools
import pathlib as _pathlib
import typing as _typing

import pydantic as _pydantic

import treeconf.tree.errors as errors
import treeconf.tree.node as node
import treeconf.tree.number as number
import treeconf.tree.path as path_


def to_tree(value: _typing.Any) -> _typing.Any:
    """
    Convert a Python value into a tree value.

    Raises:
        UnexpectedTypeError: If the value (or something inside) has no tree form.
        KeyIsNotStringError: If a mapping has a non-string key.
        PathInvalidError: If a mapping key contains the path separator.
    """
    if value is None or isinstance(value, number.Number):
        return value
    if isinstance(value, node.Node):
        return value.copy()
    # bool before int, enums before their mixed-in base types
    if isinstance(value, bool):
        return value
    if isinstance(value, _enum.Enum):
        return to_tree(value.value)
    if isinstance(value, str):
        return str(value)
    if isinstance(value, (int, float, _decimal.Decimal)):
        return number.Number.create(value)
    if isinstance(value, _pathlib.PurePath):
        return str(value)
    if isinstance(value, _pydantic.BaseModel):
        return _mapping_to_tree(
            {key: getattr(value, name) for name, key in _model_field_keys(type(value))}
        )
    if _dataclasses.is_dataclass(value) and not isinstance(value, type):
        return _mapping_to_tree(
            {field.name: getattr(value, field.name) for field in _dataclasses.fields(value)}
        )
    if isinstance(value, _abc.Mapping):
        return _mapping_to_tree(value)
    if isinstance(value, (list, tuple, set, frozenset)):
        return [to_tree(element) for element in value]
    raise errors.UnexpectedTypeError("", type(value).__name__)


def _mapping_to_tree(mapping: _abc.Mapping[_typing.Any, _typing.Any]) -> node.Node:
    result = node.Node()
    for key, value in mapping.items():
        if not isinstance(key, str):
            raise errors.KeyIsNotStringError(key, type(key).__name__)
        if path_.SEPARATOR in key:
            raise errors.PathInvalidError(key, "key contains the path separator")
        result[key] = to_tree(value)
    return result


def _model_field_keys(model: type[_pydantic.BaseModel]) -> list[tuple[str, str]]:
    """Return (attribute name, tree key) pairs; aliases become tree keys."""
    return [
        (name, field.alias or name) for name, field in model.model_fields.items()
    ]


def to_plain(value: _typing.Any) -> _typing.Any:
    """
    Lower a tree value to plain Python containers.

    Nodes become dicts, integral numbers become int and other numbers Decimal,
    so no precision is lost before validation.
    """
    if isinstance(value, node.Node):
        return {key: to_plain(child) for key, child in value.items()}
    if isinstance(value, list):
        return [to_plain(element) for element in value]
    if isinstance(value, number.Number):
        if value.is_integer():
            return value.to_int()
        return value.to_decimal()
    return value


@_functools.lru_cache(maxsize=256)
def _adapter(target: _typing.Any) -> _pydantic.TypeAdapter[_typing.Any]:
    return _pydantic.TypeAdapter(target)


def from_tree(value: _typing.Any, target: _typing.Any, *, path: str = "") -> _typing.Any:
    """
    Convert a tree value into an instance of target.

    Args:
        value: Tree value to convert.
        target: Any type pydantic can validate (int, list[str], a model, ...).
            Node and Number are returned directly (Node as a copy).
        path: Location of value, used in error messages.

    Raises:
        UnexpectedTypeError: If value doesn't fit target.
    """
    if target is node.Node:
        if not isinstance(value, node.Node):
            raise errors.UnexpectedTypeError(path, node.kind(value), "Node")
        return value.copy()
    if target is number.Number:
        if not isinstance(value, number.Number):
            raise errors.UnexpectedTypeError(path, node.kind(value), "Number")
        return value

    adapter = _adapter(target) if _is_hashable(target) else _pydantic.TypeAdapter(target)
    try:
        return adapter.validate_python(to_plain(value))
    except _pydantic.ValidationError as e:
        raise errors.UnexpectedTypeError(path, node.kind(value), _type_name(target)) from e


def decode_into(value: _typing.Any, destination: _typing.Any, *, path: str = "") -> None:
    """
    Decode a tree value into an existing object, in place.

    Supported destinations are dicts, lists, and instances of non-frozen
    dataclasses and pydantic models.

    Raises:
        CannotModifyError: If destination can't be modified in place.
        UnexpectedTypeError: If value doesn't fit destination.
    """
    if isinstance(destination, node.Node):
        if not isinstance(value, node.Node):
            raise errors.UnexpectedTypeError(path, node.kind(value), "Node")
        destination.clear()
        destination.update(value.copy())
    elif isinstance(destination, dict):
        if not isinstance(value, node.Node):
            raise errors.UnexpectedTypeError(path, node.kind(value), "dict")
        destination.clear()
        destination.update(to_plain(value))
    elif isinstance(destination, list):
        if not isinstance(value, list):
            raise errors.UnexpectedTypeError(path, node.kind(value), "list")
        destination[:] = to_plain(value)
    elif isinstance(destination, _pydantic.BaseModel):
        if destination.model_config.get("frozen"):
            raise errors.CannotModifyError(destination, type(destination).__name__)
        decoded = from_tree(value, type(destination), path=path)
        for name in type(destination).model_fields:
            setattr(destination, name, getattr(decoded, name))
    elif _dataclasses.is_dataclass(destination) and not isinstance(destination, type):
        params = getattr(type(destination), "__dataclass_params__", None)
        if params is not None and params.frozen:
            raise errors.CannotModifyError(destination, type(destination).__name__)
        decoded = from_tree(value, type(destination), path=path)
        for field in _dataclasses.fields(destination):
            setattr(destination, field.name, getattr(decoded, field.name))
    else:
        raise errors.CannotModifyError(destination, type(destination).__name__)


def _is_hashable(target: _typing.Any) -> bool:
    try:
        hash(target)
    except TypeError:
        return False
    return True


def _type_name(target: _typing.Any) -> str:
    return getattr(target, "__name__", None) or repr(target)
