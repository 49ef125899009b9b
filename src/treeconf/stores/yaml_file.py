"""
YAML file storage.

Uses PyYAML with loader/dumper subclasses that keep numbers as exact
text instead of converting them to int or float.
"""

from __future__ import annotations

import typing as _typing

import yaml as _yaml

import treeconf.stores.file as file
import treeconf.tree as tree

_INT_TAG = "tag:yaml.org,2002:int"
_FLOAT_TAG = "tag:yaml.org,2002:float"
_TIMESTAMP_TAG = "tag:yaml.org,2002:timestamp"

# YAML spellings of special floats, mapped to what float() understands
_SPECIAL_FLOATS = {
    ".inf": "inf",
    "+.inf": "inf",
    "-.inf": "-inf",
    ".nan": "nan",
}
_YAML_FLOATS = {"inf": ".inf", "-inf": "-.inf", "nan": ".nan"}


class NumberLoader(_yaml.SafeLoader):
    """Safe YAML loader that produces Number for int and float scalars."""

    def construct_number(self, node: _yaml.ScalarNode) -> tree.Number:
        text = self.construct_scalar(node)
        return tree.Number(_SPECIAL_FLOATS.get(text.lower(), text))


NumberLoader.add_constructor(_INT_TAG, NumberLoader.construct_number)
NumberLoader.add_constructor(_FLOAT_TAG, NumberLoader.construct_number)
# dates stay text, the tree has no date type
NumberLoader.add_constructor(_TIMESTAMP_TAG, _yaml.SafeLoader.construct_yaml_str)


class NumberDumper(_yaml.SafeDumper):
    """Safe YAML dumper that writes Node as mapping and Number verbatim."""

    def represent_number(self, data: tree.Number) -> _yaml.ScalarNode:
        tag = _INT_TAG if data.is_integer() else _FLOAT_TAG
        return self.represent_scalar(tag, _YAML_FLOATS.get(data.text.lower(), data.text))

    def represent_node(self, data: tree.Node) -> _yaml.MappingNode:
        return self.represent_mapping("tag:yaml.org,2002:map", data)

    def ignore_aliases(self, data: _typing.Any) -> bool:
        # numbers are shared between trees, never anchor them
        return isinstance(data, tree.Number) or super().ignore_aliases(data)


NumberDumper.add_representer(tree.Number, NumberDumper.represent_number)
NumberDumper.add_representer(tree.Node, NumberDumper.represent_node)


def load(text: str) -> _typing.Any:
    """Parse YAML text, numbers as Number."""
    return _yaml.load(text, Loader=NumberLoader)


def dump(value: _typing.Any) -> str:
    """Serialize a tree value as block style YAML, keeping key order."""
    return _yaml.dump(
        value,
        Dumper=NumberDumper,
        default_flow_style=False,
        sort_keys=False,
        allow_unicode=True,
    )


class YAMLFile(file.FileStorage):
    """
    A configuration layer stored as YAML file.

    Args:
        path: Location of the file. It doesn't need to exist.
        watch: Whether changes on disk trigger a reload.
    """

    def _decode(self, text: str) -> tree.Node:
        try:
            data = load(text)
        except _yaml.YAMLError as e:
            raise ValueError(str(e)) from e
        if data is None:
            return tree.Node()
        if not isinstance(data, dict):
            raise tree.UnexpectedTypeError("", type(data).__name__, "mapping")
        result = tree.codec.to_tree(data)
        result.check()
        return result

    def _encode(self, node: tree.Node) -> str:
        return dump(node)
