"""Pick a file storage by file extension."""

from __future__ import annotations

import pathlib as _pathlib

import treeconf.settings as settings_
import treeconf.stores.base as base
import treeconf.stores.file as file
import treeconf.stores.json_file as json_file
import treeconf.stores.yaml_file as yaml_file

_YAML_SUFFIXES = (".yaml", ".yml")
_JSON_SUFFIXES = (".json",)


def use_file(
    path: str | _pathlib.Path,
    settings: settings_.Settings | None = None,
) -> file.FileStorage:
    """
    Create the storage matching the extension of path.

    Args:
        path: A .json, .yaml or .yml file.
        settings: Settings for indentation and watching. Defaults to Settings().

    Raises:
        StorageError: If the extension isn't supported.
    """
    settings = settings or settings_.Settings()
    path = _pathlib.Path(path)
    suffix = path.suffix.lower()
    if suffix in _JSON_SUFFIXES:
        return json_file.JSONFile(path, indent=settings.json_indent, watch=settings.watch_files)
    if suffix in _YAML_SUFFIXES:
        return yaml_file.YAMLFile(path, watch=settings.watch_files)
    supported = ", ".join(_JSON_SUFFIXES + _YAML_SUFFIXES)
    raise base.StorageError(path, f"unsupported file type {suffix!r} (use {supported})")
