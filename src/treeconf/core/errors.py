"""Errors raised by the Config machinery."""

from __future__ import annotations


class ConfigClosedError(Exception):
    """Raised when using a Config (or one of its tasks) after it was closed."""

    pass


class NoWritableStoreError(Exception):
    """Raised when writing while no storage is configured."""

    def __init__(self) -> None:
        super().__init__("There are no storages to write to")
