"""
Messages exchanged with the Config worker threads.

Requests carry a Future the worker resolves once the request is handled;
the calling thread blocks on it.
"""

from __future__ import annotations

import concurrent.futures as _futures
import dataclasses as _dataclasses
import typing as _typing

if _typing.TYPE_CHECKING:
    import treeconf.core.config as config

# callback(config, modified, added, removed)
Callback = _typing.Callable[["config.Config", list[str], list[str], list[str]], None]


@_dataclasses.dataclass(frozen=True, slots=True)
class SetRequest:
    """Write value at path into the top priority storage."""

    path: str
    value: _typing.Any
    result: _futures.Future[None]


@_dataclasses.dataclass(frozen=True, slots=True)
class ResetRequest:
    """Remove path from the top priority storage."""

    path: str
    result: _futures.Future[None]


@_dataclasses.dataclass(frozen=True, slots=True)
class Reload:
    """Re-read and merge all storages."""

    pass


RELOAD = Reload()


@_dataclasses.dataclass(frozen=True, slots=True)
class RegisterRequest:
    """Add a listener; resolves to its id."""

    paths: tuple[str, ...]
    callback: Callback
    result: _futures.Future[int]


@_dataclasses.dataclass(frozen=True, slots=True)
class UnregisterRequest:
    """Remove a listener."""

    listener_id: int
    result: _futures.Future[None]


@_dataclasses.dataclass(frozen=True, slots=True)
class ListenerDone:
    """A listener invocation submitted by the dispatcher finished."""

    future: _futures.Future[None]


@_dataclasses.dataclass(frozen=True, slots=True)
class Listener:
    """A registered callback with the paths it watches."""

    paths: tuple[str, ...]
    callback: Callback
