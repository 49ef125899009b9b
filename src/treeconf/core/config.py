"""
The Config facade.

Config merges a list of storages into one tree and keeps it current:

- get() reads the current tree under a read lock, without waiting for
  any worker
- set() and reset() are serialized by the mutator thread and written to
  the top priority storage
- every change, external or own, is merged again and dispatched to the
  registered listeners by the dispatcher thread

A get() right after set() returned may still see the old state, as the
merged tree reaches the dispatcher asynchronously. Use a listener when
the new state is needed.
"""

from __future__ import annotations

import logging as _logging
import threading as _threading
import types as _types
import typing as _typing

import treeconf.core.dispatcher as dispatcher
import treeconf.core.errors as errors
import treeconf.core.loader as loader
import treeconf.core.messages as messages
import treeconf.core.mutator as mutator
import treeconf.settings as settings_
import treeconf.stores as stores
import treeconf.tree as tree

_logger = _logging.getLogger(__name__)

_T = _typing.TypeVar("_T")


class Config:
    """
    Layered configuration with persistence and change notification.

    Args:
        storages: Storages in descending priority. Values of earlier storages
            win; changes are written to the first one.
        settings: Queue sizes and file watching. Defaults to Settings().
        on_error: Called with the exception when a background reload fails.
            The previous state is kept either way.

    Raises:
        StorageError: If any storage can't be read initially.

    Example:
        >>> with Config([MemoryStorage(), MemoryStorage(".box", {"width": 100})]) as c:
        ...     c.get(".box.width", int)
        100
    """

    def __init__(
        self,
        storages: _typing.Sequence[stores.Storage],
        *,
        settings: settings_.Settings | None = None,
        on_error: mutator.ErrorHandler | None = None,
    ) -> None:
        self._settings = settings or settings_.Settings()
        self._storages = tuple(storages)
        self._close_lock = _threading.Lock()
        self._closed = False
        self._joined = False

        initial = loader.load_all(self._storages)

        self._dispatcher = dispatcher.Dispatcher(
            self,
            initial,
            queue_size=self._settings.control_queue_size,
            on_stop=self._refuse_writes,
        )
        self._mutator = mutator.Mutator(
            self._storages,
            self._dispatcher.inbox,
            queue_size=self._settings.request_queue_size,
            on_error=on_error,
        )
        self._dispatcher.start()
        self._mutator.start()
        _logger.debug("Config started with %d storages", len(self._storages))

    @property
    def storages(self) -> tuple[stores.Storage, ...]:
        """The storages, highest priority first."""
        return self._storages

    @property
    def closed(self) -> bool:
        return self._closed

    def __enter__(self) -> Config:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: _types.TracebackType | None,
    ) -> None:
        self.close()

    def _check_open(self) -> None:
        if self._closed:
            raise errors.ConfigClosedError("config is closed")

    # =========================================================================
    # Reading
    # =========================================================================

    @_typing.overload
    def get(self, path: str) -> _typing.Any: ...

    @_typing.overload
    def get(self, path: str, target: type[_T]) -> _T: ...

    def get(self, path: str, target: _typing.Any = None) -> _typing.Any:
        """
        Read the element at path from the merged tree.

        Args:
            path: Root-relative path like ".box.width"; "" is the root.
            target: Type to convert into (int, list[str], a dataclass, a
                pydantic model, ...). None returns a copy of the tree value.

        Raises:
            ElementNotFoundError: If there is nothing at path.
            PathInsideValueError: If path descends through a value.
            UnexpectedTypeError: If the element doesn't fit target.
        """
        with self._dispatcher.reading() as current:
            return current.get(path, target)

    def get_into(self, path: str, destination: _typing.Any) -> None:
        """Decode the element at path into a mutable object in place."""
        with self._dispatcher.reading() as current:
            current.get_into(path, destination)

    def get_bool(self, path: str, fallback: bool = False) -> bool:
        """Return the bool at path, or fallback."""
        with self._dispatcher.reading() as current:
            return current.get_bool(path, fallback)

    def get_str(self, path: str, fallback: str = "") -> str:
        """Return the string at path, or fallback."""
        with self._dispatcher.reading() as current:
            return current.get_str(path, fallback)

    def get_int(self, path: str, fallback: int = 0) -> int:
        """Return the integer at path, or fallback."""
        with self._dispatcher.reading() as current:
            return current.get_int(path, fallback)

    def get_float(self, path: str, fallback: float = 0.0) -> float:
        """Return the float at path, or fallback."""
        with self._dispatcher.reading() as current:
            return current.get_float(path, fallback)

    # =========================================================================
    # Writing
    # =========================================================================

    def set(self, path: str, value: _typing.Any) -> None:
        """
        Write value at path into the top priority storage.

        Writing the root path ("") with a mapping merges its top-level keys
        into the stored root.

        Raises:
            NoWritableStoreError: If there are no storages.
            ConfigClosedError: If the config is closed.
            TreeError: If value can't be converted or path is malformed.
            StorageError: If the storage can't be read or written.
        """
        self._check_open()
        self._mutator.set(path, value)

    def reset(self, path: str) -> None:
        """
        Remove path from the top priority storage.

        Values of lower priority storages at that path become visible again.
        Resetting "" clears the top priority storage.
        """
        self._check_open()
        self._mutator.reset(path)

    # =========================================================================
    # Listeners
    # =========================================================================

    def register(
        self,
        paths: _typing.Iterable[str] | None,
        callback: messages.Callback,
    ) -> int:
        """
        Register a callback for changes.

        The callback is called as callback(config, modified, added, removed)
        with the changed paths inside any of paths. No paths means every
        change. Right after registering, the callback receives the current
        state as one call listing every present path as added (lists may be
        empty if nothing matches).

        Each invocation runs in a thread of its own, and callbacks may call
        get, set, reset, register and unregister. Exceptions raised by a
        callback are not caught; they stop change dispatching, and from then
        on set, reset, register and unregister raise ConfigClosedError.

        Returns:
            Id for unregister().
        """
        self._check_open()
        return self._dispatcher.register(paths or (), callback)

    def unregister(self, listener_id: int) -> None:
        """Remove a callback. Unknown ids are ignored."""
        self._check_open()
        self._dispatcher.unregister(listener_id)

    def notify_changed(self) -> None:
        """Reload all storages, as if one of them reported a change."""
        self._check_open()
        self._mutator.notify_changed()

    # =========================================================================
    # Lifecycle
    # =========================================================================

    def close(self) -> None:
        """
        Stop watching storages and wait for the worker threads to finish.

        Queued writes and a pending reload are completed and dispatched
        first. Calling close() again does nothing.

        Raises:
            RuntimeError: If called from a listener callback.
        """
        if dispatcher.in_listener():
            raise RuntimeError("close() can't be called from a listener callback")
        with self._close_lock:
            if self._joined:
                return
            self._closed = True
            self._joined = True
        self._mutator.close()
        self._mutator.join()
        self._dispatcher.join()
        _logger.debug("Config closed")

    def _refuse_writes(self) -> None:
        # Runs in the dispatcher thread once it stops taking messages.
        with self._close_lock:
            if not self._closed:
                _logger.warning("Change dispatching stopped, closing config")
            self._closed = True
        self._mutator.close()
