"""
Mutation serializer.

A single thread owns every write to the top priority storage. Set and
reset requests are handled one at a time in arrival order: the storage is
read fresh, modified at the requested path and written back. The same
thread reloads and merges all storages whenever a storage reports a
change (or after its own writes) and hands the merged tree on to the
dispatcher.
"""

from __future__ import annotations

import concurrent.futures as _futures
import logging as _logging
import threading as _threading
import typing as _typing

import treeconf.core.errors as errors
import treeconf.core.loader as loader
import treeconf.core.mailbox as mailbox
import treeconf.core.messages as messages
import treeconf.stores as stores
import treeconf.tree as tree

_logger = _logging.getLogger(__name__)

ErrorHandler = _typing.Callable[[Exception], None]

_Message = _typing.Union[messages.SetRequest, messages.ResetRequest, messages.Reload]


class Mutator:
    """
    Serializes writes and reloads.

    Args:
        storages: Storages in descending priority; index 0 is written to.
        output: Mailbox that receives merged trees. Trees are offered to its
            slot, so only the most recent unconsumed tree is kept.
        queue_size: Pending requests before set()/reset() block.
        on_error: Called with the exception when a background reload fails.
    """

    def __init__(
        self,
        storages: _typing.Sequence[stores.Storage],
        output: mailbox.Mailbox[_typing.Any],
        *,
        queue_size: int,
        on_error: ErrorHandler | None = None,
    ) -> None:
        self._storages = tuple(storages)
        self._output = output
        self._on_error = on_error
        self._inbox: mailbox.Mailbox[_Message] = mailbox.Mailbox(queue_size, "mutator")
        self._reload_pending = False
        self._thread = _threading.Thread(
            target=self._run,
            name="treeconf-mutator",
            daemon=True,
        )

    def start(self) -> None:
        self._thread.start()

    def close(self) -> None:
        """Stop accepting requests. Queued work is still finished."""
        self._inbox.close()

    def join(self) -> None:
        self._thread.join()

    def notify_changed(self) -> None:
        """Request a reload. Never blocks; pending requests are merged."""
        self._inbox.offer_latest(messages.RELOAD)

    def set(self, path: str, value: _typing.Any) -> None:
        """Write value at path into the top priority storage and wait for the result."""
        result: _futures.Future[None] = _futures.Future()
        self._inbox.put(messages.SetRequest(path, value, result))
        result.result()

    def reset(self, path: str) -> None:
        """Remove path from the top priority storage and wait for the result."""
        result: _futures.Future[None] = _futures.Future()
        self._inbox.put(messages.ResetRequest(path, result))
        result.result()

    # =========================================================================
    # Worker thread
    # =========================================================================

    def _run(self) -> None:
        self._register_watchers(self.notify_changed)
        try:
            while (message := self._inbox.get()) is not None:
                self._handle(message)
            # notify_changed() is a no-op once closed
            if self._reload_pending:
                self._reload()
        finally:
            self._register_watchers(None)
            self._output.close()
            _logger.debug("Mutator stopped")

    def _handle(self, message: _Message) -> None:
        if isinstance(message, messages.SetRequest):
            path, value = message.path, message.value
            self._reply(message.result, lambda node: node.set(path, value))
        elif isinstance(message, messages.ResetRequest):
            path = message.path
            self._reply(message.result, lambda node: node.remove(path))
        elif isinstance(message, messages.Reload):
            self._reload()
        else:
            raise TypeError(f"Unknown message type: {type(message).__name__}")

    def _reply(
        self,
        result: _futures.Future[None],
        mutate: _typing.Callable[[tree.Node], None],
    ) -> None:
        try:
            self._write(mutate)
        except Exception as e:  # handed to the waiting caller
            result.set_exception(e)
            return
        result.set_result(None)
        self._reload_pending = True
        self.notify_changed()

    def _write(self, mutate: _typing.Callable[[tree.Node], None]) -> None:
        if not self._storages:
            raise errors.NoWritableStoreError()
        storage = self._storages[0]

        # Mutate what the storage holds, not the merged tree, so values of
        # lower priority storages don't get copied into it.
        node = storage.read()
        mutate(node)
        storage.write(node)

    def _reload(self) -> None:
        self._reload_pending = False
        try:
            merged = loader.load_all(self._storages)
        except Exception as e:
            _logger.warning("Reloading configuration failed, keeping previous state: %s", e)
            if self._on_error is not None:
                self._on_error(e)
            return
        self._output.offer_latest(merged)

    def _register_watchers(self, notify: stores.Notifier | None) -> None:
        for storage in self._storages:
            try:
                storage.register_watcher(notify)
            except stores.StorageError as e:
                _logger.warning("Can't watch %r for changes: %s", storage, e)
