"""
Tree update and listener dispatch.

The dispatcher thread owns the authoritative tree and the listener
registry. For every merged tree it receives it computes the changes
against the current tree, swaps the tree under the write lock and
notifies the listeners concurrently, each on a thread of its own. A new
tree is only taken once every listener of the previous round returned, so
listeners see states in order and never two rounds at once.

Listener exceptions are not caught. They are re-raised in the dispatcher
thread (and end up in threading.excepthook), which stops dispatching.
The on_stop hook lets the owner refuse further writes from then on.
"""

from __future__ import annotations

import concurrent.futures as _futures
import contextlib as _contextlib
import logging as _logging
import threading as _threading
import typing as _typing

import treeconf.core.errors as errors
import treeconf.core.mailbox as mailbox
import treeconf.core.messages as messages
import treeconf.core.rwlock as rwlock
import treeconf.tree as tree

if _typing.TYPE_CHECKING:
    import treeconf.core.config as config

_logger = _logging.getLogger(__name__)

ROOT_FILTER = ""

_local = _threading.local()


def in_listener() -> bool:
    """Check whether the current thread is running a listener callback."""
    return getattr(_local, "in_listener", False)


def filter_paths(paths: list[str], filters: _typing.Sequence[str]) -> list[str]:
    """Return the paths contained in at least one of filters, in order."""
    return [p for p in paths if any(tree.path.contains(p, f) for f in filters)]


class Dispatcher:
    """
    Owner of the current tree and the listeners.

    Args:
        owner: Config passed as first argument to callbacks.
        initial: The tree to start with.
        queue_size: Pending register/unregister requests before callers block.
        on_stop: Called from the dispatcher thread once it stops taking
            messages, normally or because a listener raised.
    """

    def __init__(
        self,
        owner: config.Config,
        initial: tree.Node,
        *,
        queue_size: int,
        on_stop: _typing.Callable[[], None] | None = None,
    ) -> None:
        self._owner = owner
        self._tree = initial
        self._lock = rwlock.RWLock()
        self._inbox: mailbox.Mailbox[_typing.Any] = mailbox.Mailbox(queue_size, "dispatcher")
        self._listeners: dict[int, messages.Listener] = {}
        self._next_id = 0
        self._in_flight: set[_futures.Future[None]] = set()
        self._on_stop = on_stop
        self._thread = _threading.Thread(
            target=self._run,
            name="treeconf-dispatcher",
            daemon=True,
        )

    @property
    def inbox(self) -> mailbox.Mailbox[_typing.Any]:
        """Mailbox receiving merged trees (slot) and listener requests."""
        return self._inbox

    def start(self) -> None:
        self._thread.start()

    def join(self) -> None:
        self._thread.join()

    @_contextlib.contextmanager
    def reading(self) -> _typing.Iterator[tree.Node]:
        """Hold the read lock and yield the current tree. Don't modify it."""
        with self._lock.read():
            yield self._tree

    def register(self, paths: _typing.Iterable[str], callback: messages.Callback) -> int:
        result: _futures.Future[int] = _futures.Future()
        self._inbox.put(messages.RegisterRequest(tuple(paths), callback, result))
        return result.result()

    def unregister(self, listener_id: int) -> None:
        result: _futures.Future[None] = _futures.Future()
        self._inbox.put(messages.UnregisterRequest(listener_id, result))
        result.result()

    # =========================================================================
    # Worker thread
    # =========================================================================

    def _run(self) -> None:
        try:
            while (message := self._inbox.get(accept_latest=not self._in_flight)) is not None:
                self._handle(message)
            for future in list(self._in_flight):
                future.result()
        finally:
            self._inbox.close()
            if self._on_stop is not None:
                self._on_stop()
            for message in self._inbox.drain():
                self._reject(message)
            _futures.wait(list(self._in_flight))
            _logger.debug("Dispatcher stopped")

    def _handle(self, message: _typing.Any) -> None:
        if isinstance(message, tree.Node):
            self._update(message)
        elif isinstance(message, messages.ListenerDone):
            self._in_flight.discard(message.future)
            message.future.result()
        elif isinstance(message, messages.RegisterRequest):
            self._register(message)
        elif isinstance(message, messages.UnregisterRequest):
            self._listeners.pop(message.listener_id, None)
            message.result.set_result(None)
        else:
            raise TypeError(f"Unknown message type: {type(message).__name__}")

    def _update(self, new: tree.Node) -> None:
        # Only this thread replaces the tree, so comparing needs no lock.
        modified, added, removed = self._tree.compare(new)
        with self._lock.write():
            self._tree = new

        if not (modified or added or removed):
            return
        _logger.debug(
            "Tree changed: %d modified, %d added, %d removed",
            len(modified),
            len(added),
            len(removed),
        )
        for listener in self._listeners.values():
            self._submit(listener, modified, added, removed, always=False)

    def _register(self, request: messages.RegisterRequest) -> None:
        listener_id = self._next_id
        self._next_id += 1
        listener = messages.Listener(request.paths or (ROOT_FILTER,), request.callback)
        self._listeners[listener_id] = listener
        request.result.set_result(listener_id)

        # The new listener alone gets the current state as "everything added".
        modified, added, removed = tree.Node().compare(self._tree)
        self._submit(listener, modified, added, removed, always=True)

    def _submit(
        self,
        listener: messages.Listener,
        modified: list[str],
        added: list[str],
        removed: list[str],
        *,
        always: bool,
    ) -> None:
        # One thread per invocation; listeners of a round may wait on each other.
        future: _futures.Future[None] = _futures.Future()
        self._in_flight.add(future)
        future.add_done_callback(lambda f: self._inbox.post(messages.ListenerDone(f)))
        _threading.Thread(
            target=self._run_listener,
            args=(future, listener, modified, added, removed, always),
            name="treeconf-listener",
            daemon=True,
        ).start()

    def _run_listener(
        self,
        future: _futures.Future[None],
        listener: messages.Listener,
        modified: list[str],
        added: list[str],
        removed: list[str],
        always: bool,
    ) -> None:
        future.set_running_or_notify_cancel()
        try:
            self._deliver(listener, modified, added, removed, always)
        except BaseException as e:
            # Re-raised by the dispatcher thread when it handles ListenerDone.
            future.set_exception(e)
        else:
            future.set_result(None)

    def _deliver(
        self,
        listener: messages.Listener,
        modified: list[str],
        added: list[str],
        removed: list[str],
        always: bool,
    ) -> None:
        modified = filter_paths(modified, listener.paths)
        added = filter_paths(added, listener.paths)
        removed = filter_paths(removed, listener.paths)
        if not (always or modified or added or removed):
            return

        _local.in_listener = True
        try:
            listener.callback(self._owner, modified, added, removed)
        finally:
            _local.in_listener = False

    def _reject(self, message: _typing.Any) -> None:
        if isinstance(message, (messages.RegisterRequest, messages.UnregisterRequest)):
            message.result.set_exception(errors.ConfigClosedError("dispatcher is closed"))
