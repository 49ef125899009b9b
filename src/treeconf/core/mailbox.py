"""
Mailbox for the Config worker threads.

A mailbox combines a bounded FIFO of messages with a single "latest"
slot. Messages are never dropped: senders block while the FIFO is full.
The slot holds at most one item; offering another one replaces it, so a
burst of offers collapses into the most recent one and offering never
blocks.
"""

from __future__ import annotations

import collections as _collections
import threading as _threading
import typing as _typing

import treeconf.core.errors as errors

_T = _typing.TypeVar("_T")

_EMPTY: _typing.Any = object()


class Mailbox(_typing.Generic[_T]):
    """
    Bounded message queue with a coalescing slot, for one consumer thread.

    Args:
        maxsize: Number of queued messages before put() blocks.
        name: Used in error messages.
    """

    def __init__(self, maxsize: int, name: str = "mailbox") -> None:
        if maxsize <= 0:
            raise ValueError("maxsize must be positive")
        self._maxsize = maxsize
        self._name = name
        self._cond = _threading.Condition()
        self._messages: _collections.deque[_T] = _collections.deque()
        self._latest: _typing.Any = _EMPTY
        self._closed = False

    @property
    def closed(self) -> bool:
        with self._cond:
            return self._closed

    def put(self, message: _T) -> None:
        """
        Queue a message, blocking while the queue is full.

        Raises:
            ConfigClosedError: If the mailbox is (or gets) closed.
        """
        with self._cond:
            while len(self._messages) >= self._maxsize and not self._closed:
                self._cond.wait()
            if self._closed:
                raise errors.ConfigClosedError(f"{self._name} is closed")
            self._messages.append(message)
            self._cond.notify_all()

    def post(self, message: _T) -> None:
        """
        Queue an internal message without blocking.

        Posting ignores the size limit and still works after close(), so the
        consumer can receive notices about work it started itself.
        """
        with self._cond:
            self._messages.append(message)
            self._cond.notify_all()

    def offer_latest(self, item: _T) -> None:
        """Put item into the slot, replacing a pending one. Dropped once closed."""
        with self._cond:
            if self._closed:
                return
            self._latest = item
            self._cond.notify_all()

    def get(self, *, accept_latest: bool = True) -> _T | None:
        """
        Wait for the next message.

        Queued messages come first. The slot is only taken when
        accept_latest is set.

        Returns:
            The next message, or None once the mailbox is closed and
            nothing is left that could be returned.
        """
        with self._cond:
            while True:
                if self._messages:
                    message = self._messages.popleft()
                    self._cond.notify_all()
                    return message
                if self._latest is not _EMPTY and accept_latest:
                    item: _T = self._latest
                    self._latest = _EMPTY
                    return item
                if self._closed and self._latest is _EMPTY:
                    return None
                self._cond.wait()

    def close(self) -> None:
        """
        Close the mailbox.

        Blocked and future put() calls raise ConfigClosedError. Messages that
        are already queued are still delivered by get().
        """
        with self._cond:
            self._closed = True
            self._cond.notify_all()

    def drain(self) -> list[_T]:
        """Remove and return every queued message, and empty the slot."""
        with self._cond:
            messages = list(self._messages)
            self._messages.clear()
            self._latest = _EMPTY
            self._cond.notify_all()
            return messages
