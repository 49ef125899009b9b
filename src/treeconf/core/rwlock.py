"""
Reader-writer lock.

Many readers may hold the lock at once; a writer holds it alone. Waiting
writers are preferred so a steady stream of readers can't starve them.
"""

from __future__ import annotations

import contextlib as _contextlib
import threading as _threading
import typing as _typing


class RWLock:
    """
    A writer-preferring reader-writer lock.

    Example:
        >>> lock = RWLock()
        >>> with lock.read():
        ...     pass
        >>> with lock.write():
        ...     pass
    """

    def __init__(self) -> None:
        self._cond = _threading.Condition(_threading.Lock())
        self._readers = 0
        self._writer = False
        self._waiting_writers = 0

    def acquire_read(self) -> None:
        with self._cond:
            while self._writer or self._waiting_writers:
                self._cond.wait()
            self._readers += 1

    def release_read(self) -> None:
        with self._cond:
            if self._readers <= 0:
                raise RuntimeError("release_read() called without a reader holding the lock")
            self._readers -= 1
            if self._readers == 0:
                self._cond.notify_all()

    def acquire_write(self) -> None:
        with self._cond:
            self._waiting_writers += 1
            try:
                while self._writer or self._readers:
                    self._cond.wait()
            finally:
                self._waiting_writers -= 1
            self._writer = True

    def release_write(self) -> None:
        with self._cond:
            if not self._writer:
                raise RuntimeError("release_write() called without holding the lock")
            self._writer = False
            self._cond.notify_all()

    @_contextlib.contextmanager
    def read(self) -> _typing.Iterator[None]:
        """Hold the lock as reader for the duration of the block."""
        self.acquire_read()
        try:
            yield
        finally:
            self.release_read()

    @_contextlib.contextmanager
    def write(self) -> _typing.Iterator[None]:
        """Hold the lock as writer for the duration of the block."""
        self.acquire_write()
        try:
            yield
        finally:
            self.release_write()
