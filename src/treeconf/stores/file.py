"""
Shared behaviour of file based storages.

Handles everything that doesn't depend on the file format: treating a
missing file as empty tree, atomic writes through a temporary file, and
change notification with watchdog.
"""

from __future__ import annotations

import abc as _abc
import logging as _logging
import os as _os
import pathlib as _pathlib
import stat as _stat
import tempfile as _tempfile
import threading as _threading

import watchdog.events as _watchdog_events
import watchdog.observers as _watchdog_observers

import treeconf.stores.base as base
import treeconf.tree as tree

_logger = _logging.getLogger(__name__)


def _file_mode(path: _pathlib.Path) -> int:
    """Permissions for a rewrite of path: the current ones, or the umask default."""
    try:
        return _stat.S_IMODE(path.stat().st_mode)
    except FileNotFoundError:
        umask = _os.umask(0)
        _os.umask(umask)
        return 0o666 & ~umask


class _FileEventHandler(_watchdog_events.FileSystemEventHandler):
    """Forwards events that touch one specific file to a notifier."""

    def __init__(self, path: _pathlib.Path, notify: base.Notifier) -> None:
        super().__init__()
        self._path = _os.path.normcase(str(path))
        self._notify = notify

    def _matches(self, location: str | bytes) -> bool:
        if isinstance(location, bytes):
            location = _os.fsdecode(location)
        return _os.path.normcase(_os.path.abspath(location)) == self._path

    def on_any_event(self, event: _watchdog_events.FileSystemEvent) -> None:
        if event.is_directory:
            return
        locations = [event.src_path, getattr(event, "dest_path", "")]
        if any(location and self._matches(location) for location in locations):
            _logger.debug("Change of %s detected (%s)", self._path, event.event_type)
            self._notify()


class FileStorage(base.Storage):
    """
    Abstract base class for storages backed by a single file.

    Subclasses implement the text format in _decode and _encode.

    Args:
        path: Location of the file. It doesn't need to exist.
        watch: Whether register_watcher actually watches the file system.
    """

    def __init__(self, path: str | _pathlib.Path, *, watch: bool = True) -> None:
        self._path = _pathlib.Path(path).absolute()
        self._watch = watch
        self._lock = _threading.Lock()
        self._observer: _watchdog_observers.Observer | None = None

    @property
    def path(self) -> _pathlib.Path:
        """Absolute location of the file."""
        return self._path

    def __repr__(self) -> str:
        return f"{type(self).__name__}({str(self._path)!r})"

    @_abc.abstractmethod
    def _decode(self, text: str) -> tree.Node:
        """Parse file content into a tree."""
        ...

    @_abc.abstractmethod
    def _encode(self, node: tree.Node) -> str:
        """Serialize a tree into file content."""
        ...

    def read(self) -> tree.Node:
        try:
            text = self._path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return tree.Node()
        except OSError as e:
            raise base.StorageError(self._path, f"reading failed: {e}") from e

        try:
            return self._decode(text)
        except (ValueError, tree.TreeError) as e:
            raise base.StorageError(self._path, f"parsing failed: {e}") from e

    def write(self, node: tree.Node) -> None:
        try:
            text = self._encode(node)
        except (ValueError, tree.TreeError) as e:
            raise base.StorageError(self._path, f"serializing failed: {e}") from e

        temp_path: _pathlib.Path | None = None
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            with _tempfile.NamedTemporaryFile(
                "w",
                encoding="utf-8",
                dir=self._path.parent,
                prefix=f".{self._path.name}.",
                suffix=".tmp",
                delete=False,
            ) as temp:
                temp_path = _pathlib.Path(temp.name)
                temp.write(text)
            _os.chmod(temp_path, _file_mode(self._path))
            _os.replace(temp_path, self._path)
        except OSError as e:
            if temp_path is not None:
                temp_path.unlink(missing_ok=True)
            raise base.StorageError(self._path, f"writing failed: {e}") from e

    def register_watcher(self, notify: base.Notifier | None) -> None:
        with self._lock:
            if self._observer is not None:
                self._observer.stop()
                self._observer.join()
                self._observer = None

            if notify is None or not self._watch:
                return

            observer = _watchdog_observers.Observer()
            handler = _FileEventHandler(self._path, notify)
            try:
                observer.schedule(handler, str(self._path.parent), recursive=False)
                observer.start()
            except OSError as e:
                raise base.StorageError(self._path, f"watching failed: {e}") from e
            self._observer = observer
