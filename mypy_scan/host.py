# FILE: mypy_scan/host.py
"""Host capabilities: project layout and document model.

The scan core only talks to the editor through the DocumentModel protocol
below. WorkspaceDocuments is the shipped implementation: the real
filesystem plus an overlay of unsaved in-memory buffers, guarded by a
readers-writer lock so scans can read while editors write.
"""

from __future__ import annotations

import os
import threading
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import ContextManager, Dict, Iterator, List, Optional, Protocol


DEFAULT_ENCODING = "utf-8"


def normalize_path(path: str) -> str:
    """Absolute, normalized form used as identity for files."""
    return os.path.normpath(os.path.abspath(path))


def is_under(path: str, root: str) -> bool:
    """Check whether path equals root or lies beneath it."""
    path_n = os.path.normcase(normalize_path(path))
    root_n = os.path.normcase(normalize_path(root))
    try:
        return os.path.commonpath([path_n, root_n]) == root_n
    except ValueError:
        # different drives on Windows
        return False


# =============================================================================
# Handles
# =============================================================================

@dataclass(frozen=True)
class FileHandle:
    """Reference to an editable file. Identity is the absolute path."""
    path: str

    @classmethod
    def for_path(cls, path: str) -> "FileHandle":
        return cls(normalize_path(path))

    @property
    def name(self) -> str:
        return os.path.basename(self.path)

    @property
    def extension(self) -> str:
        return os.path.splitext(self.path)[1].lower()

    @property
    def directory(self) -> str:
        return os.path.dirname(self.path)

    def __str__(self) -> str:
        return self.path


@dataclass
class Project:
    """Project layout as the host sees it."""
    base_path: str
    source_roots: List[str] = field(default_factory=list)
    excluded_roots: List[str] = field(default_factory=list)

    def __post_init__(self):
        self.base_path = normalize_path(self.base_path)
        self.source_roots = [normalize_path(r) for r in (self.source_roots or [self.base_path])]
        self.excluded_roots = [normalize_path(r) for r in self.excluded_roots]

    def is_excluded(self, path: str) -> bool:
        return any(is_under(path, r) for r in self.excluded_roots)

    def is_in_source_root(self, path: str) -> bool:
        return any(is_under(path, r) for r in self.source_roots)

    def is_in_project(self, path: str) -> bool:
        return is_under(path, self.base_path)


# =============================================================================
# Document model
# =============================================================================

class DocumentModel(Protocol):
    """What the scan core needs from the editor."""

    def list_children(self, path: str) -> List[str]: ...

    def is_directory(self, path: str) -> bool: ...

    def resolve_path(self, path: str) -> Optional[FileHandle]: ...

    def current_text(self, handle: FileHandle) -> str: ...

    def on_disk_text(self, handle: FileHandle) -> Optional[str]: ...

    def encoding(self, handle: FileHandle) -> str: ...

    def read_lock(self) -> ContextManager[None]: ...


class ReadWriteLock:
    """Many readers or one writer. Waiting writers block new readers."""

    def __init__(self):
        self._cond = threading.Condition(threading.Lock())
        self._readers = 0
        self._writer = False
        self._writers_waiting = 0

    @contextmanager
    def read_locked(self) -> Iterator[None]:
        with self._cond:
            while self._writer or self._writers_waiting:
                self._cond.wait()
            self._readers += 1
        try:
            yield
        finally:
            with self._cond:
                self._readers -= 1
                if self._readers == 0:
                    self._cond.notify_all()

    @contextmanager
    def write_locked(self) -> Iterator[None]:
        with self._cond:
            self._writers_waiting += 1
            try:
                while self._writer or self._readers:
                    self._cond.wait()
            finally:
                self._writers_waiting -= 1
            self._writer = True
        try:
            yield
        finally:
            with self._cond:
                self._writer = False
                self._cond.notify_all()


class WorkspaceDocuments:
    """Filesystem-backed document model with unsaved buffers on top.

    Usage:
        docs = WorkspaceDocuments()
        handle = docs.edit("/repo/pkg/mod.py", "x: int = 'a'\\n")
        docs.is_modified(handle)   # True until save() or discard()
    """

    def __init__(self, default_encoding: str = DEFAULT_ENCODING):
        self.default_encoding = default_encoding
        self._buffers: Dict[str, str] = {}
        self._encodings: Dict[str, str] = {}
        self._lock = ReadWriteLock()

    # -------------------------------------------------------------------------
    # Editing
    # -------------------------------------------------------------------------

    def edit(self, path: str, text: str, encoding: Optional[str] = None) -> FileHandle:
        """Replace the in-memory content of a file (created if new)."""
        handle = FileHandle.for_path(path)
        with self._lock.write_locked():
            self._buffers[handle.path] = text
            if encoding:
                self._encodings[handle.path] = encoding
        return handle

    def discard(self, handle: FileHandle) -> None:
        """Drop unsaved changes."""
        with self._lock.write_locked():
            self._buffers.pop(handle.path, None)

    def save(self, handle: FileHandle) -> None:
        """Write the buffer to disk and drop it."""
        with self._lock.write_locked():
            text = self._buffers.get(handle.path)
            if text is None:
                return
            with open(handle.path, "w", encoding=self._encoding_for(handle), newline="") as f:
                f.write(text)
            del self._buffers[handle.path]

    def is_modified(self, handle: FileHandle) -> bool:
        with self._lock.read_locked():
            text = self._buffers.get(handle.path)
        if text is None:
            return False
        return text != self._read_disk(handle)

    def write_lock(self) -> ContextManager[None]:
        return self._lock.write_locked()

    # -------------------------------------------------------------------------
    # DocumentModel
    # -------------------------------------------------------------------------

    def read_lock(self) -> ContextManager[None]:
        return self._lock.read_locked()

    def list_children(self, path: str) -> List[str]:
        directory = normalize_path(path)
        with os.scandir(directory) as it:
            children = [entry.path for entry in it]
        on_disk = set(children)
        for buffered in list(self._buffers):
            if os.path.dirname(buffered) == directory and buffered not in on_disk:
                children.append(buffered)
        return children

    def is_directory(self, path: str) -> bool:
        return os.path.isdir(path)

    def resolve_path(self, path: str) -> Optional[FileHandle]:
        handle = FileHandle.for_path(path)
        if handle.path in self._buffers or os.path.isfile(handle.path):
            return handle
        return None

    def current_text(self, handle: FileHandle) -> str:
        text = self._buffers.get(handle.path)
        if text is not None:
            return text
        on_disk = self._read_disk(handle)
        if on_disk is None:
            raise FileNotFoundError(handle.path)
        return on_disk

    def on_disk_text(self, handle: FileHandle) -> Optional[str]:
        return self._read_disk(handle)

    def encoding(self, handle: FileHandle) -> str:
        return self._encoding_for(handle)

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    def _encoding_for(self, handle: FileHandle) -> str:
        return self._encodings.get(handle.path, self.default_encoding)

    def _read_disk(self, handle: FileHandle) -> Optional[str]:
        if not os.path.exists(handle.path):
            return None
        with open(handle.path, "r", encoding=self._encoding_for(handle), newline="") as f:
            return f.read()


__all__ = [
    "DocumentModel",
    "FileHandle",
    "Project",
    "ReadWriteLock",
    "WorkspaceDocuments",
    "is_under",
    "normalize_path",
]
