# FILE: mypy_scan/checker/scannable_file.py
"""Snapshots of files for mypy to read.

mypy only reads from disk, so a file with unsaved edits is written to a
temporary copy and mypy is pointed at the copy instead. Unmodified files
are passed through by their real path with no copy made.

Lifecycle:
    with ScannableFileSet(documents) as snapshots:
        files = snapshots.create_and_validate(handles)
        ...
    # every temporary copy is gone here, whatever happened inside
"""

from __future__ import annotations

import logging
import os
import tempfile
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional

from mypy_scan.checker.cancellation import CancelToken, check_cancelled
from mypy_scan.errors import ScanValidationError
from mypy_scan.host import DocumentModel, FileHandle, normalize_path

logger = logging.getLogger(__name__)


@dataclass
class ScannableFile:
    """A file handle plus the path mypy will actually read."""
    handle: FileHandle
    materialized_path: str
    is_temporary: bool = False
    _deleted: bool = field(default=False, repr=False)

    @property
    def absolute_path(self) -> str:
        return normalize_path(self.materialized_path)

    def delete_if_required(self) -> None:
        """Remove the temporary copy, if any. Safe to call repeatedly."""
        if not self.is_temporary or self._deleted:
            return
        self._deleted = True
        try:
            os.remove(self.materialized_path)
            logger.debug("[scannable_file] Deleted snapshot %s", self.materialized_path)
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.warning(
                "[scannable_file] Failed to delete snapshot %s for %s: %s",
                self.materialized_path, self.handle.path, e,
            )


class ScannableFileSet:
    """Creates ScannableFiles and owns the cleanup of their temp copies."""

    def __init__(self, documents: DocumentModel, scratch_dir: Optional[str] = None):
        self.documents = documents
        self.scratch_dir = scratch_dir
        self.files: List[ScannableFile] = []

    def __enter__(self) -> "ScannableFileSet":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.delete_all()

    def create_and_validate(
        self,
        handles: Iterable[FileHandle],
        cancel: Optional[CancelToken] = None,
    ) -> List[ScannableFile]:
        """Snapshot every handle.

        Content is read under the document read lock; the lock is released
        before returning.

        Raises:
            ScanValidationError: Unreadable file, failed temp write, or two
                never-saved files claiming the same path
            ScanCancelledError: If the token trips between files
        """
        created: List[ScannableFile] = []
        memory_only: Dict[str, FileHandle] = {}

        with self.documents.read_lock():
            for handle in handles:
                check_cancelled(cancel)
                current, on_disk = self._read(handle)

                if on_disk is None:
                    key = os.path.normcase(handle.path)
                    other = memory_only.get(key)
                    if other is not None and other != handle:
                        raise ScanValidationError(
                            f"Unsaved files collide on path: {other.path} / {handle.path}",
                            path=handle.path,
                        )
                    memory_only[key] = handle

                if on_disk is not None and current == on_disk:
                    scannable = ScannableFile(handle, handle.path, is_temporary=False)
                else:
                    scannable = self._write_snapshot(handle, current)
                # tracked at once so delete_all() covers a partial set
                self.files.append(scannable)
                created.append(scannable)

        logger.debug(
            "[scannable_file] %d files ready, %d temporary",
            len(created), sum(1 for f in created if f.is_temporary),
        )
        return created

    def delete_all(self) -> None:
        """delete_if_required() on every file created so far."""
        for scannable in self.files:
            try:
                scannable.delete_if_required()
            except Exception as e:
                logger.warning("[scannable_file] Cleanup of %s failed: %s", scannable.handle.path, e)

    def path_mapping(self) -> Dict[str, FileHandle]:
        """Materialized absolute path -> original handle."""
        return {f.absolute_path: f.handle for f in self.files}

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    def _read(self, handle: FileHandle):
        try:
            return self.documents.current_text(handle), self.documents.on_disk_text(handle)
        except (OSError, UnicodeError) as e:
            raise ScanValidationError(f"Cannot read {handle.path}: {e}", path=handle.path, cause=e)

    def _write_snapshot(self, handle: FileHandle, text: str) -> ScannableFile:
        stem, ext = os.path.splitext(handle.name)
        try:
            fd, temp_path = tempfile.mkstemp(
                prefix=f"{stem}_",
                suffix=ext,
                dir=self.scratch_dir,
            )
        except OSError as e:
            raise ScanValidationError(
                f"Cannot create snapshot for {handle.path}: {e}", path=handle.path, cause=e,
            )

        scannable = ScannableFile(handle, temp_path, is_temporary=True)
        try:
            with os.fdopen(fd, "w", encoding=self.documents.encoding(handle), newline="") as f:
                f.write(text)
        except (OSError, UnicodeError, LookupError) as e:
            scannable.delete_if_required()
            raise ScanValidationError(
                f"Cannot write snapshot for {handle.path}: {e}", path=handle.path, cause=e,
            )
        logger.debug("[scannable_file] Snapshot %s -> %s", handle.path, temp_path)
        return scannable


__all__ = [
    "ScannableFile",
    "ScannableFileSet",
]
