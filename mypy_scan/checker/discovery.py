# FILE: mypy_scan/checker/discovery.py
"""File discovery: expand scan roots into file handles.

Walks each root through the host document model (so unsaved, never-written
buffers are found too). Directories are traversed, never returned. Roots
or subtrees that cannot be listed are skipped; discovery itself never
fails. Order of the result is not meaningful.

Symlinked directories are walked under their own path, like any other
directory. A link back into one of its own ancestors is not followed.
"""

from __future__ import annotations

import logging
import os
from typing import FrozenSet, Iterable, List, Optional, Set, Tuple, Union

from mypy_scan.checker.cancellation import CancelToken, check_cancelled
from mypy_scan.host import DocumentModel, FileHandle, normalize_path

logger = logging.getLogger(__name__)

Root = Union[str, FileHandle]


def _root_path(root: Root) -> str:
    return root.path if isinstance(root, FileHandle) else normalize_path(str(root))


class FileDiscovery:
    def __init__(self, documents: DocumentModel):
        self.documents = documents

    def discover(
        self,
        roots: Iterable[Root],
        cancel: Optional[CancelToken] = None,
    ) -> Set[FileHandle]:
        """Every non-directory descendant of every root."""
        found: Set[FileHandle] = set()
        visited: Set[str] = set()
        for root in roots:
            check_cancelled(cancel)
            self._walk(_root_path(root), found, visited, cancel)
        logger.debug("[discovery] %d files under %d visited directories", len(found), len(visited))
        return found

    def _walk(
        self,
        root: str,
        found: Set[FileHandle],
        visited: Set[str],
        cancel: Optional[CancelToken],
    ) -> None:
        if not self.documents.is_directory(root):
            handle = self.documents.resolve_path(root)
            if handle is not None:
                found.add(handle)
            else:
                logger.debug("[discovery] Skipping unresolvable root: %s", root)
            return

        stack: List[Tuple[str, FrozenSet[str]]] = [(root, frozenset())]
        while stack:
            check_cancelled(cancel)
            current, ancestors = stack.pop()
            key = normalize_path(current)
            real = os.path.realpath(current)
            if key in visited or real in ancestors:
                continue
            visited.add(key)
            ancestors = ancestors | {real}

            try:
                children = self.documents.list_children(current)
            except OSError as e:
                logger.debug("[discovery] Skipping unreadable directory %s: %s", current, e)
                continue

            for child in children:
                if self.documents.is_directory(child):
                    stack.append((child, ancestors))
                    continue
                handle = self.documents.resolve_path(child)
                if handle is not None:
                    found.add(handle)


def flatten_files(
    documents: DocumentModel,
    roots: Iterable[Root],
    cancel: Optional[CancelToken] = None,
) -> List[FileHandle]:
    """discover() as a path-sorted list, for callers that want stable output."""
    return sorted(FileDiscovery(documents).discover(roots, cancel), key=lambda h: h.path)


__all__ = [
    "FileDiscovery",
    "Root",
    "flatten_files",
]
