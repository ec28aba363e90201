# FILE: mypy_scan/checker/path_filter.py
"""Decides which discovered files mypy should see.

A file is eligible when its extension is a Python source extension and it
sits inside a project source root (or anywhere in the project when
scan_all_files is on). Excluded roots always win. Nothing else about the
file matters: symlinks and generated files are treated like any other.
"""

from __future__ import annotations

from typing import Iterable, List, Optional, Sequence

from mypy_scan.config import DEFAULT_SOURCE_EXTENSIONS
from mypy_scan.host import FileHandle, Project


class PathFilter:
    def __init__(
        self,
        project: Project,
        extensions: Optional[Sequence[str]] = None,
        scan_all_files: bool = False,
    ):
        self.project = project
        self.extensions = frozenset(e.lower() for e in (extensions or DEFAULT_SOURCE_EXTENSIONS))
        self.scan_all_files = scan_all_files

    @classmethod
    def from_settings(cls, project: Project, settings) -> "PathFilter":
        return cls(
            project,
            extensions=settings.source_extensions,
            scan_all_files=settings.scan_all_files,
        )

    def is_eligible(self, handle: FileHandle) -> bool:
        if handle.extension not in self.extensions:
            return False
        if self.project.is_excluded(handle.path):
            return False
        if self.scan_all_files:
            return self.project.is_in_project(handle.path)
        return self.project.is_in_source_root(handle.path)

    def filter(self, handles: Iterable[FileHandle]) -> List[FileHandle]:
        """Eligible handles, order preserved, duplicates dropped."""
        seen = set()
        eligible = []
        for handle in handles:
            if handle in seen:
                continue
            seen.add(handle)
            if self.is_eligible(handle):
                eligible.append(handle)
        return eligible


__all__ = ["PathFilter"]
