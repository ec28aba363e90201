# FILE: mypy_scan/actions.py
"""User-triggered scans.

Each action picks the candidate files and the eligibility rule, then hands
both to the plugin as one scan.
"""

from __future__ import annotations

import logging
from concurrent.futures import Future
from typing import Iterable

from mypy_scan.checker.discovery import flatten_files
from mypy_scan.checker.path_filter import PathFilter
from mypy_scan.checker.schemas import ScanResult
from mypy_scan.host import FileHandle
from mypy_scan.plugin import MypyPlugin

logger = logging.getLogger(__name__)


def _path_filter(plugin: MypyPlugin, scan_all_files: bool) -> PathFilter:
    return PathFilter(
        plugin.project,
        extensions=plugin.settings.source_extensions,
        scan_all_files=scan_all_files,
    )


def scan_source_roots(plugin: MypyPlugin) -> "Future[ScanResult]":
    """Scan every Python file under the project's source roots."""
    handles = flatten_files(plugin.documents, plugin.project.source_roots)
    logger.info("[actions] Scanning source roots: %d candidate files", len(handles))
    return plugin.async_scan_files(handles, _path_filter(plugin, plugin.settings.scan_all_files))


def scan_project(plugin: MypyPlugin) -> "Future[ScanResult]":
    """Scan every Python file in the project, source root or not."""
    handles = flatten_files(plugin.documents, [plugin.project.base_path])
    logger.info("[actions] Scanning project: %d candidate files", len(handles))
    return plugin.async_scan_files(handles, _path_filter(plugin, scan_all_files=True))


def scan_current_files(plugin: MypyPlugin, handles: Iterable[FileHandle]) -> "Future[ScanResult]":
    handles = list(handles)
    logger.info("[actions] Scanning current files: %d candidate files", len(handles))
    return plugin.async_scan_files(handles, _path_filter(plugin, plugin.settings.scan_all_files))


__all__ = [
    "scan_current_files",
    "scan_project",
    "scan_source_roots",
]
