# FILE: mypy_scan/plugin.py
"""Per-project mypy service.

MypyPlugin owns the worker pool scans run on, the plugin-level listeners
attached to every scan, and the results of the most recent scan.

Usage:
    plugin = MypyPlugin(project, documents)
    future = plugin.async_scan_files(handles)
    results = future.result()

    # or, from async code
    results = await plugin.scan_files_async(handles)
"""

from __future__ import annotations

import asyncio
import itertools
import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Dict, Iterable, List, Optional

from mypy_scan.checker.cancellation import CancelToken
from mypy_scan.checker.discovery import Root
from mypy_scan.checker.path_filter import PathFilter
from mypy_scan.checker.scan_files import Runner, ScanFiles, ScannerListener
from mypy_scan.checker.schemas import OutcomeKind, ScanOutcome, ScanResult
from mypy_scan.config import ScanSettings, load_settings
from mypy_scan.host import DocumentModel, FileHandle, Project, WorkspaceDocuments
from mypy_scan.notifications import Notifications

logger = logging.getLogger(__name__)


class MypyPlugin:
    def __init__(
        self,
        project: Project,
        documents: Optional[DocumentModel] = None,
        settings: Optional[ScanSettings] = None,
        runner: Optional[Runner] = None,
        notifications: Optional[Notifications] = None,
    ):
        self.project = project
        self.documents = documents or WorkspaceDocuments()
        self.settings = settings or load_settings()
        self.runner = runner
        self.notifications = notifications or Notifications()

        self._executor = ThreadPoolExecutor(
            max_workers=self.settings.max_workers,
            thread_name_prefix="mypy-scan",
        )
        self._lock = threading.Lock()
        self._listeners: List[ScannerListener] = []
        self._in_flight: Dict[Future, CancelToken] = {}
        self._sequence = itertools.count(1)
        self._last_sequence = 0
        self._last_results: Optional[ScanResult] = None
        self._last_outcome: Optional[ScanOutcome] = None
        self._closed = False

    def __enter__(self) -> "MypyPlugin":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.shutdown()

    # =========================================================================
    # Listeners
    # =========================================================================

    def add_listener(self, listener: ScannerListener) -> None:
        """Attach a listener to every scan submitted from now on."""
        with self._lock:
            if listener not in self._listeners:
                self._listeners.append(listener)

    def remove_listener(self, listener: ScannerListener) -> None:
        with self._lock:
            if listener in self._listeners:
                self._listeners.remove(listener)

    # =========================================================================
    # Submission
    # =========================================================================

    def async_scan_files(
        self,
        files: Iterable[FileHandle],
        path_filter: Optional[PathFilter] = None,
    ) -> "Future[ScanResult]":
        """Queue a scan of the eligible files among these."""
        return self._submit(files=list(files), path_filter=path_filter)

    def async_scan_roots(
        self,
        roots: Iterable[Root],
        path_filter: Optional[PathFilter] = None,
    ) -> "Future[ScanResult]":
        """Queue a scan of every eligible file under the roots."""
        return self._submit(roots=list(roots), path_filter=path_filter)

    async def scan_files_async(self, files: Iterable[FileHandle]) -> ScanResult:
        return await asyncio.wrap_future(self.async_scan_files(files))

    async def scan_roots_async(self, roots: Iterable[Root]) -> ScanResult:
        return await asyncio.wrap_future(self.async_scan_roots(roots))

    def _submit(self, files=None, roots=None, path_filter=None) -> "Future[ScanResult]":
        cancel = CancelToken()
        scan = ScanFiles(
            self.project,
            self.documents,
            settings=self.settings,
            files=files,
            roots=roots,
            runner=self.runner,
            notifications=self.notifications,
            cancel=cancel,
            path_filter=path_filter,
        )

        with self._lock:
            if self._closed:
                raise RuntimeError("MypyPlugin has been shut down")
            for listener in self._listeners:
                scan.add_listener(listener)
            sequence = next(self._sequence)
            future = self._executor.submit(self._run, scan, sequence)
            self._in_flight[future] = cancel

        future.add_done_callback(self._forget)
        logger.debug("[plugin] Submitted scan #%d", sequence)
        return future

    def _run(self, scan: ScanFiles, sequence: int) -> ScanResult:
        results = scan.call()
        outcome = scan.outcome
        with self._lock:
            # an older scan finishing late never replaces a newer one
            if outcome is not None and outcome.kind == OutcomeKind.SUCCESS and sequence > self._last_sequence:
                self._last_sequence = sequence
                self._last_results = results
                self._last_outcome = outcome
        return results

    def _forget(self, future: Future) -> None:
        with self._lock:
            self._in_flight.pop(future, None)

    # =========================================================================
    # State
    # =========================================================================

    @property
    def last_results(self) -> Optional[ScanResult]:
        """Results of the newest-started scan that completed successfully."""
        with self._lock:
            return self._last_results

    @property
    def last_outcome(self) -> Optional[ScanOutcome]:
        with self._lock:
            return self._last_outcome

    def is_scanning(self) -> bool:
        with self._lock:
            return bool(self._in_flight)

    def cancel_all(self) -> int:
        """Cancel every queued or running scan. Returns how many were signalled."""
        with self._lock:
            tokens = list(self._in_flight.values())
        for token in tokens:
            token.cancel()
        if tokens:
            logger.info("[plugin] Cancelled %d scans", len(tokens))
        return len(tokens)

    def shutdown(self, wait: bool = True, cancel: bool = True) -> None:
        with self._lock:
            if self._closed:
                return
            self._closed = True
        if cancel:
            self.cancel_all()
        self._executor.shutdown(wait=wait)
        logger.debug("[plugin] Shut down")


__all__ = ["MypyPlugin"]
