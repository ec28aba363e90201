# FILE: mypy_scan/checker/scan_files.py
"""
ScanFiles: one mypy scan as a unit of work.

Flow:
    IDLE -> DISCOVERING -> SNAPSHOTTING -> INVOKING -> PARSING
         -> NOTIFYING_SUCCESS | NOTIFYING_FAILURE | NOTIFYING_CANCELLED -> IDLE

- Listeners get scan_starting(files) once the file set is known
- Zero files: empty success, mypy is never started
- Cancellation at any stage: empty success, never a failure
- Anything else: MypyPluginError through Notifications, then listeners
- Temporary snapshots are removed before any terminal notification
"""

from __future__ import annotations

import logging
import threading
import uuid
from typing import Callable, Iterable, List, Optional, Protocol, Sequence

from mypy_scan.checker.cancellation import CancelToken, ScanCancelledError, check_cancelled
from mypy_scan.checker.discovery import FileDiscovery, Root
from mypy_scan.checker.path_filter import PathFilter
from mypy_scan.checker.results import DiagnosticParser
from mypy_scan.checker.runner import MypyRunner
from mypy_scan.checker.scannable_file import ScannableFileSet
from mypy_scan.checker.schemas import OutcomeKind, ScanOutcome, ScanResult, ScanState
from mypy_scan.config import ScanSettings, load_settings
from mypy_scan.errors import MypyPluginError
from mypy_scan.host import DocumentModel, FileHandle, Project
from mypy_scan.notifications import Notifications

logger = logging.getLogger(__name__)

GENERIC_FAILURE_MESSAGE = "An error occurred while scanning a file."

# runner(project_root, paths, cancel) -> raw output lines
Runner = Callable[[str, Sequence[str], Optional[CancelToken]], List[str]]


class ScannerListener(Protocol):
    def scan_starting(self, files: List[FileHandle]) -> None: ...

    def scan_completed_successfully(self, results: ScanResult) -> None: ...

    def scan_failed_with_error(self, error: MypyPluginError) -> None: ...


class ScanFiles:
    """Runs a single scan. Build with for_roots() or for_files().

    A ScanFiles instance is meant to be called once; calling it again
    starts a fresh scan with a new scan_id over the same inputs.
    """

    def __init__(
        self,
        project: Project,
        documents: DocumentModel,
        settings: Optional[ScanSettings] = None,
        files: Optional[Iterable[FileHandle]] = None,
        roots: Optional[Iterable[Root]] = None,
        runner: Optional[Runner] = None,
        notifications: Optional[Notifications] = None,
        cancel: Optional[CancelToken] = None,
        path_filter: Optional[PathFilter] = None,
    ):
        if files is None and roots is None:
            raise ValueError("ScanFiles needs files or roots")

        self.project = project
        self.documents = documents
        self.settings = settings or load_settings()
        self.files = list(files) if files is not None else None
        self.roots = list(roots) if roots is not None else None
        self.runner: Runner = runner or MypyRunner(self.settings)
        self.notifications = notifications or Notifications()
        self.cancel = cancel or CancelToken()
        self.path_filter = path_filter or PathFilter.from_settings(project, self.settings)

        self.states: List[ScanState] = [ScanState.IDLE]
        self.outcome: Optional[ScanOutcome] = None
        self._listeners: List[ScannerListener] = []
        self._listeners_lock = threading.Lock()

    @classmethod
    def for_roots(cls, project: Project, documents: DocumentModel, roots: Iterable[Root], **kwargs) -> "ScanFiles":
        """Scan every eligible Python file under the given roots."""
        return cls(project, documents, roots=roots, **kwargs)

    @classmethod
    def for_files(cls, project: Project, documents: DocumentModel, files: Iterable[FileHandle], **kwargs) -> "ScanFiles":
        """Scan the eligible files among these."""
        return cls(project, documents, files=files, **kwargs)

    # =========================================================================
    # Listeners
    # =========================================================================

    def add_listener(self, listener: ScannerListener) -> None:
        with self._listeners_lock:
            if listener not in self._listeners:
                self._listeners.append(listener)

    def remove_listener(self, listener: ScannerListener) -> None:
        with self._listeners_lock:
            if listener in self._listeners:
                self._listeners.remove(listener)

    def _fire(self, event: str, *args) -> None:
        with self._listeners_lock:
            listeners = list(self._listeners)
        for listener in listeners:
            try:
                getattr(listener, event)(*args)
            except MemoryError:
                raise
            except Exception as e:
                logger.error("[scan_files] Listener %r failed in %s: %s", listener, event, e, exc_info=True)

    # =========================================================================
    # Scan
    # =========================================================================

    @property
    def state(self) -> ScanState:
        return self.states[-1]

    def _enter(self, state: ScanState) -> None:
        self.states.append(state)
        logger.debug("[scan_files] -> %s", state.value)

    def __call__(self) -> ScanResult:
        return self.call()

    def call(self) -> ScanResult:
        """Run the scan and notify listeners.

        Only fatal conditions (MemoryError, KeyboardInterrupt, SystemExit)
        escape, after snapshot cleanup and a return to IDLE.
        """
        scan_id = uuid.uuid4().hex[:12]

        try:
            with ScannableFileSet(self.documents, self.settings.scratch_dir) as snapshots:
                outcome = self._run(scan_id, snapshots)
        except ScanCancelledError:
            logger.debug("[scan_files] Scan %s cancelled", scan_id)
            outcome = ScanOutcome.cancelled(scan_id)
        except MemoryError:
            self._enter(ScanState.IDLE)
            raise
        except MypyPluginError as e:
            outcome = ScanOutcome.failed(e, scan_id)
        except Exception as e:
            outcome = ScanOutcome.failed(MypyPluginError(GENERIC_FAILURE_MESSAGE, e), scan_id)
        except BaseException:
            self._enter(ScanState.IDLE)
            raise

        self.outcome = outcome

        try:
            self._notify(outcome)
        finally:
            self._enter(ScanState.IDLE)
        return outcome.results

    def _run(self, scan_id: str, snapshots: ScannableFileSet) -> ScanOutcome:
        self._enter(ScanState.DISCOVERING)
        check_cancelled(self.cancel)
        files = self._resolve_files()
        self._fire("scan_starting", list(files))

        if not files:
            logger.info("[scan_files] No eligible files, nothing to scan")
            return ScanOutcome.success(ScanResult.empty(scan_id))

        self._enter(ScanState.SNAPSHOTTING)
        snapshots.create_and_validate(files, self.cancel)
        mapping = snapshots.path_mapping()

        self._enter(ScanState.INVOKING)
        check_cancelled(self.cancel)
        raw_lines = self.runner(self.project.base_path, list(mapping), self.cancel)

        self._enter(ScanState.PARSING)
        check_cancelled(self.cancel)
        parser = DiagnosticParser(self.settings.tab_width, self.project.base_path, self.documents)
        results = ScanResult(parser.parse(raw_lines, mapping), scan_id=scan_id)

        logger.info(
            "[scan_files] Scan %s: %d diagnostics in %d files",
            scan_id, results.diagnostic_count, len(results),
        )
        return ScanOutcome.success(results)

    def _resolve_files(self) -> List[FileHandle]:
        if self.files is not None:
            candidates = self.files
        else:
            handles = FileDiscovery(self.documents).discover(self.roots or [], self.cancel)
            candidates = sorted(handles, key=lambda h: h.path)

        eligible = self.path_filter.filter(candidates)
        logger.debug("[scan_files] %d of %d candidate files eligible", len(eligible), len(candidates))
        return eligible

    def _notify(self, outcome: ScanOutcome) -> None:
        if outcome.kind == OutcomeKind.FAILED:
            self._enter(ScanState.NOTIFYING_FAILURE)
            logger.warning("[scan_files] Scan failed: %s", outcome.error)
            self.notifications.show_exception(outcome.error)
            self._fire("scan_failed_with_error", outcome.error)
            return

        if outcome.kind == OutcomeKind.CANCELLED:
            self._enter(ScanState.NOTIFYING_CANCELLED)
        else:
            self._enter(ScanState.NOTIFYING_SUCCESS)
        self._fire("scan_completed_successfully", outcome.results)


__all__ = [
    "GENERIC_FAILURE_MESSAGE",
    "Runner",
    "ScanFiles",
    "ScannerListener",
]
