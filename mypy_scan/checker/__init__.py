# FILE: mypy_scan/checker/__init__.py
"""Checker: one mypy scan from roots to per-file diagnostics.

- FileDiscovery / flatten_files: expand roots through the document model
- PathFilter: keep Python sources inside the project source roots
- ScannableFileSet: real paths for saved files, temp snapshots for edits
- MypyRunner: cancellable mypy subprocess
- DiagnosticParser: mypy output -> Diagnostic per FileHandle
- ScanFiles: the state machine tying the above together
"""

from mypy_scan.checker.cancellation import CancelToken, ScanCancelledError
from mypy_scan.checker.discovery import FileDiscovery, flatten_files
from mypy_scan.checker.path_filter import PathFilter
from mypy_scan.checker.results import DiagnosticParser, parse_diagnostics
from mypy_scan.checker.runner import MypyRunner, locate_config_file
from mypy_scan.checker.scan_files import ScanFiles, ScannerListener
from mypy_scan.checker.scannable_file import ScannableFile, ScannableFileSet
from mypy_scan.checker.schemas import (
    # Enums
    OutcomeKind,
    ScanState,
    Severity,
    # Results
    Diagnostic,
    ScanOutcome,
    ScanResult,
)

__all__ = [
    "CancelToken",
    "Diagnostic",
    "DiagnosticParser",
    "FileDiscovery",
    "MypyRunner",
    "OutcomeKind",
    "PathFilter",
    "ScanCancelledError",
    "ScanFiles",
    "ScanOutcome",
    "ScanResult",
    "ScanState",
    "ScannableFile",
    "ScannableFileSet",
    "ScannerListener",
    "Severity",
    "flatten_files",
    "locate_config_file",
    "parse_diagnostics",
]
