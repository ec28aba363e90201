# FILE: mypy_scan/__init__.py
"""mypy-scan: run mypy over a project's Python sources, including unsaved edits.

- host: Project layout, FileHandle and the DocumentModel protocol
- checker: discovery, filtering, snapshots, mypy invocation, parsing
- plugin: MypyPlugin, the per-project scan service
- actions: scan source roots / whole project / current files
- cli: the mypy-scan command
"""

from mypy_scan.checker import (
    CancelToken,
    Diagnostic,
    ScanFiles,
    ScanOutcome,
    ScanResult,
    ScannerListener,
    Severity,
)
from mypy_scan.config import ScanSettings, load_settings
from mypy_scan.errors import MypyPluginError, ScanValidationError, ToolInvocationError
from mypy_scan.host import DocumentModel, FileHandle, Project, WorkspaceDocuments
from mypy_scan.plugin import MypyPlugin

__version__ = "0.1.0"

__all__ = [
    "CancelToken",
    "Diagnostic",
    "DocumentModel",
    "FileHandle",
    "MypyPlugin",
    "MypyPluginError",
    "Project",
    "ScanFiles",
    "ScanOutcome",
    "ScanResult",
    "ScanSettings",
    "ScanValidationError",
    "ScannerListener",
    "Severity",
    "ToolInvocationError",
    "WorkspaceDocuments",
    "load_settings",
]
