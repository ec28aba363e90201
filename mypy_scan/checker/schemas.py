# FILE: mypy_scan/checker/schemas.py
"""Scan data structures.

- Severity / ScanState / OutcomeKind: enums
- Diagnostic: one issue reported by mypy, immutable
- ScanResult: FileHandle -> diagnostics for one scan, with a scan_id
- ScanOutcome: SUCCESS / CANCELLED / FAILED wrapper around a ScanResult
"""

from __future__ import annotations

import uuid
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterator, List, Optional

from mypy_scan.errors import MypyPluginError
from mypy_scan.host import FileHandle


# =============================================================================
# Enums
# =============================================================================

class Severity(str, Enum):
    """Severity levels mypy prints."""
    ERROR = "error"
    WARNING = "warning"
    NOTE = "note"

    @classmethod
    def parse(cls, value: Optional[str]) -> "Severity":
        """Unknown or missing severities count as errors."""
        try:
            return cls((value or "").strip().lower())
        except ValueError:
            return cls.ERROR


class ScanState(str, Enum):
    """Lifecycle of a single scan."""
    IDLE = "idle"
    DISCOVERING = "discovering"
    SNAPSHOTTING = "snapshotting"
    INVOKING = "invoking"
    PARSING = "parsing"
    NOTIFYING_SUCCESS = "notifying_success"
    NOTIFYING_FAILURE = "notifying_failure"
    NOTIFYING_CANCELLED = "notifying_cancelled"


class OutcomeKind(str, Enum):
    SUCCESS = "success"
    CANCELLED = "cancelled"
    FAILED = "failed"


# =============================================================================
# Diagnostics
# =============================================================================

@dataclass(frozen=True)
class Diagnostic:
    """A single mypy issue attributed to a file.

    line and column are 1-based as reported. offset is the absolute
    character offset into the live document when it could be computed.
    """
    file: FileHandle
    line: int
    message: str
    severity: Severity = Severity.ERROR
    column: int = 1
    code: Optional[str] = None
    offset: Optional[int] = None

    def format(self) -> str:
        text = f"{self.file.path}:{self.line}:{self.column}: {self.severity.value}: {self.message}"
        if self.code:
            text += f"  [{self.code}]"
        return text

    def to_dict(self) -> Dict[str, Any]:
        return {
            "path": self.file.path,
            "line": self.line,
            "column": self.column,
            "severity": self.severity.value,
            "message": self.message,
            "code": self.code,
            "offset": self.offset,
        }


class ScanResult(Mapping):
    """Read-only FileHandle -> [Diagnostic] mapping produced by one scan.

    Overlapping scans may notify listeners in any order, so consumers
    should key on scan_id (or identity) rather than "the latest scan".
    """

    def __init__(
        self,
        problems: Optional[Dict[FileHandle, List[Diagnostic]]] = None,
        scan_id: Optional[str] = None,
    ):
        self._problems: Dict[FileHandle, List[Diagnostic]] = {
            handle: list(diagnostics) for handle, diagnostics in (problems or {}).items()
        }
        self.scan_id = scan_id or uuid.uuid4().hex[:12]

    @classmethod
    def empty(cls, scan_id: Optional[str] = None) -> "ScanResult":
        return cls({}, scan_id=scan_id)

    def __getitem__(self, handle: FileHandle) -> List[Diagnostic]:
        return list(self._problems[handle])

    def __iter__(self) -> Iterator[FileHandle]:
        return iter(self._problems)

    def __len__(self) -> int:
        return len(self._problems)

    def __repr__(self) -> str:
        return f"ScanResult(scan_id={self.scan_id!r}, files={len(self)}, diagnostics={self.diagnostic_count})"

    @property
    def diagnostic_count(self) -> int:
        return sum(len(d) for d in self._problems.values())

    def count(self, severity: Severity) -> int:
        return sum(1 for ds in self._problems.values() for d in ds if d.severity == severity)

    def all_diagnostics(self) -> List[Diagnostic]:
        return [d for ds in self._problems.values() for d in ds]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "scan_id": self.scan_id,
            "files": {
                handle.path: [d.to_dict() for d in diagnostics]
                for handle, diagnostics in self._problems.items()
            },
        }


@dataclass
class ScanOutcome:
    """How a scan ended."""
    kind: OutcomeKind
    results: ScanResult = field(default_factory=ScanResult.empty)
    error: Optional[MypyPluginError] = None

    @classmethod
    def success(cls, results: ScanResult) -> "ScanOutcome":
        return cls(OutcomeKind.SUCCESS, results)

    @classmethod
    def cancelled(cls, scan_id: Optional[str] = None) -> "ScanOutcome":
        return cls(OutcomeKind.CANCELLED, ScanResult.empty(scan_id))

    @classmethod
    def failed(cls, error: MypyPluginError, scan_id: Optional[str] = None) -> "ScanOutcome":
        return cls(OutcomeKind.FAILED, ScanResult.empty(scan_id), error)

    @property
    def is_success(self) -> bool:
        return self.kind == OutcomeKind.SUCCESS

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind.value,
            "results": self.results.to_dict(),
            "error": str(self.error) if self.error else None,
        }


__all__ = [
    "Diagnostic",
    "OutcomeKind",
    "ScanOutcome",
    "ScanResult",
    "ScanState",
    "Severity",
]
