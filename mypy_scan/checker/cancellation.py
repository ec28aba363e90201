# FILE: mypy_scan/checker/cancellation.py
"""Cooperative cancellation for scans.

A CancelToken is passed down discovery -> snapshot -> invocation. Each
stage checks it at its blocking boundaries; the runner kills the mypy
process when it trips.
"""

from __future__ import annotations

import threading
from typing import Optional


class ScanCancelledError(Exception):
    """Raised when a scan is cancelled. Not a failure."""


class CancelToken:
    """Thread-safe cancellation flag."""

    def __init__(self):
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    def is_cancelled(self) -> bool:
        return self._event.is_set()

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise ScanCancelledError("Scan cancelled")

    def wait(self, timeout: Optional[float] = None) -> bool:
        """Block until cancelled or timeout. Returns True if cancelled."""
        return self._event.wait(timeout)


def check_cancelled(cancel: Optional[CancelToken]) -> None:
    """raise_if_cancelled() that tolerates a missing token."""
    if cancel is not None:
        cancel.raise_if_cancelled()


__all__ = [
    "CancelToken",
    "ScanCancelledError",
    "check_cancelled",
]
