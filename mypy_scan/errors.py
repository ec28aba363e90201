# FILE: mypy_scan/errors.py
"""Error taxonomy for the mypy scan plugin.

- MypyPluginError: base for every failure surfaced to the user
- ScanValidationError: a snapshot could not be created
- ToolInvocationError: mypy is missing or exited abnormally

Cancellation is not part of this hierarchy, see
mypy_scan.checker.cancellation.ScanCancelledError.
"""

from __future__ import annotations

from typing import Optional


class MypyPluginError(Exception):
    """Base class for mypy plugin errors."""

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.cause = cause
        if cause is not None:
            self.__cause__ = cause


class ScanValidationError(MypyPluginError):
    """Raised when a file cannot be materialized for scanning."""

    def __init__(
        self,
        message: str,
        path: Optional[str] = None,
        cause: Optional[BaseException] = None,
    ):
        super().__init__(message, cause)
        self.path = path


class ToolInvocationError(MypyPluginError):
    """Raised when the mypy process could not run or exited abnormally."""

    def __init__(
        self,
        message: str,
        exit_code: Optional[int] = None,
        stderr: Optional[str] = None,
        cause: Optional[BaseException] = None,
    ):
        super().__init__(message, cause)
        self.exit_code = exit_code
        self.stderr = stderr
