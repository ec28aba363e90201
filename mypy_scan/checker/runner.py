# FILE: mypy_scan/checker/runner.py
"""mypy invocation.

Runs mypy once over a batch of paths and returns its stdout lines. The
call blocks, but polls the cancel token while the process runs and kills
it as soon as the token trips.

Exit codes:
- 0: no issues
- 1: issues found (normal)
- 2: blocking errors such as syntax errors; normal when stdout carries
  diagnostics or stderr is empty, otherwise a crash or bad config
- anything else, or a missing executable: ToolInvocationError
"""

from __future__ import annotations

import logging
import os
import shlex
import subprocess
import time
from typing import Iterable, List, Optional

from mypy_scan.checker.cancellation import CancelToken, ScanCancelledError, check_cancelled
from mypy_scan.checker.results import is_diagnostic_line
from mypy_scan.config import CONFIG_FILE_CANDIDATES, ScanSettings
from mypy_scan.errors import ToolInvocationError

logger = logging.getLogger(__name__)

# Exit statuses that mean "mypy ran"
NORMAL_EXIT_CODES = frozenset({0, 1})

# Also used for blocking errors, which still print diagnostics
BLOCKING_ERROR_EXIT_CODE = 2

# Output shape the parser expects
REQUIRED_ARGUMENTS: List[str] = [
    "--show-column-numbers",
    "--show-absolute-path",
    "--no-color-output",
    "--no-error-summary",
    "--hide-error-context",
]

STDERR_PREVIEW_CHARS = 2000


def locate_config_file(project_root: str, explicit: Optional[str] = None) -> Optional[str]:
    """Find the mypy config file for a project.

    An explicit path wins when it exists. Otherwise the first of
    CONFIG_FILE_CANDIDATES present in the project root is used. The file
    is only located, never parsed.
    """
    if explicit:
        path = explicit if os.path.isabs(explicit) else os.path.join(project_root, explicit)
        if os.path.isfile(path):
            return path
        logger.warning("[runner] Configured mypy config file not found: %s", path)
        return None

    for name in CONFIG_FILE_CANDIDATES:
        candidate = os.path.join(project_root, name)
        if os.path.isfile(candidate):
            return candidate
    return None


class MypyRunner:
    """Callable as runner(project_root, paths, cancel) -> raw lines."""

    def __init__(self, settings: ScanSettings):
        self.settings = settings

    def __call__(
        self,
        project_root: str,
        paths: Iterable[str],
        cancel: Optional[CancelToken] = None,
    ) -> List[str]:
        return self.scan(project_root, paths, cancel)

    def build_command(self, project_root: str, paths: Iterable[str]) -> List[str]:
        command = shlex.split(self.settings.mypy_command, posix=os.name != "nt")
        command.extend(REQUIRED_ARGUMENTS)
        config_file = locate_config_file(project_root, self.settings.config_file)
        if config_file:
            command.extend(["--config-file", config_file])
        if self.settings.mypy_arguments:
            command.extend(shlex.split(self.settings.mypy_arguments, posix=os.name != "nt"))
        command.extend(sorted(paths))
        return command

    def scan(
        self,
        project_root: str,
        paths: Iterable[str],
        cancel: Optional[CancelToken] = None,
    ) -> List[str]:
        """Run mypy and return its stdout split into lines.

        Raises:
            ScanCancelledError: Token tripped before or during the run
            ToolInvocationError: mypy missing or exited abnormally
        """
        paths = list(paths)
        command = self.build_command(project_root, paths)
        check_cancelled(cancel)

        logger.info("[runner] Running mypy over %d files", len(paths))
        logger.debug("[runner] Command: %s", command)
        start_time = time.time()

        try:
            process = subprocess.Popen(
                command,
                cwd=project_root,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                text=True,
                encoding="utf-8",
                errors="replace",
            )
        except OSError as e:
            raise ToolInvocationError(
                f"Unable to start mypy ({command[0]}): {e}", cause=e,
            )

        stdout, stderr = self._communicate(process, cancel)
        duration_ms = int((time.time() - start_time) * 1000)
        logger.info("[runner] mypy exited with %s in %dms", process.returncode, duration_ms)

        lines = stdout.splitlines()
        if not self._is_normal_exit(process.returncode, lines, stderr):
            raise ToolInvocationError(
                f"mypy exited with status {process.returncode}: "
                f"{(stderr or stdout or '').strip()[:STDERR_PREVIEW_CHARS]}",
                exit_code=process.returncode,
                stderr=stderr,
            )
        if stderr and stderr.strip():
            logger.debug("[runner] mypy stderr: %s", stderr.strip()[:STDERR_PREVIEW_CHARS])
        return lines

    def _is_normal_exit(self, returncode: int, lines: List[str], stderr: Optional[str]) -> bool:
        if returncode in NORMAL_EXIT_CODES:
            return True
        if returncode != BLOCKING_ERROR_EXIT_CODE:
            return False
        if any(is_diagnostic_line(line) for line in lines):
            logger.debug("[runner] mypy reported blocking errors")
            return True
        return not (stderr and stderr.strip())

    def _communicate(self, process: subprocess.Popen, cancel: Optional[CancelToken]):
        while True:
            if cancel is not None and cancel.is_cancelled():
                self._kill(process)
                raise ScanCancelledError("mypy run cancelled")
            try:
                return process.communicate(timeout=self.settings.poll_interval)
            except subprocess.TimeoutExpired:
                continue

    def _kill(self, process: subprocess.Popen) -> None:
        process.kill()
        try:
            process.communicate(timeout=5)
        except subprocess.TimeoutExpired:
            logger.warning("[runner] mypy (pid %s) did not exit after kill", process.pid)


__all__ = [
    "MypyRunner",
    "BLOCKING_ERROR_EXIT_CODE",
    "NORMAL_EXIT_CODES",
    "locate_config_file",
]
