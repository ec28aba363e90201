# FILE: tests/conftest.py
"""
Pytest configuration for the mypy-scan test suite.

Configures:
- pytest-asyncio for the awaitable plugin API
- a throwaway project tree per test
- settings that never read the real environment
- stub runner / recording listener helpers
"""
import sys
import threading
from pathlib import Path

# Add project root to path
_project_root = Path(__file__).parent.parent
if str(_project_root) not in sys.path:
    sys.path.insert(0, str(_project_root))

import pytest

from mypy_scan.config import ScanSettings
from mypy_scan.host import Project, WorkspaceDocuments

pytest_plugins = ["pytest_asyncio"]


# =============================================================================
# Helpers
# =============================================================================

class RecordingListener:
    """ScannerListener that keeps every event."""

    def __init__(self):
        self.started = []
        self.completed = []
        self.failed = []

    def scan_starting(self, files):
        self.started.append(list(files))

    def scan_completed_successfully(self, results):
        self.completed.append(results)

    def scan_failed_with_error(self, error):
        self.failed.append(error)


class StubRunner:
    """Stands in for MypyRunner.

    lines may be a list or a callable(paths) -> list so tests can echo back
    the materialized paths they were handed.
    """

    def __init__(self, lines=None, error=None):
        self.lines = lines if lines is not None else []
        self.error = error
        self.calls = []

    def __call__(self, project_root, paths, cancel=None):
        self.calls.append((project_root, list(paths)))
        if self.error is not None:
            raise self.error
        if callable(self.lines):
            return self.lines(list(paths))
        return list(self.lines)


class BlockingRunner:
    """Blocks until the cancel token trips, like a long mypy run."""

    def __init__(self):
        self.entered = threading.Event()

    def __call__(self, project_root, paths, cancel=None):
        from mypy_scan.checker.cancellation import ScanCancelledError

        self.entered.set()
        if cancel is None or not cancel.wait(timeout=10):
            raise AssertionError("runner was never cancelled")
        raise ScanCancelledError("mypy run cancelled")


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture
def project_dir(tmp_path_factory):
    """
    proj/
      src/pkg/a.py
      src/pkg/b.py
      src/pkg/notes.txt
      tools/build.py
      mypy.ini
    """
    root = tmp_path_factory.mktemp("ws") / "proj"
    pkg = root / "src" / "pkg"
    pkg.mkdir(parents=True)
    (pkg / "a.py").write_text("x: int = 1\n", encoding="utf-8")
    (pkg / "b.py").write_text("y: str = 'b'\n", encoding="utf-8")
    (pkg / "notes.txt").write_text("not python\n", encoding="utf-8")
    (root / "tools").mkdir()
    (root / "tools" / "build.py").write_text("import os\n", encoding="utf-8")
    (root / "mypy.ini").write_text("[mypy]\n", encoding="utf-8")
    return root


@pytest.fixture
def project(project_dir):
    return Project(str(project_dir), source_roots=[str(project_dir / "src")])


@pytest.fixture
def documents():
    return WorkspaceDocuments()


@pytest.fixture
def settings(tmp_path):
    scratch = tmp_path / "scratch"
    scratch.mkdir()
    return ScanSettings(scratch_dir=str(scratch), poll_interval=0.01)


@pytest.fixture
def listener():
    return RecordingListener()
