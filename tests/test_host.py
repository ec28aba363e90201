# FILE: tests/test_host.py
"""Tests for Project, FileHandle and WorkspaceDocuments."""

import sys
import threading
from pathlib import Path

# Add project root to path
_project_root = Path(__file__).parent.parent
if str(_project_root) not in sys.path:
    sys.path.insert(0, str(_project_root))

import pytest

from mypy_scan.host import FileHandle, Project, ReadWriteLock, WorkspaceDocuments, is_under


class TestPaths:
    def test_is_under(self, tmp_path):
        assert is_under(str(tmp_path / "a" / "b.py"), str(tmp_path))
        assert is_under(str(tmp_path), str(tmp_path))
        assert not is_under(str(tmp_path.parent / "other.py"), str(tmp_path))

    def test_sibling_prefix_is_not_under(self, tmp_path):
        assert not is_under(str(tmp_path / "srcx" / "a.py"), str(tmp_path / "src"))

    def test_handle_identity_is_path(self, tmp_path):
        a = FileHandle.for_path(str(tmp_path / "x" / ".." / "m.PY"))
        b = FileHandle.for_path(str(tmp_path / "m.PY"))
        assert a == b
        assert len({a, b}) == 1
        assert a.extension == ".py"
        assert a.name == "m.PY"


class TestProject:
    def test_source_roots_default_to_base(self, tmp_path):
        project = Project(str(tmp_path))
        assert project.source_roots == [project.base_path]

    def test_membership(self, project, project_dir):
        assert project.is_in_source_root(str(project_dir / "src" / "pkg" / "a.py"))
        assert not project.is_in_source_root(str(project_dir / "tools" / "build.py"))
        assert project.is_in_project(str(project_dir / "tools" / "build.py"))

    def test_excluded(self, project_dir):
        project = Project(str(project_dir), excluded_roots=[str(project_dir / "tools")])
        assert project.is_excluded(str(project_dir / "tools" / "build.py"))
        assert not project.is_excluded(str(project_dir / "src" / "pkg" / "a.py"))


class TestWorkspaceDocuments:
    """Filesystem plus unsaved buffers."""

    def test_unmodified_file(self, documents, project_dir):
        handle = documents.resolve_path(str(project_dir / "src" / "pkg" / "a.py"))

        assert handle is not None
        assert documents.current_text(handle) == "x: int = 1\n"
        assert documents.on_disk_text(handle) == documents.current_text(handle)
        assert not documents.is_modified(handle)

    def test_edit_shadows_disk(self, documents, project_dir):
        handle = documents.edit(str(project_dir / "src" / "pkg" / "a.py"), "x: int = 'one'\n")

        assert documents.current_text(handle) == "x: int = 'one'\n"
        assert documents.on_disk_text(handle) == "x: int = 1\n"
        assert documents.is_modified(handle)

    def test_save_writes_and_clears_buffer(self, documents, project_dir):
        path = project_dir / "src" / "pkg" / "a.py"
        handle = documents.edit(str(path), "x: int = 2\n")
        documents.save(handle)

        assert path.read_text(encoding="utf-8") == "x: int = 2\n"
        assert not documents.is_modified(handle)

    def test_discard(self, documents, project_dir):
        handle = documents.edit(str(project_dir / "src" / "pkg" / "a.py"), "junk")
        documents.discard(handle)
        assert documents.current_text(handle) == "x: int = 1\n"

    def test_memory_only_file_is_listed(self, documents, project_dir):
        pkg = project_dir / "src" / "pkg"
        handle = documents.edit(str(pkg / "new.py"), "z = 1\n")

        assert handle.path in documents.list_children(str(pkg))
        assert documents.resolve_path(handle.path) == handle
        assert documents.on_disk_text(handle) is None

    def test_missing_file(self, documents, tmp_path):
        handle = FileHandle.for_path(str(tmp_path / "nope.py"))

        assert documents.resolve_path(handle.path) is None
        with pytest.raises(FileNotFoundError):
            documents.current_text(handle)

    def test_list_missing_directory_raises(self, documents, tmp_path):
        with pytest.raises(OSError):
            documents.list_children(str(tmp_path / "missing"))


class TestReadWriteLock:
    def test_readers_share(self):
        lock = ReadWriteLock()
        with lock.read_locked():
            entered = threading.Event()

            def reader():
                with lock.read_locked():
                    entered.set()

            t = threading.Thread(target=reader)
            t.start()
            t.join(timeout=2)
            assert entered.is_set()

    def test_writer_waits_for_reader(self):
        lock = ReadWriteLock()
        wrote = threading.Event()

        def writer():
            with lock.write_locked():
                wrote.set()

        with lock.read_locked():
            t = threading.Thread(target=writer)
            t.start()
            assert not wrote.wait(timeout=0.1)
        t.join(timeout=2)
        assert wrote.is_set()
