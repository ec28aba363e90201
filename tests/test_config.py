# FILE: tests/test_config.py
"""Tests for ScanSettings and load_settings."""

import sys
from pathlib import Path

# Add project root to path
_project_root = Path(__file__).parent.parent
if str(_project_root) not in sys.path:
    sys.path.insert(0, str(_project_root))

import pytest
from pydantic import ValidationError

from mypy_scan.config import DEFAULT_TAB_WIDTH, ENV_VARS, ScanSettings, load_settings


@pytest.fixture
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


class TestScanSettings:
    """Field defaults and validators."""

    def test_defaults(self):
        settings = ScanSettings()

        assert settings.mypy_command == "mypy"
        assert settings.tab_width == DEFAULT_TAB_WIDTH == 4
        assert settings.source_extensions == [".py", ".pyi"]
        assert settings.scan_all_files is False
        assert settings.config_file is None
        assert settings.max_workers == 1

    def test_extensions_from_string(self):
        settings = ScanSettings(source_extensions="py, .PYI,,")
        assert settings.source_extensions == [".py", ".pyi"]

    def test_empty_extensions_rejected(self):
        with pytest.raises(ValidationError):
            ScanSettings(source_extensions=" , ")

    def test_blank_command_rejected(self):
        with pytest.raises(ValidationError):
            ScanSettings(mypy_command="   ")

    @pytest.mark.parametrize("raw,expected", [("1", True), ("yes", True), ("off", False), ("", False)])
    def test_bool_strings(self, raw, expected):
        assert ScanSettings(scan_all_files=raw).scan_all_files is expected

    def test_tab_width_must_be_positive(self):
        with pytest.raises(ValidationError):
            ScanSettings(tab_width=0)

    def test_blank_paths_become_none(self):
        settings = ScanSettings(config_file="  ", scratch_dir="")
        assert settings.config_file is None
        assert settings.scratch_dir is None

    def test_to_dict(self):
        d = ScanSettings(tab_width=8).to_dict()
        assert d["tab_width"] == 8
        assert d["mypy_command"] == "mypy"


class TestLoadSettings:
    """Environment and override precedence."""

    def test_reads_environment(self, clean_env):
        clean_env.setenv("MYPY_SCAN_TAB_WIDTH", "8")
        clean_env.setenv("MYPY_SCAN_ALL_FILES", "true")
        clean_env.setenv("MYPY_SCAN_ARGS", "--strict")

        settings = load_settings(dotenv=False)

        assert settings.tab_width == 8
        assert settings.scan_all_files is True
        assert settings.mypy_arguments == "--strict"

    def test_overrides_win(self, clean_env):
        clean_env.setenv("MYPY_SCAN_TAB_WIDTH", "8")
        settings = load_settings(dotenv=False, tab_width=2)
        assert settings.tab_width == 2

    def test_none_override_ignored(self, clean_env):
        clean_env.setenv("MYPY_SCAN_CMD", "dmypy run --")
        settings = load_settings(dotenv=False, mypy_command=None)
        assert settings.mypy_command == "dmypy run --"

    def test_bad_environment_value(self, clean_env):
        clean_env.setenv("MYPY_SCAN_MAX_WORKERS", "0")
        with pytest.raises(ValidationError):
            load_settings(dotenv=False)
