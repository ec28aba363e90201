# FILE: mypy_scan/config.py
"""Scan settings.

All tunables in one place. Values come from the environment (a `.env` file
in the working directory is honoured), explicit keyword overrides win.
Settings are never written back anywhere.
"""

from __future__ import annotations

import os
from typing import Any, Dict, List, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator

# =============================================================================
# Defaults
# =============================================================================

DEFAULT_MYPY_COMMAND = "mypy"
DEFAULT_TAB_WIDTH = 4
DEFAULT_SOURCE_EXTENSIONS: List[str] = [".py", ".pyi"]
DEFAULT_MAX_WORKERS = 1
DEFAULT_POLL_INTERVAL = 0.1

# Looked up in the project root, first match wins
CONFIG_FILE_CANDIDATES: List[str] = [
    "mypy.ini",
    ".mypy.ini",
    "pyproject.toml",
    "setup.cfg",
]

# env var -> settings field
ENV_VARS: Dict[str, str] = {
    "MYPY_SCAN_CMD": "mypy_command",
    "MYPY_SCAN_ARGS": "mypy_arguments",
    "MYPY_SCAN_CONFIG_FILE": "config_file",
    "MYPY_SCAN_TAB_WIDTH": "tab_width",
    "MYPY_SCAN_ALL_FILES": "scan_all_files",
    "MYPY_SCAN_EXTENSIONS": "source_extensions",
    "MYPY_SCAN_SCRATCH_DIR": "scratch_dir",
    "MYPY_SCAN_MAX_WORKERS": "max_workers",
    "MYPY_SCAN_POLL_INTERVAL": "poll_interval",
}

_TRUE_VALUES = {"1", "true", "yes", "on"}


class ScanSettings(BaseModel):
    """Settings for one plugin instance."""

    mypy_command: str = DEFAULT_MYPY_COMMAND
    mypy_arguments: str = ""
    config_file: Optional[str] = None
    tab_width: int = Field(default=DEFAULT_TAB_WIDTH, ge=1)
    scan_all_files: bool = False
    source_extensions: List[str] = Field(default_factory=lambda: list(DEFAULT_SOURCE_EXTENSIONS))
    scratch_dir: Optional[str] = None
    max_workers: int = Field(default=DEFAULT_MAX_WORKERS, ge=1)
    poll_interval: float = Field(default=DEFAULT_POLL_INTERVAL, gt=0)

    @field_validator("mypy_command")
    @classmethod
    def validate_mypy_command(cls, v):
        """Reject a blank command."""
        if not v or not v.strip():
            raise ValueError("mypy_command must not be empty")
        return v.strip()

    @field_validator("scan_all_files", mode="before")
    @classmethod
    def parse_bool(cls, v):
        if isinstance(v, str):
            return v.strip().lower() in _TRUE_VALUES
        return v

    @field_validator("source_extensions", mode="before")
    @classmethod
    def parse_extensions(cls, v):
        """Accept "py, .pyi" style strings and normalize to [".py", ".pyi"]."""
        if isinstance(v, str):
            v = v.split(",")
        normalized = []
        for ext in v or []:
            ext = str(ext).strip().lower()
            if not ext:
                continue
            if not ext.startswith("."):
                ext = "." + ext
            normalized.append(ext)
        if not normalized:
            raise ValueError("source_extensions must name at least one extension")
        return normalized

    @field_validator("config_file", "scratch_dir", mode="before")
    @classmethod
    def blank_to_none(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump()


def _read_environment() -> Dict[str, Any]:
    values: Dict[str, Any] = {}
    for env_name, field_name in ENV_VARS.items():
        raw = os.getenv(env_name)
        if raw is not None:
            values[field_name] = raw
    return values


def load_settings(dotenv: bool = True, **overrides: Any) -> ScanSettings:
    """Build settings from the environment plus explicit overrides.

    Args:
        dotenv: Load a `.env` file first (never overrides real env vars)
        **overrides: Field values that take precedence over the environment

    Raises:
        pydantic.ValidationError: If a value is out of range or malformed
    """
    if dotenv:
        load_dotenv()

    values = _read_environment()
    values.update({k: v for k, v in overrides.items() if v is not None})
    return ScanSettings(**values)


__all__ = [
    "CONFIG_FILE_CANDIDATES",
    "DEFAULT_SOURCE_EXTENSIONS",
    "DEFAULT_TAB_WIDTH",
    "ScanSettings",
    "load_settings",
]
