# FILE: mypy_scan/cli.py
"""
Run one mypy scan from the command line.

Usage:
    mypy-scan                       # scan the current directory
    mypy-scan src tests --project . --all-files
    python -m mypy_scan --verbose

Exit codes:
    0: no errors reported
    1: at least one error-severity diagnostic
    2: the scan failed
"""

from __future__ import annotations

import argparse
import logging
import os
import sys
from typing import List, Optional

from mypy_scan.checker.scan_files import ScanFiles
from mypy_scan.checker.schemas import OutcomeKind, Severity
from mypy_scan.config import load_settings
from mypy_scan.host import Project, WorkspaceDocuments
from mypy_scan.notifications import RecordingNotifications

logger = logging.getLogger(__name__)

EXIT_CLEAN = 0
EXIT_ERRORS = 1
EXIT_FAILED = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="mypy-scan",
        description="Scan Python sources with mypy and print per-file diagnostics",
    )
    parser.add_argument(
        "roots",
        nargs="*",
        help="Directories or files to scan (default: the project directory)",
    )
    parser.add_argument(
        "--project",
        default=os.getcwd(),
        help="Project base directory (default: current directory)",
    )
    parser.add_argument(
        "--all-files",
        action="store_true",
        help="Scan every Python file in the project, not only source roots",
    )
    parser.add_argument(
        "--tab-width",
        type=int,
        default=None,
        help="Tab stop used for column translation",
    )
    parser.add_argument(
        "--config-file",
        default=None,
        help="mypy config file (default: located in the project directory)",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Debug logging",
    )
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
    )

    overrides = {"tab_width": args.tab_width, "config_file": args.config_file}
    if args.all_files:
        overrides["scan_all_files"] = True
    try:
        settings = load_settings(**overrides)
    except ValueError as e:
        print(f"Error: invalid settings: {e}", file=sys.stderr)
        return EXIT_FAILED

    if not os.path.isdir(args.project):
        print(f"Error: Project directory not found: {args.project}", file=sys.stderr)
        return EXIT_FAILED

    project = Project(args.project)
    notifications = RecordingNotifications()
    scan = ScanFiles.for_roots(
        project,
        WorkspaceDocuments(),
        args.roots or [project.base_path],
        settings=settings,
        notifications=notifications,
    )
    results = scan.call()

    if scan.outcome is None or scan.outcome.kind == OutcomeKind.FAILED:
        for message, _ in notifications.messages:
            print(f"Error: {message}", file=sys.stderr)
        return EXIT_FAILED

    diagnostics = sorted(results.all_diagnostics(), key=lambda d: (d.file.path, d.line, d.column))
    for diagnostic in diagnostics:
        print(diagnostic.format())

    errors = results.count(Severity.ERROR)
    logger.info("[cli] %d files, %d diagnostics, %d errors", len(results), len(diagnostics), errors)
    return EXIT_ERRORS if errors else EXIT_CLEAN


if __name__ == "__main__":
    sys.exit(main())
