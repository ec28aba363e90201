# FILE: mypy_scan/checker/results.py
"""Turns raw mypy output into per-file diagnostics.

Expected line shape (anything else is ignored):

    <path>:<line>[:<col>]: <severity>: <message>[  [<code>]]

Paths are resolved against the project base dir and looked up in the
materialized-path -> handle mapping; diagnostics for files outside the
scanned set (library stubs, imported modules) are dropped. Parsing never
raises for a bad line.
"""

from __future__ import annotations

import logging
import os
import re
from contextlib import nullcontext
from typing import Dict, Iterable, List, Optional

from mypy_scan.checker.schemas import Diagnostic, Severity
from mypy_scan.config import DEFAULT_TAB_WIDTH
from mypy_scan.host import DocumentModel, FileHandle, normalize_path

logger = logging.getLogger(__name__)

_MYPY_LINE = re.compile(
    r"^(?P<path>(?:[A-Za-z]:)?[^:]+):(?P<line>\d+):(?:(?P<column>\d+):)?\s+"
    r"(?P<severity>\w+):\s(?P<message>.*?)(?:\s+\[(?P<code>[\w\-.]+)\])?\s*$"
)


def is_diagnostic_line(line: str) -> bool:
    """True when the line has the shape of a mypy diagnostic."""
    return _MYPY_LINE.match(line.strip()) is not None


def column_to_character(line_text: str, column: int, tab_width: int = DEFAULT_TAB_WIDTH) -> int:
    """Translate a 1-based reported column into a 0-based character index.

    Each tab advances the reported column to the next multiple of
    tab_width. Lines without tabs map one to one. Result is clamped to the
    line length.
    """
    target = max(column - 1, 0)
    if "\t" not in line_text:
        return min(target, len(line_text))

    visual = 0
    for index, ch in enumerate(line_text):
        if visual >= target:
            return index
        if ch == "\t":
            visual += tab_width - (visual % tab_width)
        else:
            visual += 1
    return len(line_text)


class _DocumentLines:
    """Line starts of a document, for bounds-checked offsets."""

    def __init__(self, text: str):
        self.text = text
        self.starts = [0]
        for match in re.finditer(r"\r\n|\r|\n", text):
            self.starts.append(match.end())

    @property
    def line_count(self) -> int:
        return len(self.starts)

    def line_text(self, line: int) -> str:
        start = self.starts[line - 1]
        end = self.starts[line] if line < len(self.starts) else len(self.text)
        return self.text[start:end].rstrip("\r\n")

    def offset(self, line: int, column: int, tab_width: int) -> int:
        line = min(max(line, 1), self.line_count)
        start = self.starts[line - 1]
        return min(start + column_to_character(self.line_text(line), column, tab_width), len(self.text))


class DiagnosticParser:
    """Parses one batch of mypy output.

    Args:
        tab_width: Tab stop used for column translation
        base_dir: Directory relative paths are resolved against
        documents: Optional document model; when given, parsing runs under
            its read lock and diagnostics get offsets into live content
    """

    def __init__(
        self,
        tab_width: int = DEFAULT_TAB_WIDTH,
        base_dir: Optional[str] = None,
        documents: Optional[DocumentModel] = None,
    ):
        self.tab_width = tab_width
        self.base_dir = base_dir or os.getcwd()
        self.documents = documents
        self._lines: Dict[FileHandle, Optional[_DocumentLines]] = {}

    def parse(
        self,
        raw_lines: Iterable[str],
        path_to_file: Dict[str, FileHandle],
    ) -> Dict[FileHandle, List[Diagnostic]]:
        problems: Dict[FileHandle, List[Diagnostic]] = {h: [] for h in path_to_file.values()}
        lookup = {os.path.normcase(normalize_path(p)): h for p, h in path_to_file.items()}
        self._lines = {}
        dropped = 0

        lock = self.documents.read_lock() if self.documents is not None else nullcontext()
        with lock:
            for raw in raw_lines:
                match = _MYPY_LINE.match(raw.strip())
                if not match:
                    continue

                handle = lookup.get(os.path.normcase(self._resolve(match.group("path"))))
                if handle is None:
                    dropped += 1
                    continue

                problems[handle].append(self._build(handle, match))

        if dropped:
            logger.debug("[results] Dropped %d diagnostics for files outside the scan", dropped)
        return problems

    def _resolve(self, path: str) -> str:
        if not os.path.isabs(path):
            path = os.path.join(self.base_dir, path)
        return normalize_path(path)

    def _build(self, handle: FileHandle, match: re.Match) -> Diagnostic:
        line = int(match.group("line"))
        column = int(match.group("column")) if match.group("column") else 1
        return Diagnostic(
            file=handle,
            line=line,
            column=column,
            severity=Severity.parse(match.group("severity")),
            message=match.group("message").strip(),
            code=match.group("code"),
            offset=self._offset(handle, line, column),
        )

    def _offset(self, handle: FileHandle, line: int, column: int) -> Optional[int]:
        if self.documents is None:
            return None
        if handle not in self._lines:
            try:
                self._lines[handle] = _DocumentLines(self.documents.current_text(handle))
            except (OSError, UnicodeError) as e:
                logger.debug("[results] No live content for %s: %s", handle.path, e)
                self._lines[handle] = None
        lines = self._lines[handle]
        if lines is None:
            return None
        return lines.offset(line, column, self.tab_width)


def parse_diagnostics(
    raw_lines: Iterable[str],
    tab_width: int,
    base_dir: Optional[str],
    path_to_file: Dict[str, FileHandle],
    documents: Optional[DocumentModel] = None,
) -> Dict[FileHandle, List[Diagnostic]]:
    """Functional form of DiagnosticParser(...).parse(...)."""
    return DiagnosticParser(tab_width, base_dir, documents).parse(raw_lines, path_to_file)


__all__ = [
    "DiagnosticParser",
    "column_to_character",
    "is_diagnostic_line",
    "parse_diagnostics",
]
