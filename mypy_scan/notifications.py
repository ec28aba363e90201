# FILE: mypy_scan/notifications.py
"""User-facing notification sink.

Scan failures are surfaced here before listeners see them. The default
sink only logs; an editor integration passes its own callable to show a
balloon, status-bar message, etc.
"""

from __future__ import annotations

import logging
from typing import Callable, List, Optional, Tuple

from mypy_scan.errors import MypyPluginError

logger = logging.getLogger(__name__)

NOTIFICATION_TITLE = "Mypy"

# sink(title, message, error)
NotificationSink = Callable[[str, str, Optional[BaseException]], None]


def _log_sink(title: str, message: str, error: Optional[BaseException]) -> None:
    logger.warning("[notifications] %s: %s", title, message, exc_info=error)


class Notifications:
    def __init__(self, sink: Optional[NotificationSink] = None):
        self.sink = sink or _log_sink

    def show_exception(self, error: BaseException) -> None:
        """Report a scan failure. The cause, when present, is appended."""
        message = str(error)
        cause = getattr(error, "cause", None)
        if isinstance(error, MypyPluginError) and cause is not None:
            message = f"{message} ({type(cause).__name__}: {cause})"
        self._emit(message, error)

    def show_warning(self, message: str) -> None:
        self._emit(message, None)

    def _emit(self, message: str, error: Optional[BaseException]) -> None:
        try:
            self.sink(NOTIFICATION_TITLE, message, error)
        except Exception as e:
            logger.error("[notifications] Sink failed: %s", e, exc_info=True)


class RecordingNotifications(Notifications):
    """Keeps every notification in memory. Used by the CLI and tests."""

    def __init__(self):
        self.messages: List[Tuple[str, Optional[BaseException]]] = []
        super().__init__(self._record)

    def _record(self, title: str, message: str, error: Optional[BaseException]) -> None:
        self.messages.append((message, error))


__all__ = [
    "NOTIFICATION_TITLE",
    "NotificationSink",
    "Notifications",
    "RecordingNotifications",
]
