"""
User-visible notices (the dApp's toasts and alerts).

The session manager and gateway report outcomes through a Notifier; the
presentation layer decides how to render them. LogNotifier only logs;
CollectingNotifier keeps a queue that the UI drains.
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from enum import Enum
from typing import Protocol

from genesis_client.genesis_logging import get_logger

logger = get_logger(__name__)


class NoticeLevel(str, Enum):
    INFO = "info"
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"


@dataclass(frozen=True)
class Notice:
    level: NoticeLevel
    message: str


class Notifier(Protocol):
    def notify(self, level: NoticeLevel, message: str) -> None: ...


class LogNotifier:
    """Default notifier: every notice becomes a structured log line at a matching level."""

    def notify(self, level: NoticeLevel, message: str) -> None:
        if level is NoticeLevel.ERROR:
            log = logger.error
        elif level is NoticeLevel.WARNING:
            log = logger.warning
        else:
            log = logger.info
        log("user_notice", notice_level=level.value, notice=message)


class CollectingNotifier:
    """Buffers notices until the presentation layer drains them."""

    def __init__(self, maxlen: int = 100) -> None:
        self._notices: deque[Notice] = deque(maxlen=maxlen)

    def notify(self, level: NoticeLevel, message: str) -> None:
        self._notices.append(Notice(level, message))

    def drain(self) -> list[Notice]:
        out = list(self._notices)
        self._notices.clear()
        return out

    def __len__(self) -> int:
        return len(self._notices)
