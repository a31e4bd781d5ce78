"""Notification sinks and the debounced notifier.

The notifier keeps one timestamp: the time of the previous call, delivered or
not. A message is delivered only when more than the debounce interval has
passed since that previous call, so a steady burst of triggers stays silent
until it pauses.
"""

from __future__ import annotations

import time
from abc import ABC, abstractmethod
from typing import Callable

from .host import EditorHost, Level
from .logger import get_logger

logger = get_logger("notifier")

DEBOUNCE_INTERVAL_MS = 500


class NotificationSink(ABC):
    """Where user-facing messages end up."""

    @abstractmethod
    def send(self, message: str, level: Level) -> None:
        ...


class HostSink(NotificationSink):
    """Send messages through the editor's notification UI."""

    def __init__(self, host: EditorHost):
        self.host = host

    def send(self, message: str, level: Level) -> None:
        self.host.notify(message, level)


class LoggingSink(NotificationSink):
    """Send messages to the log only (headless use)."""

    _LEVELS = {
        Level.INFO: "info",
        Level.WARN: "warning",
        Level.ERROR: "error",
    }

    def send(self, message: str, level: Level) -> None:
        getattr(logger, self._LEVELS[level])(message)


def _monotonic_ms() -> float:
    return time.monotonic() * 1000


class DebouncedNotifier:
    """Forward at most one message per quiet period to a sink.

    Args:
        sink: Destination for delivered messages.
        clock: Monotonic clock returning milliseconds.
        interval_ms: Minimum gap since the previous call.
    """

    def __init__(
        self,
        sink: NotificationSink,
        clock: Callable[[], float] | None = None,
        interval_ms: int = DEBOUNCE_INTERVAL_MS,
    ) -> None:
        self.sink = sink
        self.clock = clock or _monotonic_ms
        self.interval_ms = interval_ms
        self.last_call: float | None = None

    def notify(self, message: str, level: Level = Level.WARN) -> bool:
        """Send message unless the previous call was too recent.

        Returns True if the message was delivered.
        """
        now = self.clock()
        delivered = self.last_call is None or now - self.last_call > self.interval_ms
        self.last_call = now

        if delivered:
            self.sink.send(message, level)
        else:
            logger.debug("Notification suppressed (debounce)")
        return delivered
