"""When the gate gets evaluated.

Two modes, picked from check_interval:
- event mode (-1): on every save, right before the write,
- interval mode: every check_interval minutes through a RepeatingTimer.
"""

from __future__ import annotations

from typing import Callable

from .config import CommitmentConfig
from .gate import Trigger, WriteGate
from .host import BUF_WRITE_PRE, Cancellable, EditorHost
from .logger import get_logger

logger = get_logger("scheduler")


class EventTrigger:
    """Evaluate the gate before each save."""

    mode = "event"

    def __init__(self, host: EditorHost, gate: WriteGate):
        self.host = host
        self.gate = gate

    def start(self) -> None:
        self.host.on(BUF_WRITE_PRE, self._on_write)

    def stop(self) -> None:
        """Hooks are cleared with the rest of the plugin's group."""

    def _on_write(self) -> None:
        self.gate.evaluate(Trigger.SAVE)


class RepeatingTimer:
    """One-shot deferred call that reschedules itself after each run.

    The gap between runs is interval_ms plus the callback's own duration.
    stop() cancels the pending call; nothing runs after it returns.
    """

    def __init__(
        self,
        host: EditorHost,
        interval_ms: int,
        callback: Callable[[], None],
    ) -> None:
        self.host = host
        self.interval_ms = interval_ms
        self.callback = callback
        self._handle: Cancellable | None = None
        self._running = False

    @property
    def running(self) -> bool:
        return self._running

    def start(self) -> None:
        if self._running:
            return
        self._running = True
        self._schedule()

    def stop(self) -> None:
        self._running = False
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def _schedule(self) -> None:
        self._handle = self.host.defer(self.interval_ms, self._fire)

    def _fire(self) -> None:
        if not self._running:
            return
        try:
            self.callback()
        except Exception:
            logger.exception("Scheduled check failed")
        if self._running:
            self._schedule()


class IntervalTrigger:
    """Evaluate the gate every check_interval minutes."""

    mode = "interval"

    def __init__(self, host: EditorHost, gate: WriteGate, interval_ms: int):
        self.gate = gate
        self.timer = RepeatingTimer(host, interval_ms, self._on_tick)

    def start(self) -> None:
        self.timer.start()

    def stop(self) -> None:
        self.timer.stop()

    def _on_tick(self) -> None:
        self.gate.evaluate(Trigger.TIMER)


def build_scheduler(
    host: EditorHost,
    gate: WriteGate,
    config: CommitmentConfig,
) -> EventTrigger | IntervalTrigger:
    """Pick the scheduler for config.check_interval."""
    if config.interval_mode:
        return IntervalTrigger(host, gate, config.interval_ms)
    return EventTrigger(host, gate)
