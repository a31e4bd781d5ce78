"""Write gate: decides on every tick whether saving is allowed.

Each tick (a save attempt, or a timer firing in interval mode):

1. Clean tree and a meaningful last commit -> unlock, reset the counter.
2. Dirty tree on an attempt past writes_number, or clean tree whose last
   commit is useless -> lock and warn.
3. Anything else leaves the state alone.

The write counter is then incremented, so right after a reset it reads 1.
With writes_number = k the (k+1)-th consecutive dirty save locks.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Protocol

from .config import CommitmentConfig
from .host import Level
from .logger import log_gate_transition
from .notifier import DebouncedNotifier

WRITE_DISABLED_SUFFIX = "\n(writing to file disabled)"


class Inspector(Protocol):
    def tree_is_clean(self) -> bool: ...

    def is_useless_commit(self) -> bool: ...


class Trigger(str, Enum):
    SAVE = "save"
    TIMER = "timer"


class Reason(str, Enum):
    """Why the gate is locked."""

    PENDING_CHANGES = "pending_changes"
    USELESS_COMMIT = "useless_commit"


class Outcome(str, Enum):
    ALLOW = "allow"
    WARN = "warn"
    BLOCK = "block"


@dataclass
class GateState:
    writes_count: int = 0
    locked: bool = False
    reason: Reason | None = None


@dataclass(frozen=True)
class Decision:
    """Result of one gate tick."""

    outcome: Outcome
    clean: bool
    useless: bool
    message: str | None = None


class WriteGate:
    """Owns the write counter and lock flag for one editor session."""

    def __init__(
        self,
        config: CommitmentConfig,
        inspector: Inspector,
        notifier: DebouncedNotifier,
    ) -> None:
        self.config = config
        self.inspector = inspector
        self.notifier = notifier
        self.state = GateState()

    @property
    def locked(self) -> bool:
        return self.state.locked

    @property
    def writes_count(self) -> int:
        return self.state.writes_count

    def blocks_writes(self) -> bool:
        """True if a save attempted now must not reach the disk."""
        if not self.state.locked:
            return False
        if self.config.prevent_write:
            return True
        return (
            self.config.stop_on_useless_commit
            and self.state.reason is Reason.USELESS_COMMIT
        )

    def message_for(self, reason: Reason) -> str:
        """Pick the warning text for a lock caused by reason."""
        config = self.config
        if reason is Reason.USELESS_COMMIT:
            message = config.message_useless_commit
        elif config.prevent_write:
            message = config.message_write_prevent
        else:
            message = config.message

        if self.blocks_writes():
            message += WRITE_DISABLED_SUFFIX
        return message

    def evaluate(self, trigger: Trigger = Trigger.SAVE) -> Decision:
        """Run one tick against the current repository state."""
        clean = self.inspector.tree_is_clean()
        useless = self.inspector.is_useless_commit()
        # This tick is attempt number writes_count + 1. A timer firing
        # means the interval itself has run out.
        attempt = self.state.writes_count + 1
        exceeded = trigger is Trigger.TIMER or attempt > self.config.writes_number
        was_locked = self.state.locked
        message = None

        if clean and not useless:
            self.state.locked = False
            self.state.reason = None
            self.state.writes_count = 0
        elif (not clean and exceeded) or (clean and useless):
            self.state.locked = True
            self.state.reason = Reason.USELESS_COMMIT if clean else Reason.PENDING_CHANGES
            message = self.message_for(self.state.reason)
            self.notifier.notify(message, Level.WARN)

        self.state.writes_count += 1

        if was_locked != self.state.locked:
            log_gate_transition(
                self.state.locked,
                self.state.writes_count,
                self.state.reason.value if self.state.reason else None,
                trigger.value,
            )

        if self.blocks_writes():
            outcome = Outcome.BLOCK
        elif message is not None:
            outcome = Outcome.WARN
        else:
            outcome = Outcome.ALLOW
        return Decision(outcome=outcome, clean=clean, useless=useless, message=message)

    def reset(self) -> None:
        self.state = GateState()
