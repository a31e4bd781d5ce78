"""The editor surface commitment depends on.

Everything the plugin needs from Neovim goes through EditorHost, so the gate,
scheduler and save interceptor run unchanged against a fake host in tests.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Callable, Protocol

# Autocmd event names, as Neovim spells them
BUF_WRITE_PRE = "BufWritePre"
BUF_WRITE = "BufWrite"
BUF_WRITE_POST = "BufWritePost"
BUF_WRITE_CMD = "BufWriteCmd"


class Level(str, Enum):
    """Notification severity."""

    INFO = "info"
    WARN = "warn"
    ERROR = "error"


@dataclass
class Buffer:
    """Snapshot of the buffer being saved."""

    number: int
    name: str
    lines: list[str]
    modified: bool


class Cancellable(Protocol):
    def cancel(self) -> None: ...


class EditorHost(ABC):
    """Editor operations used by commitment."""

    @abstractmethod
    def cwd(self) -> Path:
        """Working directory of the editor session."""

    @abstractmethod
    def on(self, event: str, callback: Callable[[], None]) -> None:
        """Run callback whenever event fires."""

    @abstractmethod
    def clear_hooks(self) -> None:
        """Remove every callback registered through on()."""

    @abstractmethod
    def fire(self, event: str, bufnr: int | None = None) -> None:
        """Run all handlers of event, including other plugins' ones."""

    @abstractmethod
    def current_buffer(self) -> Buffer:
        ...

    @abstractmethod
    def set_modified(self, bufnr: int, modified: bool) -> None:
        ...

    @abstractmethod
    def is_forced_write(self) -> bool:
        """True while handling :write! (v:cmdbang)."""

    @abstractmethod
    def write_target(self) -> str | None:
        """File named by the write command being handled (<afile>), if any."""

    @abstractmethod
    def defer(self, ms: int, callback: Callable[[], None]) -> Cancellable:
        """Run callback once after ms milliseconds on the editor loop."""

    @abstractmethod
    def now_ms(self) -> float:
        """Monotonic clock in milliseconds."""

    @abstractmethod
    def notify(self, message: str, level: Level) -> None:
        """Show message to the user."""
