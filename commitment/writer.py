"""Save interception for hardcore mode.

Replaces the editor's own write (BufWriteCmd) so a locked gate can keep the
buffer off the disk. Other plugins still see BufWritePre/BufWritePost.
"""

from __future__ import annotations

import os
import stat
import tempfile
from enum import Enum
from pathlib import Path

from .gate import WriteGate
from .host import BUF_WRITE, BUF_WRITE_POST, BUF_WRITE_PRE, EditorHost, Level
from .logger import get_logger

logger = get_logger("writer")


class SaveResult(str, Enum):
    WRITTEN = "written"
    BLOCKED = "blocked"
    UNCHANGED = "unchanged"
    FAILED = "failed"


def _display_path(name: str, cwd: Path) -> str:
    try:
        return str(Path(name).relative_to(cwd))
    except ValueError:
        return name


def encode_lines(lines: list[str]) -> bytes:
    """Buffer lines as file bytes, one trailing newline.

    pynvim decodes undecodable bytes with surrogateescape; encoding the same
    way puts them back unchanged.
    """
    return ("\n".join(lines) + "\n").encode("utf-8", "surrogateescape")


def _new_file_mode() -> int:
    umask = os.umask(0)
    os.umask(umask)
    return 0o666 & ~umask


def write_atomic(target: Path, payload: bytes) -> None:
    """Replace target with payload, leaving it untouched on any failure."""
    # Write through symlinks instead of replacing them
    target = target.resolve()
    try:
        mode = stat.S_IMODE(target.stat().st_mode)
    except FileNotFoundError:
        mode = _new_file_mode()

    fd, temp_path = tempfile.mkstemp(dir=target.parent, prefix=f".{target.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(payload)
            f.flush()
            os.fsync(f.fileno())
        os.chmod(temp_path, mode)
        os.replace(temp_path, target)
    except BaseException:
        try:
            os.unlink(temp_path)
        except OSError:
            pass
        raise


class SaveInterceptor:
    """Write the buffer being saved unless the gate blocks it."""

    def __init__(self, host: EditorHost, gate: WriteGate):
        self.host = host
        self.gate = gate

    def _resolve_target(self, target: str | None, buffer_name: str) -> Path:
        if not target:
            return Path(buffer_name)
        path = Path(target)
        return path if path.is_absolute() else self.host.cwd() / path

    def handle_save(self, force: bool = False, target: str | None = None) -> SaveResult:
        """Handle one :write of the current buffer.

        Args:
            force: True for :write!, which skips the modified check but
                not the lock.
            target: File named by the write command (<afile>). Defaults to
                the buffer's own file. Writing elsewhere leaves 'modified'
                set, as Neovim does without cpo-+.
        """
        buffer = self.host.current_buffer()
        # Event mode evaluates the gate from here
        self.host.fire(BUF_WRITE_PRE, buffer.number)

        if self.gate.blocks_writes():
            logger.info("Write blocked: %s", Path(target or buffer.name).name)
            self.host.fire(BUF_WRITE_POST, buffer.number)
            return SaveResult.BLOCKED

        # Hooks may have changed the buffer (formatters)
        buffer = self.host.current_buffer()
        path = self._resolve_target(target, buffer.name)
        own_file = bool(buffer.name) and path.resolve() == Path(buffer.name).resolve()
        if own_file and not buffer.modified and not force:
            return SaveResult.UNCHANGED

        self.host.fire(BUF_WRITE, buffer.number)
        try:
            payload = encode_lines(buffer.lines)
            write_atomic(path, payload)
        except (OSError, UnicodeError) as e:
            logger.error("Failed to write %s: %s", path.name, e)
            self.host.notify(f"Failed to write file: {path}", Level.ERROR)
            return SaveResult.FAILED

        if own_file:
            self.host.set_modified(buffer.number, False)
        self.host.notify(
            f'"{_display_path(str(path), self.host.cwd())}" {len(buffer.lines)}L, {len(payload)}B',
            Level.INFO,
        )
        self.host.fire(BUF_WRITE_POST, buffer.number)
        return SaveResult.WRITTEN
