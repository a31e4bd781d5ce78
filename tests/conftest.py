"""Shared test fixtures for commitment tests."""

import logging
import shutil
import subprocess
import sys
from pathlib import Path

import pytest

from commitment.host import Buffer, EditorHost
from commitment.useless_messages import is_useless


class _StdoutHandler(logging.Handler):
    """A handler that always writes to the *current* sys.stdout.

    Unlike StreamHandler(sys.stdout), this resolves sys.stdout at emit-time
    so it works with pytest's capsys fixture.
    """

    def emit(self, record):
        try:
            msg = self.format(record)
            sys.stdout.write(msg + "\n")
            sys.stdout.flush()
        except Exception:
            self.handleError(record)


@pytest.fixture(autouse=True)
def _setup_logging():
    """Route all commitment loggers to stdout so capsys can capture them."""
    handler = _StdoutHandler()
    handler.setFormatter(logging.Formatter("%(message)s"))
    handler.setLevel(logging.DEBUG)

    root_logger = logging.getLogger("commitment")
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(logging.DEBUG)
    root_logger.propagate = False

    yield

    root_logger.removeHandler(handler)


# ── Fakes ─────────────────────────────────────────────────────────────


class FakeClock:
    def __init__(self, start: float = 0.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, ms: float) -> None:
        self.now += ms


class FakeInspector:
    """Scripted git state."""

    def __init__(self, clean=False, subject="add login form", repo=True):
        self.clean = clean
        self.subject = subject
        self.repo = repo
        self.pending_files: set[str] = set()

    def is_repository(self) -> bool:
        return self.repo

    def tree_is_clean(self) -> bool:
        return self.clean

    def last_commit_subject(self) -> str:
        return self.subject

    def file_has_pending_changes(self, path) -> bool:
        return str(path) in self.pending_files

    def is_useless_commit(self) -> bool:
        return is_useless(self.subject)


class _Deferred:
    def __init__(self, due: float, callback):
        self.due = due
        self.callback = callback
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class FakeHost(EditorHost):
    """In-memory editor: one buffer, manual clock, manual timers."""

    def __init__(self, cwd: Path, filename: str = "notes.txt"):
        self._cwd = Path(cwd)
        self.clock = FakeClock()
        self.hooks: dict[str, list] = {}
        self.fired: list[str] = []
        self.notifications: list[tuple[str, str]] = []
        self.deferred: list[_Deferred] = []
        self.forced = False
        self.afile: str | None = None
        self.buffer = Buffer(
            number=1,
            name=str(self._cwd / filename),
            lines=["hello", "world"],
            modified=True,
        )

    def cwd(self) -> Path:
        return self._cwd

    def on(self, event, callback) -> None:
        self.hooks.setdefault(event, []).append(callback)

    def clear_hooks(self) -> None:
        self.hooks.clear()

    def fire(self, event, bufnr=None) -> None:
        self.fired.append(event)
        for callback in list(self.hooks.get(event, ())):
            callback()

    def current_buffer(self) -> Buffer:
        return Buffer(
            number=self.buffer.number,
            name=self.buffer.name,
            lines=list(self.buffer.lines),
            modified=self.buffer.modified,
        )

    def set_modified(self, bufnr, modified) -> None:
        self.buffer.modified = modified

    def is_forced_write(self) -> bool:
        return self.forced

    def write_target(self) -> str | None:
        return self.afile

    def defer(self, ms, callback) -> _Deferred:
        handle = _Deferred(self.clock.now + ms, callback)
        self.deferred.append(handle)
        return handle

    def now_ms(self) -> float:
        return self.clock.now

    def notify(self, message, level) -> None:
        self.notifications.append((message, level.value))

    # Test helpers

    def save(self, target: str | None = None) -> None:
        """Simulate :write [target]. Neovim skips its own write if BufWriteCmd is hooked."""
        if self.hooks.get("BufWriteCmd"):
            self.afile = target or self.buffer.name
            try:
                self.fire("BufWriteCmd")
            finally:
                self.afile = None
            return
        self.fire("BufWritePre")
        (self._cwd / (target or self.buffer.name)).write_text("\n".join(self.buffer.lines) + "\n")
        if target is None:
            self.buffer.modified = False
        self.fire("BufWritePost")

    def run_timers(self, ms: float) -> int:
        """Advance the clock and run every due, uncancelled timer."""
        target = self.clock.now + ms
        ran = 0
        while True:
            due = [d for d in self.deferred if not d.cancelled and d.due <= target]
            if not due:
                break
            handle = min(due, key=lambda d: d.due)
            self.deferred.remove(handle)
            self.clock.now = handle.due
            handle.callback()
            ran += 1
        self.clock.now = target
        return ran

    def warnings(self) -> list[str]:
        return [m for m, level in self.notifications if level == "warn"]


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def inspector():
    return FakeInspector()


@pytest.fixture
def host(tmp_path):
    return FakeHost(tmp_path)


# ── Real git repositories ─────────────────────────────────────────────

requires_git = pytest.mark.skipif(shutil.which("git") is None, reason="git not installed")


def git(repo: Path, *args: str) -> str:
    result = subprocess.run(
        ["git", *args], cwd=repo, capture_output=True, text=True, check=True
    )
    return result.stdout


@pytest.fixture
def git_repo(tmp_path):
    """An initialised repository with identity configured and no commits."""
    repo = tmp_path / "repo"
    repo.mkdir()
    git(repo, "init", "-q")
    git(repo, "config", "user.email", "dev@example.com")
    git(repo, "config", "user.name", "Dev")
    git(repo, "config", "commit.gpgsign", "false")
    return repo


def commit_file(repo: Path, name: str, content: str, message: str) -> None:
    (repo / name).write_text(content)
    git(repo, "add", name)
    git(repo, "commit", "-q", "-m", message)
