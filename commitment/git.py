"""Read-only git queries used by the write gate.

Every failure (non-zero exit, git not installed, timeout) collapses to
False or "" so callers never see an exception from here.
"""

import subprocess
from pathlib import Path

from .logger import log_commit_checked, log_git_failure
from .useless_messages import is_useless

GIT_TIMEOUT = 10  # seconds


def run_git(
    args: list[str],
    cwd: Path | str,
) -> tuple[bool, str]:
    """Run a git command, return (success, stdout)."""
    try:
        result = subprocess.run(
            ["git", *args],
            cwd=cwd,
            capture_output=True,
            text=True,
            timeout=GIT_TIMEOUT,
        )
    except subprocess.TimeoutExpired:
        log_git_failure(args, "timeout")
        return False, ""
    except OSError as e:
        # FileNotFoundError when git is missing or cwd is gone
        log_git_failure(args, type(e).__name__)
        return False, ""

    if result.returncode != 0:
        log_git_failure(args, f"exit {result.returncode}")
        return False, ""
    return True, result.stdout.strip()


def is_repository(cwd: Path | str) -> bool:
    """Check if cwd is inside a git working tree."""
    ok, toplevel = run_git(["rev-parse", "--show-toplevel"], cwd)
    return ok and toplevel != ""


def tree_is_clean(cwd: Path | str) -> bool:
    """True if there are no staged, unstaged or untracked changes."""
    ok, status = run_git(["status", "--porcelain"], cwd)
    return ok and status == ""


def last_commit_subject(cwd: Path | str) -> str:
    """Subject line of HEAD, "" when there are no commits."""
    ok, subject = run_git(["show", "-s", "--format=%s"], cwd)
    return subject if ok else ""


def file_has_pending_changes(cwd: Path | str, path: Path | str) -> bool:
    """True if the given file has uncommitted changes."""
    ok, status = run_git(["status", "--short", "--", str(path)], cwd)
    return ok and status != ""


class GitInspector:
    """The git queries bound to one working directory."""

    def __init__(self, cwd: Path | str):
        self.cwd = Path(cwd)

    def is_repository(self) -> bool:
        return is_repository(self.cwd)

    def tree_is_clean(self) -> bool:
        return tree_is_clean(self.cwd)

    def last_commit_subject(self) -> str:
        return last_commit_subject(self.cwd)

    def file_has_pending_changes(self, path: Path | str) -> bool:
        return file_has_pending_changes(self.cwd, path)

    def is_useless_commit(self) -> bool:
        subject = self.last_commit_subject()
        useless = is_useless(subject)
        log_commit_checked(subject, useless)
        return useless
