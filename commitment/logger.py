"""Structured JSON logging for the commitment plugin.

All output goes to stderr (stdout is reserved for the Neovim msgpack channel).
Commit subjects and file contents are redacted before they reach a record.

Configuration via environment variables:
  COMMITMENT_LOG_LEVEL: DEBUG, INFO, WARNING, ERROR (default: INFO)
  COMMITMENT_LOG_FILE: optional path to also write logs to a file
"""

from __future__ import annotations

import json
import logging
import os
import sys

# ── Redaction helpers ─────────────────────────────────────────────────

# Keys whose values carry user content.
_REDACT_CONTENT_KEYS = frozenset({
    "subject", "message", "lines", "content",
})


def redact_value(key: str, value: object) -> object:
    """Replace user content with a length marker like "<12 chars>"."""
    if key in _REDACT_CONTENT_KEYS:
        if isinstance(value, str):
            return f"<{len(value)} chars>"
        if isinstance(value, list):
            return f"<list with {len(value)} items>"
        return "<redacted>"
    return value


def redact_fields(fields: dict | None) -> dict:
    """Redact every value of a structured data dict."""
    if not fields:
        return {}
    return {key: redact_value(key, value) for key, value in fields.items()}


# ── JSON formatter ────────────────────────────────────────────────────


class _JSONFormatter(logging.Formatter):
    """Formats log records as single-line JSON."""

    def format(self, record: logging.LogRecord) -> str:
        entry: dict = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "component": getattr(record, "component", None),
            "event": record.getMessage(),
        }
        data = getattr(record, "data", None)
        if data is not None:
            entry["data"] = data
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str, ensure_ascii=False)


# ── Logger setup ──────────────────────────────────────────────────────

_CONFIGURED = False


def _configure_root() -> None:
    """Configure the commitment root logger (idempotent)."""
    global _CONFIGURED  # noqa: PLW0603
    if _CONFIGURED:
        return
    _CONFIGURED = True

    root = logging.getLogger("commitment")

    level_name = os.environ.get("COMMITMENT_LOG_LEVEL", "INFO").upper()
    level = getattr(logging, level_name, logging.INFO)
    root.setLevel(level)

    stderr_handler = logging.StreamHandler(sys.stderr)
    stderr_handler.setFormatter(_JSONFormatter())
    root.addHandler(stderr_handler)

    log_file = os.environ.get("COMMITMENT_LOG_FILE")
    if log_file:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setFormatter(_JSONFormatter())
        root.addHandler(file_handler)

    root.propagate = False


def get_logger(component: str) -> logging.Logger:
    """Get a named logger under the commitment hierarchy.

    Args:
        component: Short component name (e.g. "gate", "git").

    Returns:
        A Logger that inherits the commitment root configuration.
    """
    _configure_root()
    return logging.getLogger(f"commitment.{component}")


# ── Event helpers ─────────────────────────────────────────────────────


def _log(
    component: str,
    level: int,
    event: str,
    data: dict | None = None,
) -> None:
    """Internal: emit a structured log entry."""
    logger = get_logger(component)
    logger.log(level, event, extra={"component": component, "data": redact_fields(data)})


def log_gate_transition(
    locked: bool,
    writes_count: int,
    reason: str | None,
    trigger: str,
) -> None:
    """Log a change of the gate's lock state."""
    _log("gate", logging.INFO, "gate_locked" if locked else "gate_unlocked", {
        "writes_count": writes_count,
        "reason": reason,
        "trigger": trigger,
    })


def log_git_failure(args: list[str], detail: str) -> None:
    """Log a git invocation that collapsed to false/empty."""
    _log("git", logging.DEBUG, "git_failed", {
        "args": " ".join(args), "detail": detail,
    })


def log_setup(enabled: bool, mode: str | None = None, detail: str | None = None) -> None:
    """Log the outcome of plugin setup."""
    _log("plugin", logging.INFO, "setup_complete" if enabled else "setup_skipped", {
        "mode": mode, "detail": detail,
    })


def log_commit_checked(subject: str, useless: bool) -> None:
    """Log the classification of the last commit subject (subject redacted)."""
    _log("git", logging.DEBUG, "commit_checked", {
        "subject": subject, "useless": useless,
    })
