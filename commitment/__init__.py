"""
commitment - Never forget to git commit.

A Neovim plugin that counts writes (or runs on a timer), checks git state and
warns, or in hardcore mode blocks writes, until the work is committed.
"""

__version__ = "0.1.0"

from .config import CommitmentConfig, ConfigError, load_config
from .gate import Decision, GateState, Outcome, Reason, Trigger, WriteGate
from .git import GitInspector
from .notifier import DebouncedNotifier
from .plugin import Commitment, setup
from .useless_messages import USELESS_COMMIT_MESSAGES, is_useless

__all__ = [
    "setup",
    "Commitment",
    "CommitmentConfig",
    "ConfigError",
    "load_config",
    "WriteGate",
    "GateState",
    "Decision",
    "Outcome",
    "Reason",
    "Trigger",
    "GitInspector",
    "DebouncedNotifier",
    "USELESS_COMMIT_MESSAGES",
    "is_useless",
    "__version__",
]
