#!/usr/bin/env python3
"""
commitment CLI - check the repository the way the editor plugin does.

Handy as a shell prompt segment or a pre-push reminder.
"""

import argparse
import sys
from pathlib import Path

from . import __version__
from .config import ConfigError, dump_default_config, load_config
from .gate import Outcome, Trigger, WriteGate
from .git import GitInspector
from .notifier import DebouncedNotifier, LoggingSink

RED = "\033[0;31m"
YELLOW = "\033[1;33m"
GREEN = "\033[0;32m"
BLUE = "\033[0;34m"
NC = "\033[0m"

EXIT_OK = 0
EXIT_COMMIT_DUE = 1
EXIT_NOT_A_REPO = 2

_OUTCOME_COLOURS = {
    Outcome.ALLOW: GREEN,
    Outcome.WARN: YELLOW,
    Outcome.BLOCK: RED,
}


def run_status(cwd: Path, config_path: Path | None = None, file: str | None = None) -> int:
    """Print repository state and return the exit code."""
    inspector = GitInspector(cwd)
    if not inspector.is_repository():
        print(f"{RED}Not a git repository: {cwd}{NC}")
        return EXIT_NOT_A_REPO

    config = load_config(config_path=config_path, cwd=cwd)
    clean = inspector.tree_is_clean()
    subject = inspector.last_commit_subject()
    useless = inspector.is_useless_commit()

    print(f"{BLUE}commitment status{NC}")
    print("=" * 40)
    print(f"Working tree:   {'clean' if clean else 'pending changes'}")
    print(f"Last commit:    {subject or '(none)'}")
    print(f"Useless commit: {'yes' if useless else 'no'}")
    if file:
        pending = inspector.file_has_pending_changes(file)
        print(f"{file}: {'pending changes' if pending else 'committed'}")

    # Judge the save that comes once writes_number saves have gone by
    gate = WriteGate(config, inspector, DebouncedNotifier(LoggingSink()))
    gate.state.writes_count = config.writes_number
    decision = gate.evaluate(Trigger.SAVE)
    colour = _OUTCOME_COLOURS[decision.outcome]
    print(f"Save outcome:   {colour}{decision.outcome.value}{NC} (after {config.writes_number} writes)")

    if clean and not useless:
        print(f"\n{GREEN}All committed{NC}")
        return EXIT_OK

    print(f"\n{YELLOW}{decision.message}{NC}")
    return EXIT_COMMIT_DUE


def init_config(target: Path = Path(".commitment.yaml")) -> bool:
    """Write the default config into the current project."""
    if target.exists():
        print(f"{YELLOW}{target} already exists{NC}")
        return False

    target.write_text(dump_default_config(), encoding="utf-8")
    print(f"{GREEN}Created {target}{NC}")
    return True


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="commitment",
        description="Never forget to git commit",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  commitment status              Check tree and last commit message
  commitment status -f app.py    Also check one file
  commitment init                Create .commitment.yaml with defaults
        """,
    )
    parser.add_argument("--version", "-v", action="version", version=f"commitment {__version__}")
    sub = parser.add_subparsers(dest="command")

    status = sub.add_parser("status", help="Show repository state")
    status.add_argument("--file", "-f", help="Report pending changes for one file")
    status.add_argument("--config", "-c", help="Path to a commitment YAML file")

    sub.add_parser("init", help="Create .commitment.yaml")

    args = parser.parse_args(argv)

    if args.command == "init":
        return EXIT_OK if init_config() else 1

    if args.command == "status":
        try:
            return run_status(
                Path.cwd(),
                Path(args.config) if args.config else None,
                args.file,
            )
        except ConfigError as e:
            print(f"{RED}ERROR: {e}{NC}")
            return 1

    parser.print_help()
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
