"""commitment config management.

Config is built once at setup by overlaying, in order:
- the documented defaults,
- a YAML file (./.commitment.yaml, ./commitment.yaml or
  ~/.config/commitment/commitment.yaml),
- the table passed to setup().

Only recognised keys are applied; anything else is logged and ignored.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, fields
from pathlib import Path

import yaml

from .logger import get_logger

logger = get_logger("config")

CONFIG_FILE_NAMES = (".commitment.yaml", "commitment.yaml")
MAX_CONFIG_BYTES = 1_000_000

# Older setups spell prevent_write this way
KEY_ALIASES = {
    "stop_on_write": "prevent_write",
}


class ConfigError(ValueError):
    """Raised when a config value has the wrong type or range."""


@dataclass(frozen=True)
class CommitmentConfig:
    """Plugin configuration."""

    # Regular message. Shown when writes limit is reached or timer fired.
    message: str = "Don't forget to git commit!"
    # Message shown when writes are prevented.
    message_write_prevent: str = "You shall not write!"
    # Message shown when useless commit message is detected.
    message_useless_commit: str = (
        "That's not a very useful commit message, mind rephrasing it?"
    )
    # Prevents writes to file until changes are committed.
    prevent_write: bool = False
    # Prevent writes to file when useless commit message is detected.
    stop_on_useless_commit: bool = False
    # Number of writes before asking to commit.
    writes_number: int = 30
    # Interval in minutes to check git tree for changes, -1 to check on save.
    check_interval: int = -1

    @property
    def interval_mode(self) -> bool:
        return self.check_interval != -1

    @property
    def interval_ms(self) -> int:
        return self.check_interval * 60 * 1000

    def to_dict(self) -> dict:
        return asdict(self)


DEFAULTS = CommitmentConfig().to_dict()
_FIELD_TYPES = {f.name: type(DEFAULTS[f.name]) for f in fields(CommitmentConfig)}


def deep_merge(base: dict, override: dict) -> dict:
    """Deep merge two dicts. Override wins for conflicts.

    Nested dicts are merged key by key instead of replaced wholesale.
    """
    result = base.copy()

    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = value

    return result


def normalize_keys(raw: dict) -> dict:
    """Resolve aliases and drop keys commitment does not know about."""
    normalized = {}
    for key, value in raw.items():
        name = KEY_ALIASES.get(key, key)
        if name not in _FIELD_TYPES:
            logger.warning("Ignoring unknown config key: %s", key)
            continue
        if name != key and name in raw:
            # The canonical spelling wins over its alias
            continue
        normalized[name] = value
    return normalized


def _validate(values: dict) -> None:
    for name, expected in _FIELD_TYPES.items():
        value = values[name]
        # bool is an int subclass, keep them apart
        if expected is int and (isinstance(value, bool) or not isinstance(value, int)):
            raise ConfigError(f"{name} must be an integer. Got: {value!r}.")
        if not isinstance(value, expected):
            raise ConfigError(f"{name} must be a {expected.__name__}. Got: {value!r}.")

    if values["writes_number"] <= 0:
        raise ConfigError(
            f"writes_number must be a positive integer. Got: {values['writes_number']}."
        )
    interval = values["check_interval"]
    if interval != -1 and interval <= 0:
        raise ConfigError(
            f"check_interval must be -1 or a positive number of minutes. Got: {interval}."
        )


def build_config(*layers: dict | None) -> CommitmentConfig:
    """Overlay each layer onto the defaults and return a validated config."""
    merged = dict(DEFAULTS)
    for layer in layers:
        if layer:
            merged = deep_merge(merged, normalize_keys(layer))
    _validate(merged)
    return CommitmentConfig(**merged)


def find_config(cwd: Path | None = None) -> Path | None:
    """Find a commitment config file in the project or user home."""
    base = Path(cwd) if cwd else Path.cwd()
    candidates = [base / name for name in CONFIG_FILE_NAMES]
    candidates.append(Path.home() / ".config" / "commitment" / "commitment.yaml")

    for path in candidates:
        if path.exists():
            return path

    return None


def load_config_file(config_path: Path | str) -> dict:
    """Read a YAML config file into a dict."""
    config_path = Path(config_path)

    if not config_path.exists():
        raise ConfigError(f"Config not found: {config_path}")

    if config_path.stat().st_size > MAX_CONFIG_BYTES:
        raise ConfigError(f"Config file too large: {config_path}")

    try:
        with open(config_path, encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {config_path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"Config must be a mapping: {config_path}")

    logger.debug("Loaded config file %s", config_path)
    return data


def load_config(
    overrides: dict | None = None,
    config_path: Path | str | None = None,
    cwd: Path | str | None = None,
) -> CommitmentConfig:
    """Load the effective config.

    This is the main entry point for loading configs.
    """
    if config_path is None:
        config_path = find_config(Path(cwd) if cwd else None)

    file_values = load_config_file(config_path) if config_path else None
    return build_config(file_values, overrides)


def dump_default_config() -> str:
    """Render the defaults as a YAML document."""
    return yaml.safe_dump(DEFAULTS, sort_keys=False, allow_unicode=True)
