"""Configuration loading from ~/.config/memo-cho/config.yaml.

The file is bootstrapped with defaults on first run and never overwritten
afterwards. Path values may contain the literal token ``$HOME``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

import yaml

from memo_cho.errors import ConfigError, MemoIOError

logger = logging.getLogger(__name__)

APP_NAME = "memo-cho"
_CONFIG_FILENAME = "config.yaml"
HOME_PLACEHOLDER = "$HOME"

_DEFAULT_CONFIG = {
    "memodir": HOME_PLACEHOLDER,
    "template": f"{HOME_PLACEHOLDER}/template.md",
    "editor": "nano",
}


@dataclass(frozen=True)
class MemoConfig:
    """Resolved configuration. All paths are absolute and placeholder-free."""

    memo_dir: Path
    template_path: Path
    editor_command: str
    selector_command: str | None = None


def resolve_home() -> Path:
    try:
        return Path.home()
    except (KeyError, RuntimeError) as e:
        raise ConfigError(f"cannot determine home directory: {e}") from e


def resolve_config_directory(home: Path | None = None) -> Path:
    """Return ``<home>/.config/memo-cho/``, creating it if absent."""
    home = home or resolve_home()
    config_dir = home / ".config" / APP_NAME
    try:
        config_dir.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise MemoIOError(f"cannot create config directory ({e.strerror})", config_dir) from e
    return config_dir


def ensure_default_config(directory: Path) -> Path:
    """Write the default config.yaml unless one already exists. Idempotent."""
    path = directory / _CONFIG_FILENAME
    if path.exists():
        return path

    try:
        with path.open("x", encoding="utf-8") as f:
            yaml.safe_dump(_DEFAULT_CONFIG, f, default_flow_style=False, sort_keys=False)
    except FileExistsError:
        # Another invocation created it between the check and the open
        logger.debug("Config file appeared concurrently: %s", path)
        return path
    except OSError as e:
        raise MemoIOError(f"cannot write default config ({e.strerror})", path) from e

    logger.info("Default config written: %s", path)
    return path


def expand_placeholders(value: str, home: Path) -> str:
    return value.replace(HOME_PLACEHOLDER, str(home))


def _require_str(data: dict, key: str, path: Path) -> str:
    value = data.get(key)
    if value is None:
        raise ConfigError(f"missing required key '{key}' in {path}")
    if not isinstance(value, str) or not value.strip():
        raise ConfigError(f"key '{key}' in {path} must be a non-empty string")
    return value


def _resolve_path(raw_path: str, home: Path) -> Path:
    path = Path(expand_placeholders(raw_path, home))
    if not path.is_absolute():
        path = path.absolute()
    return path


def load_config(home: Path | None = None) -> MemoConfig:
    """Load the config file, bootstrapping it on first run.

    Raises ConfigError for a missing home directory or an unreadable or
    malformed file, and MemoIOError when the config directory or default
    file cannot be created.
    """
    home = home or resolve_home()
    path = ensure_default_config(resolve_config_directory(home))

    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise ConfigError(f"cannot read {path}: {e}") from e

    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid YAML in {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"{path} must contain a mapping of keys to values")

    selector = data.get("cmdselector")
    if selector is not None and not isinstance(selector, str):
        raise ConfigError(f"key 'cmdselector' in {path} must be a string")

    config = MemoConfig(
        memo_dir=_resolve_path(_require_str(data, "memodir", path), home),
        template_path=_resolve_path(_require_str(data, "template", path), home),
        editor_command=_require_str(data, "editor", path),
        selector_command=selector or None,
    )
    logger.debug("Loaded config from %s: %s", path, config)
    return config
