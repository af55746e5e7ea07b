"""Configuration handling for tk."""

from __future__ import annotations

import logging
import os
import tomllib
from pathlib import Path
from typing import Any

import tomli_w

from tkt.constants import DEFAULT_TICKETS_DIR, TICKETS_DIR_ENV, TICKETSRC_FILENAME
from tkt.idgen import derive_prefix

logger = logging.getLogger(__name__)

# Config filename inside the tickets directory
CONFIG_FILENAME = "config.toml"

# Prefix used when none is configured and none can be derived
DEFAULT_PREFIX = "tk"

# Known keys and the type their values are stored as
CONFIG_KEYS: dict[str, type] = {
    "prefix": str,
    "default_type": str,
    "default_priority": int,
    "default_assignee": str,
}


def parse_ticketsrc(rc_path: str | Path) -> Path:
    """Return the tickets directory named by a .ticketsrc file.

    Only the first non-blank line is read. A relative target is taken from
    the directory holding the rc file and must stay inside it.
    """
    rc_path = Path(rc_path)
    lines = [line.strip() for line in rc_path.read_text().splitlines()]
    target_text = next((line for line in lines if line), None)
    if target_text is None:
        msg = f"{rc_path} is empty; expected a tickets directory path"
        raise ValueError(msg)

    project_root = rc_path.parent.resolve()
    tickets_path = (project_root / target_text).resolve()
    if not tickets_path.is_relative_to(project_root):
        msg = (
            f"{rc_path} escapes project boundary: {target_text!r} is "
            f"{tickets_path}, not under {project_root}"
        )
        raise ValueError(msg)
    logger.debug("%s redirects tickets to %s", rc_path, tickets_path)
    return tickets_path


def find_tickets_dir(start_dir: str | Path | None = None) -> Path | None:
    """Search upward from ``start_dir`` for a .ticketsrc or tickets directory.

    Returns:
        The tickets directory, or None if nothing was found
    """
    current = Path.cwd() if start_dir is None else Path(start_dir).resolve()

    while True:
        rc_candidate = current / TICKETSRC_FILENAME
        if rc_candidate.is_file():
            return parse_ticketsrc(rc_candidate)

        candidate = current / DEFAULT_TICKETS_DIR
        if candidate.is_dir():
            return candidate

        parent = current.parent
        if parent == current:
            return None
        current = parent


def resolve_tickets_dir(explicit: str | None = None) -> Path:
    """Pick the tickets directory for a command.

    Precedence: explicit option, ``TICKETS_DIR`` environment variable,
    upward search, then ``.tickets`` in the current directory.
    """
    if explicit:
        return Path(explicit)
    from_env = os.environ.get(TICKETS_DIR_ENV)
    if from_env:
        return Path(from_env)
    return find_tickets_dir() or Path(DEFAULT_TICKETS_DIR)


def get_config_path(tickets_dir: str | Path) -> Path:
    """Get the path to the config file."""
    return Path(tickets_dir) / CONFIG_FILENAME


def load_config(tickets_dir: str | Path) -> dict[str, Any]:
    """Load configuration from <tickets_dir>/config.toml.

    Returns:
        Configuration dictionary, or empty dict if no usable config exists
    """
    config_path = get_config_path(tickets_dir)
    if not config_path.exists():
        return {}

    try:
        with config_path.open("rb") as f:
            return tomllib.load(f)
    except (tomllib.TOMLDecodeError, OSError) as e:
        logger.warning("Ignoring unreadable config %s: %s", config_path, e)
        return {}


def save_config(tickets_dir: str | Path, config: dict[str, Any]) -> None:
    """Save configuration to <tickets_dir>/config.toml."""
    config_path = get_config_path(tickets_dir)
    config_path.parent.mkdir(parents=True, exist_ok=True)

    with config_path.open("wb") as f:
        tomli_w.dump(config, f)


def coerce_config_value(key: str, raw: str) -> Any:
    """Convert a command-line string to the stored type for ``key``.

    Raises:
        ValueError: If the key is unknown or the value has the wrong type
    """
    if key not in CONFIG_KEYS:
        valid = ", ".join(sorted(CONFIG_KEYS))
        msg = f"unknown config key '{key}'. Valid keys: {valid}"
        raise ValueError(msg)
    if CONFIG_KEYS[key] is int:
        try:
            return int(raw)
        except ValueError:
            msg = f"config key '{key}' expects an integer, got '{raw}'"
            raise ValueError(msg) from None
    return raw


def get_prefix(tickets_dir: str | Path, cwd: str | Path | None = None) -> str:
    """Get the ID prefix from config, or derive it from the project directory.

    Args:
        tickets_dir: Path to the tickets directory
        cwd: Directory whose name seeds the derived prefix (default: cwd)
    """
    config = load_config(tickets_dir)
    prefix = config.get("prefix")
    if isinstance(prefix, str) and prefix.strip():
        return prefix.strip()
    base = Path.cwd() if cwd is None else Path(cwd)
    return derive_prefix(base.resolve().name) or DEFAULT_PREFIX
