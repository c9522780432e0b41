"""Load, save, and validate user configuration."""

from __future__ import annotations

from pathlib import Path

import yaml

from .models import COLUMN_FIELDS, SORT_ASC, SORT_DESC

CONFIG_DIR = Path.home() / ".cursor-usage"
CONFIG_FILE = CONFIG_DIR / "config.yaml"

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")


def config_exists() -> bool:
    return CONFIG_FILE.exists()


def load_config() -> dict:
    """Load config from YAML file. Returns empty dict if not found."""
    if not CONFIG_FILE.exists():
        return {}
    with open(CONFIG_FILE, "r") as f:
        return yaml.safe_load(f) or {}


def save_config(config: dict) -> None:
    """Save config to YAML file, creating directory if needed."""
    CONFIG_DIR.mkdir(parents=True, exist_ok=True)
    with open(CONFIG_FILE, "w") as f:
        yaml.dump(config, f, default_flow_style=False, sort_keys=False)


def get_default_file(config: dict) -> str | None:
    """Usage CSV to load when no path is given on the command line."""
    return config.get("default_file") or None


def get_sort_defaults(config: dict) -> tuple[str, str]:
    """Initial table sort (field, direction). Defaults to newest Date first.

    Unknown fields or directions fall back to the defaults.
    """
    sort = config.get("sort", {}) or {}
    field = sort.get("field", "Date")
    direction = str(sort.get("direction", SORT_DESC)).lower()
    if field not in COLUMN_FIELDS:
        field = "Date"
    if direction not in (SORT_ASC, SORT_DESC):
        direction = SORT_DESC
    return field, direction


def get_log_level(config: dict) -> str:
    """Logging level name. Defaults to WARNING."""
    level = str(config.get("log_level", "WARNING")).upper()
    return level if level in LOG_LEVELS else "WARNING"


def get_recent_days(config: dict) -> int:
    """Number of days shown in the daily table. Defaults to 14."""
    days = config.get("recent_days", 14)
    if not isinstance(days, int) or days < 1:
        return 14
    return days


def build_default_config(default_file: str | None = None, sort_field: str = "Date",
                         sort_direction: str = SORT_DESC, recent_days: int = 14) -> dict:
    """Build a default config dict."""
    return {
        "default_file": default_file or "",
        "sort": {"field": sort_field, "direction": sort_direction},
        "recent_days": recent_days,
        "log_level": "WARNING",
    }
