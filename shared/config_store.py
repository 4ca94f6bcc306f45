"""Local JSON store for per-user preferences of the deal document tools.

Each tool gets a single JSON file in data/config/ keyed by tool name
(e.g. "deal-documents.json"). Reads always hit the file so a value
written by one view is visible to the very next read from another.
Writes go through a temp file and an atomic rename.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

CONFIG_DIR = Path(__file__).resolve().parent.parent / "data" / "config"


def _config_path(tool_name: str) -> Path:
    return CONFIG_DIR / f"{tool_name}.json"


def load_config(tool_name: str) -> dict | None:
    """Load a tool's JSON config. Returns None if missing or unreadable."""
    path = _config_path(tool_name)
    if not path.exists():
        return None
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (json.JSONDecodeError, OSError):
        logger.warning("Ignoring unreadable config file %s", path)
        return None
    return data if isinstance(data, dict) else None


def save_config(tool_name: str, config: dict) -> None:
    """Replace a tool's config. Creates the directory if needed."""
    CONFIG_DIR.mkdir(parents=True, exist_ok=True)
    path = _config_path(tool_name)
    tmp = path.with_suffix(".json.tmp")
    tmp.write_text(json.dumps(config, indent=2, ensure_ascii=False), encoding="utf-8")
    tmp.replace(path)


def get_config_value(tool_name: str, key: str, default: Any) -> Any:
    """Get a single key from a tool's config, with fallback to default."""
    config = load_config(tool_name)
    if config is None:
        return default
    return config.get(key, default)


def set_config_value(tool_name: str, key: str, value: Any) -> None:
    """Set a single key in a tool's config, preserving other keys."""
    config = load_config(tool_name) or {}
    config[key] = value
    save_config(tool_name, config)


def delete_config_value(tool_name: str, key: str) -> bool:
    """Remove *key* from a tool's config. Returns True if it was present."""
    config = load_config(tool_name)
    if not config or key not in config:
        return False
    del config[key]
    save_config(tool_name, config)
    return True
