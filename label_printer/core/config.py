"""
Config utilities for Label Printer.

Responsibilities:
- Resolve the config path with environment and XDG support
- Load the JSON printer registry
- Read env-driven service settings
"""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Dict, List, Optional


def default_config_path() -> str:
    """
    Resolve the default config path using:
    1) $XDG_CONFIG_HOME/labelprinter/config.json
    2) ~/.config/labelprinter/config.json
    """
    xdg = os.environ.get("XDG_CONFIG_HOME")
    if xdg:
        return str(Path(xdg) / "labelprinter" / "config.json")
    return str(Path.home() / ".config" / "labelprinter" / "config.json")


def get_config_path() -> str:
    """
    Return the config path honoring LABELPRINTER_CONFIG_PATH override.
    """
    return os.environ.get("LABELPRINTER_CONFIG_PATH", default_config_path())


def env_bool(name: str, default: bool = False) -> bool:
    raw = os.environ.get(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


def env_int(name: str, default: int) -> int:
    try:
        return int(os.environ.get(name, default))
    except (TypeError, ValueError):
        return default


def load_config(path: Optional[str] = None) -> Optional[Dict[str, Any]]:
    """
    Load the JSON config if it exists; return None if missing.

    The path is resolved on every call so that env overrides (and edits to the
    file) are picked up without a restart.

    Raises:
        json.JSONDecodeError if the file exists but contains invalid JSON.
        OSError for I/O errors other than missing file.
    """
    cfg_path = Path(path or get_config_path())
    if not cfg_path.exists():
        return None
    with cfg_path.open("r", encoding="utf-8") as f:
        return json.load(f)


def configured_printers(config: Optional[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """
    Return the printer entries of a loaded config (empty when absent or malformed).
    """
    if not config:
        return []
    printers = config.get("printers")
    if not isinstance(printers, list):
        return []
    return [p for p in printers if isinstance(p, dict) and p.get("serial_number")]


__all__ = [
    "configured_printers",
    "default_config_path",
    "env_bool",
    "env_int",
    "get_config_path",
    "load_config",
]
