"""Centralized configuration loading for xscpatch.

This module provides utilities for loading and accessing configuration from
xscpatch.json with support for environment variable fallbacks and default
values.

Example xscpatch.json::

    {
      "backup": { "enabled": true, "extension": ".bak" },
      "logging": { "level": "INFO" }
    }
"""

import json
import os
from pathlib import Path
from typing import Any, Dict, List, Optional

DEFAULT_CONFIG_PATH = "xscpatch.json"
ENV_PREFIX = "XSCPATCH"

DEFAULT_BACKUP_EXTENSION = ".bak"


def load_config(config_path: str = DEFAULT_CONFIG_PATH) -> Dict[str, Any]:
    """Load configuration from JSON file.

    Returns empty dict if file doesn't exist or is invalid.

    Args:
        config_path: Path to config file (default: "xscpatch.json")

    Returns:
        Configuration dictionary, or empty dict if file not found/invalid
    """
    path = Path(config_path)

    if not path.is_file():
        return {}

    try:
        with open(path, "r", encoding="utf-8") as f:
            config = json.load(f)
    except (json.JSONDecodeError, OSError):
        # Fall back to defaults on a broken config file
        return {}

    return config if isinstance(config, dict) else {}


def get_config_value(
    keys: List[str], default: Any = None, config: Optional[Dict[str, Any]] = None
) -> Any:
    """Get nested configuration value with fallback to environment variable.

    Supports nested keys like ["backup", "extension"]. Also checks environment
    variables as fallback (e.g., XSCPATCH_BACKUP_EXTENSION for
    backup.extension).

    Args:
        keys: List of keys to traverse (e.g., ["logging", "level"])
        default: Default value if key not found
        config: Optional config dict (uses load_config() if not provided)

    Returns:
        Configuration value, or default if not found
    """
    if config is None:
        config = load_config()

    value: Any = config
    for key in keys:
        if isinstance(value, dict):
            value = value.get(key)
            if value is None:
                break
        else:
            value = None
            break

    if value is not None:
        return value

    env_key = "_".join([ENV_PREFIX] + [k.upper() for k in keys])
    env_value = os.environ.get(env_key)
    if env_value is not None:
        return env_value

    return default


def as_bool(value: Any) -> bool:
    """Interpret a config or environment value as a boolean."""
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true", "yes", "on")
    return bool(value)
