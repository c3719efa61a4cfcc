from __future__ import annotations

"""
Configuration Domain Management.

Handles persistent storage of the default policies and modes used by the
file manager as a JSON document in the user data directory. Missing or
corrupted files fall back to defaults.
"""

import json
import logging
import os
from typing import Any, Dict

from filekeeper.domain import constants as const
from filekeeper.infra.fs import get_user_data_dir

logger = logging.getLogger(__name__)

# -----------------------------------------------------------------------------
# Constants & Defaults
# -----------------------------------------------------------------------------
CONFIG_FILENAME = "config.json"


def get_config_path() -> str:
    """Resolve the absolute path of the persistent configuration file."""
    return os.path.join(get_user_data_dir(), CONFIG_FILENAME)


def get_default_config() -> Dict[str, Any]:
    """
    Generate the default runtime configuration.

    Returns:
        Dict[str, Any]: Default configuration values.
    """
    return {
        # Naming policies per creation path
        "naming_policy": const.POLICY_OVERWRITE,
        "temp_naming_policy": const.POLICY_OVERWRITE,
        "log_naming_policy": const.POLICY_PRESERVE,

        # Log files
        "log_naming_mode": const.LOG_MODE_DATE,

        # Tree deletion
        "delete_mode": const.DELETE_PRESERVE,

        # Temporary files
        "temp_prefix": const.DEFAULT_TEMP_PREFIX,

        # Data formatting
        "json_indent": 2,

        # Diagnostics
        "log_level": "INFO",
        "log_to_file": False,
    }

# -----------------------------------------------------------------------------
# Persistence Logic
# -----------------------------------------------------------------------------

def load_config() -> Dict[str, Any]:
    """
    Load the configuration from disk, merged over the defaults.

    Returns:
        Dict[str, Any]: The loaded configuration or defaults on failure.
    """
    config = get_default_config()
    config_path = get_config_path()

    if not os.path.exists(config_path):
        logger.debug("Config file not found. Returning defaults.")
        return config

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, ValueError) as e:
        logger.error(f"Failed to load config: {e}. Using defaults.")
        return config

    if not isinstance(data, dict):
        logger.warning("Corrupted config file. Resetting to defaults.")
        return config

    data.pop("version", None)
    config.update(data)
    return config


def save_config(config: Dict[str, Any]) -> None:
    """
    Persist the configuration to disk.

    Args:
        config: The configuration dictionary to save.
    """
    config_path = get_config_path()
    payload = dict(config)
    payload["version"] = const.CURRENT_CONFIG_VERSION
    try:
        os.makedirs(os.path.dirname(config_path), exist_ok=True)
        with open(config_path, "w", encoding="utf-8") as f:
            json.dump(payload, f, ensure_ascii=False, indent=4)
        logger.debug(f"Configuration saved to {config_path}")
    except OSError as e:
        logger.error(f"Failed to save configuration: {e}")
