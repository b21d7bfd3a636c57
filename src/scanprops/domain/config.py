from __future__ import annotations

"""
Configuration Domain Management.

Handles persistent storage of run preferences using JSON. The effective
configuration is layered as: domain defaults, then the persisted file, then
command-line overrides.
"""

import json
import logging
import os
from typing import Any, Dict, Optional

from scanprops.domain.constants import CURRENT_CONFIG_VERSION
from scanprops.infra.fs import get_user_data_dir

logger = logging.getLogger(__name__)

# -----------------------------------------------------------------------------
# Constants & Defaults
# -----------------------------------------------------------------------------
CONFIG_FILE = os.path.join(get_user_data_dir(), "config.json")
DEFAULT_MODEL_FILE = "scanprops-model.json"
DEFAULT_RESOLUTION_SUBDIR = os.path.join("build", "sonar-resolver")

OUTPUT_FORMATS = ("properties", "json")


# -----------------------------------------------------------------------------
# Configuration Models (Dict-based)
# -----------------------------------------------------------------------------
def get_default_config() -> Dict[str, Any]:
    """
    Generate the default runtime configuration.
    This dictionary drives the behavior of the pipeline engine.

    Returns:
        Dict[str, Any]: Default configuration values.
    """
    base = os.getcwd()
    return {
        # Host model
        "model_path": os.path.join(base, DEFAULT_MODEL_FILE),
        "target_path": "",

        # Two-phase resolution
        "resolution_dir": os.path.join(base, DEFAULT_RESOLUTION_SUBDIR),

        # Output
        "output_path": "",
        "output_format": "properties",

        # Orphan source collection
        "scan_all": False,
        "exclude_covered_languages": True,

        # Ambient inputs
        "system_properties": {},
        "use_environment": True,

        # Diagnostics
        "log_level": "INFO",
        "save_log": False,
    }


# -----------------------------------------------------------------------------
# Persistence Logic
# -----------------------------------------------------------------------------
def load_config(path: Optional[str] = None) -> Dict[str, Any]:
    """
    Load the persisted configuration merged over the defaults.

    Unknown keys are ignored. A missing file yields the defaults; a corrupt
    one yields the defaults and a warning.

    Args:
        path: Explicit configuration file. Defaults to the user data dir.

    Returns:
        Dict[str, Any]: The effective configuration.
    """
    config = get_default_config()
    config_file = path or CONFIG_FILE

    if not os.path.exists(config_file):
        logger.debug(f"Config file not found at {config_file}. Returning defaults.")
        return config

    try:
        with open(config_file, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, ValueError) as e:
        logger.warning(f"Failed to load config from {config_file}: {e}. Using defaults.")
        return config

    if not isinstance(data, dict):
        logger.warning("Corrupted config file. Resetting to defaults.")
        return config

    stored_version = data.pop("version", None)
    if stored_version and stored_version != CURRENT_CONFIG_VERSION:
        logger.info(f"Config schema {stored_version} differs from {CURRENT_CONFIG_VERSION}; merging known keys.")

    for key, value in data.items():
        if key in config:
            config[key] = value
        else:
            logger.debug(f"Ignoring unknown config key '{key}'")

    return config


def save_config(config: Dict[str, Any], path: Optional[str] = None) -> None:
    """
    Persist the configuration to disk.

    Args:
        config: The configuration dictionary to save.
        path: Explicit target file. Defaults to the user data dir.
    """
    config_file = path or CONFIG_FILE
    payload = dict(config)
    payload["version"] = CURRENT_CONFIG_VERSION
    try:
        os.makedirs(os.path.dirname(os.path.abspath(config_file)), exist_ok=True)
        with open(config_file, "w", encoding="utf-8") as f:
            json.dump(payload, f, ensure_ascii=False, indent=4)
        logger.debug(f"Configuration saved to {config_file}")
    except OSError as e:
        logger.error(f"Failed to save configuration: {e}")
