from __future__ import annotations

"""
Configuration Domain Management.

Handles persistent storage of the remote repository settings and runtime
options using JSON in the user data directory. Supports environment
overrides for credentials and default fallback on missing or corrupted files.
"""

import json
import logging
import os
from typing import Any, Dict

from treesync4ai.domain.constants import (
    CURRENT_CONFIG_VERSION,
    DEFAULT_BACKOFF_FACTOR,
    DEFAULT_BRANCH,
    DEFAULT_MAX_RETRIES,
    DEFAULT_TIMEOUT,
    ENV_BRANCH,
    ENV_OWNER,
    ENV_REPO,
    ENV_TOKEN,
    GITHUB_API_URL,
)
from treesync4ai.infra.fs import get_user_data_dir

logger = logging.getLogger(__name__)

CONFIG_FILE_NAME = "config.json"

_ENV_OVERRIDES: Dict[str, str] = {
    ENV_OWNER: "github_owner",
    ENV_REPO: "github_repo",
    ENV_TOKEN: "github_token",
    ENV_BRANCH: "github_branch",
}

# -----------------------------------------------------------------------------
# Configuration Models (Dict-based)
# -----------------------------------------------------------------------------

def get_config_file() -> str:
    return os.path.join(get_user_data_dir(), CONFIG_FILE_NAME)


def get_default_config() -> Dict[str, Any]:
    """
    Generate the default runtime configuration.

    Returns:
        Dict[str, Any]: Default configuration values.
    """
    return {
        # Remote repository
        "github_owner": "",
        "github_repo": "",
        "github_token": "",
        "github_branch": DEFAULT_BRANCH,
        "github_api_url": GITHUB_API_URL,

        # Transport
        "timeout": DEFAULT_TIMEOUT,
        "max_retries": DEFAULT_MAX_RETRIES,
        "backoff_factor": DEFAULT_BACKOFF_FACTOR,

        # Session
        "tree_file": "",
        "persist_tree": True,

        # Interface
        "locale": "en",
        "log_level": "INFO",
        "log_file": "",
    }

# -----------------------------------------------------------------------------
# Persistence Logic
# -----------------------------------------------------------------------------

def load_config(apply_env: bool = True) -> Dict[str, Any]:
    """
    Load configuration from disk merged over defaults.

    Args:
        apply_env: Apply TREESYNC_* environment overrides on top.

    Returns:
        Dict[str, Any]: The loaded configuration or defaults on failure.
    """
    config = get_default_config()
    config_file = get_config_file()

    if os.path.exists(config_file):
        try:
            with open(config_file, "r", encoding="utf-8") as f:
                data = json.load(f)
            if isinstance(data, dict):
                data.pop("version", None)
                config.update({k: v for k, v in data.items() if k in config})
            else:
                logger.warning("Corrupted config file. Resetting to defaults.")
        except (OSError, ValueError) as e:
            logger.error(f"Failed to load config: {e}. Using defaults.")
    else:
        logger.debug("Config file not found. Returning defaults.")

    if apply_env:
        apply_env_overrides(config)
    return config


def apply_env_overrides(config: Dict[str, Any]) -> Dict[str, Any]:
    """Inject credentials and repository coordinates from the environment."""
    for env_name, key in _ENV_OVERRIDES.items():
        value = os.environ.get(env_name)
        if value:
            config[key] = value
    return config


def save_config(config: Dict[str, Any], include_token: bool = False) -> None:
    """
    Persist configuration to disk.

    Args:
        config: The configuration dictionary to save.
        include_token: Store the access token too (off by default).
    """
    config_file = get_config_file()
    data = {k: v for k, v in config.items() if k in get_default_config()}
    if not include_token:
        data["github_token"] = ""
    data["version"] = CURRENT_CONFIG_VERSION

    try:
        os.makedirs(os.path.dirname(config_file), exist_ok=True)
        with open(config_file, "w", encoding="utf-8") as f:
            json.dump(data, f, ensure_ascii=False, indent=4)
        logger.debug(f"Configuration saved to {config_file}")
    except OSError as e:
        logger.error(f"Failed to save configuration: {e}")
