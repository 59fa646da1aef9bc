"""
Configuration management for Greenfield SDK.

This module handles loading and saving configuration from the user's home directory,
specifically in ~/.greenfield/config.json.
"""

import copy
import json
import logging
import os
from typing import Any, Dict

from dotenv import load_dotenv

from greenfield_sdk.errors import GreenfieldInvalidConfigError
from greenfield_sdk.integrity import RedundancyConfig

logger = logging.getLogger(__name__)

# Define constants
CONFIG_DIR = os.path.expanduser("~/.greenfield")
CONFIG_FILE = os.path.join(CONFIG_DIR, "config.json")
DEFAULT_CONFIG = {
    "chain": {
        "rest_url": "https://greenfield-chain.bnbchain.org",
        "chain_id": "greenfield_1017-1",
    },
    # Only used when hashing offline; online hashing always reads the chain params
    "redundancy": {
        "segment_size": 16 * 1024 * 1024,  # 16MB
        "data_shards": 4,
        "parity_shards": 2,
    },
    "cli": {
        "verbose": False,
        "max_retries": 3,
    },
}

# Environment variable -> (section, key, converter)
ENV_OVERRIDES = {
    "GREENFIELD_REST_URL": ("chain", "rest_url", str),
    "GREENFIELD_CHAIN_ID": ("chain", "chain_id", str),
    "GREENFIELD_SEGMENT_SIZE": ("redundancy", "segment_size", int),
    "GREENFIELD_DATA_SHARDS": ("redundancy", "data_shards", int),
    "GREENFIELD_PARITY_SHARDS": ("redundancy", "parity_shards", int),
}


def ensure_config_dir() -> None:
    """Create configuration directory if it doesn't exist."""
    if not os.path.exists(CONFIG_DIR):
        try:
            os.makedirs(CONFIG_DIR, exist_ok=True)
            logger.info(f"Created Greenfield configuration directory: {CONFIG_DIR}")
        except OSError as e:
            logger.warning(f"Could not create configuration directory: {e}")


def load_config() -> Dict[str, Any]:
    """
    Load configuration from the config file.

    If the file doesn't exist, create it with default values.

    Returns:
        Dict[str, Any]: The configuration dictionary
    """
    ensure_config_dir()

    if not os.path.exists(CONFIG_FILE):
        save_config(DEFAULT_CONFIG)
        return copy.deepcopy(DEFAULT_CONFIG)

    try:
        with open(CONFIG_FILE, "r") as f:
            config = json.load(f)

        # Ensure all config sections exist (for files written by older versions)
        for section, defaults in DEFAULT_CONFIG.items():
            if section not in config:
                config[section] = copy.deepcopy(defaults)

        return config
    except (OSError, ValueError) as e:
        logger.warning(f"Could not load configuration file: {e}")
        logger.warning("Using default configuration")
        return copy.deepcopy(DEFAULT_CONFIG)


def save_config(config: Dict[str, Any]) -> bool:
    """
    Save configuration to the config file.

    Args:
        config: The configuration dictionary to save

    Returns:
        bool: True if save was successful, False otherwise
    """
    ensure_config_dir()

    try:
        with open(CONFIG_FILE, "w") as f:
            json.dump(config, f, indent=2)
        return True
    except OSError as e:
        logger.warning(f"Could not save configuration file: {e}")
        return False


def get_config_value(section: str, key: str, default: Any = None) -> Any:
    """
    Get a configuration value from a specific section.

    Args:
        section: The configuration section
        key: The configuration key
        default: Default value if not found

    Returns:
        Any: The configuration value or default
    """
    config = load_config()
    return config.get(section, {}).get(key, default)


def set_config_value(section: str, key: str, value: Any) -> bool:
    """
    Set a configuration value in a specific section.

    Args:
        section: The configuration section
        key: The configuration key
        value: The value to set

    Returns:
        bool: True if save was successful, False otherwise
    """
    config = load_config()

    if section not in config:
        config[section] = {}

    config[section][key] = value
    return save_config(config)


def get_redundancy_config() -> RedundancyConfig:
    """
    Get the locally configured redundancy parameters.

    Returns:
        RedundancyConfig: Parameters from the "redundancy" section

    Raises:
        GreenfieldInvalidConfigError: If a value in the section is not an integer
    """
    section = load_config()["redundancy"]
    defaults = DEFAULT_CONFIG["redundancy"]
    values = {}
    for key in ("segment_size", "data_shards", "parity_shards"):
        raw = section.get(key, defaults[key])
        try:
            values[key] = int(raw)
        except (TypeError, ValueError) as e:
            raise GreenfieldInvalidConfigError(
                f"Invalid redundancy parameters: {key} in {CONFIG_FILE} must be an integer, got {raw!r}"
            ) from e
    return RedundancyConfig(**values)


def initialize_from_env() -> None:
    """
    Initialize configuration from environment variables.

    Reads a .env file if present, then copies any GREENFIELD_* overrides
    into the config file.
    """
    load_dotenv()

    config = load_config()
    changed = False

    for env_name, (section, key, convert) in ENV_OVERRIDES.items():
        raw = os.getenv(env_name)
        if not raw:
            continue
        try:
            config.setdefault(section, {})[key] = convert(raw)
            changed = True
        except ValueError:
            logger.warning(f"Ignoring invalid value for {env_name}: {raw!r}")

    if changed:
        save_config(config)


def get_all_config() -> Dict[str, Any]:
    """
    Get the complete configuration.

    Returns:
        Dict[str, Any]: The full configuration dictionary
    """
    return load_config()


def reset_config() -> bool:
    """
    Reset configuration to default values.

    Returns:
        bool: True if reset was successful, False otherwise
    """
    return save_config(copy.deepcopy(DEFAULT_CONFIG))
