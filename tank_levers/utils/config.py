"""
Configuration Utilities

Loads and manages configuration from config/settings.yaml and the device
list from config/tank.yaml
"""

import copy
import logging
import os
from typing import Any, Dict, List

import yaml

logger = logging.getLogger(__name__)

PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
DEFAULT_CONFIG_PATH = os.path.join(PROJECT_ROOT, "config", "settings.yaml")
DEFAULT_DEVICES_PATH = os.path.join(PROJECT_ROOT, "config", "tank.yaml")

# Default configuration
DEFAULT_CONFIG = {
    "control": {
        "rpm_per_degree": 1.0,
        "gear_ratio_per_degree": 0.02,   # 90 deg => x1.8
        "deadzone_deg": 5.0,             # +- degrees
        "default_gear_ratio": 1.0,
        "unlock_lower_limit_deg": -90.0,
        "unlock_upper_limit_deg": 90.0
    },
    "scheduler": {
        "base_tick_hz": 60.0,
        "update_every": 10
    },
    "controller": {
        "construct": "Tank"
    },
    "modbus": {
        "enabled": False,
        "method": "rtu",
        "host": "127.0.0.1",
        "port": 502,
        "serial_port": "/dev/ttyUSB0",
        "baudrate": 38400,
        "timeout": 1.0
    }
}


class ConfigError(ValueError):
    """Configuration that cannot be turned into a working controller."""


def find_config_file(filename: str) -> str:
    """
    Locate a file under config/.

    ./config/ in the working directory wins over the one next to the
    source tree, so an installed console script can be run from a
    directory holding its own config/.
    """
    local = os.path.join(os.getcwd(), "config", filename)
    if os.path.exists(local):
        return local
    return os.path.join(PROJECT_ROOT, "config", filename)


def load_config(config_path: str = None) -> Dict[str, Any]:
    """
    Load configuration from file or return defaults.

    Sections found in the file are merged key by key over DEFAULT_CONFIG.
    A file that isn't a mapping is ignored, and so is any section that
    isn't one.

    Args:
        config_path: Path to config file. If None, looks in config/settings.yaml

    Returns:
        Configuration dictionary
    """
    if config_path is None:
        config_path = find_config_file("settings.yaml")

    config = copy.deepcopy(DEFAULT_CONFIG)

    if not os.path.exists(config_path):
        logger.info("No config file found. Using defaults.")
        return config

    logger.info(f"Loading config from {config_path}")
    try:
        with open(config_path, 'r') as f:
            loaded = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        logger.warning(f"Failed to load config: {e}. Using defaults.")
        return config

    if not isinstance(loaded, dict):
        logger.warning(f"Failed to load config: {config_path} is not a mapping. Using defaults.")
        return config

    for section, values in loaded.items():
        if not isinstance(values, dict):
            logger.warning(f"Ignoring config section '{section}': not a mapping")
            continue
        if isinstance(config.get(section), dict):
            config[section].update(values)
        else:
            config[section] = values
    return config


def load_devices(devices_path: str = None) -> List[dict]:
    """
    Load the device list.

    Args:
        devices_path: Path to device file. If None, looks in config/tank.yaml

    Returns:
        List of device entries

    Raises:
        ConfigError: If the file is missing, unreadable or has no device list
    """
    if devices_path is None:
        devices_path = find_config_file("tank.yaml")

    if not os.path.exists(devices_path):
        raise ConfigError(f"Device file not found: {devices_path}")

    try:
        with open(devices_path, 'r') as f:
            loaded = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        raise ConfigError(f"Failed to read {devices_path}: {e}") from e

    devices = loaded.get("devices") if isinstance(loaded, dict) else None
    if not isinstance(devices, list):
        raise ConfigError(f"{devices_path} has no 'devices' list")

    logger.info(f"Loaded {len(devices)} device entries from {devices_path}")
    return devices
