"""
Configuration loading for srcstash.

Configuration is a flat YAML mapping with upper-case keys, stored in the
platformdirs-managed config directory. Every key is optional; the accessors
below supply defaults and validate values.
"""

import os
from pathlib import Path
from typing import Any, Dict, Optional

import platformdirs
import yaml

from srcstash.constants import (
    APP_NAME,
    CONFIG_FILE_NAME,
    DEFAULT_CONNECT_TIMEOUT,
    DEFAULT_FTP_CONNECT_TIMEOUT,
    SOURCES_DIR_NAME,
    STAGING_DIR_NAME,
)
from srcstash.exceptions import ConfigFileError, ConfigurationError
from srcstash.log_utils import add_file_logging, logger, set_log_level

CONFIG_DIR = platformdirs.user_config_dir(APP_NAME)
CONFIG_FILE = os.path.join(CONFIG_DIR, CONFIG_FILE_NAME)


def load_config(directory: Optional[str] = None) -> Optional[Dict[str, Any]]:
    """
    Load the srcstash configuration YAML.

    Parameters:
        directory (str | None): Directory holding `srcstash.yaml`. When omitted the
            platformdirs-managed CONFIG_FILE is used.

    Returns:
        dict | None: The parsed configuration mapping, an empty dict for an empty file,
            or None when no configuration file exists.

    Raises:
        ConfigFileError: If the file cannot be read, is not valid YAML, or does not
            contain a mapping.
    """
    config_path = (
        os.path.join(directory, CONFIG_FILE_NAME) if directory else CONFIG_FILE
    )
    if not os.path.exists(config_path):
        logger.debug(f"No configuration found at {config_path}")
        return None

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            config = yaml.safe_load(f)
    except OSError as e:
        raise ConfigFileError(
            f"Could not read configuration {config_path}", details=str(e)
        ) from e
    except yaml.YAMLError as e:
        raise ConfigFileError(
            f"Could not parse configuration {config_path}", details=str(e)
        ) from e

    if config is None:
        return {}
    if not isinstance(config, dict):
        raise ConfigFileError(
            f"Configuration {config_path} must be a mapping",
            details=f"got {type(config).__name__}",
        )

    logger.debug(f"Loaded configuration from {config_path}")
    return config


def get_source_dir(config: Dict[str, Any]) -> str:
    """Return the content root, defaulting to `<user cache dir>/sources`."""
    source_dir = config.get("SOURCE_DIR")
    if source_dir is None:
        return os.path.join(platformdirs.user_cache_dir(APP_NAME), SOURCES_DIR_NAME)
    if not str(source_dir).strip():
        raise ConfigurationError("SOURCE_DIR must not be empty")
    return os.path.expanduser(str(source_dir))


def get_staging_dir(config: Dict[str, Any]) -> str:
    """Return the staging directory, defaulting to `SOURCE_DIR/staging`."""
    staging_dir = config.get("STAGING_DIR")
    if staging_dir is None:
        return os.path.join(get_source_dir(config), STAGING_DIR_NAME)
    if not str(staging_dir).strip():
        raise ConfigurationError("STAGING_DIR must not be empty")
    return os.path.expanduser(str(staging_dir))


def _get_timeout(config: Dict[str, Any], key: str, default: float) -> float:
    value = config.get(key, default)
    try:
        timeout = float(value)
    except (TypeError, ValueError) as e:
        raise ConfigurationError(
            f"{key} must be a number of seconds", details=repr(value)
        ) from e
    if timeout <= 0:
        raise ConfigurationError(f"{key} must be positive", details=repr(value))
    return timeout


def get_connect_timeout(config: Dict[str, Any]) -> float:
    """Return the HTTP connection-establishment timeout in seconds."""
    return _get_timeout(config, "CONNECT_TIMEOUT", DEFAULT_CONNECT_TIMEOUT)


def get_ftp_connect_timeout(config: Dict[str, Any]) -> float:
    """Return the FTP connection-establishment timeout in seconds."""
    return _get_timeout(config, "FTP_CONNECT_TIMEOUT", DEFAULT_FTP_CONNECT_TIMEOUT)


def get_verify_hash(config: Dict[str, Any]) -> bool:
    return bool(config.get("VERIFY_HASH", True))


def get_show_progress(config: Dict[str, Any]) -> bool:
    return bool(config.get("SHOW_PROGRESS", True))


def apply_logging_config(config: Dict[str, Any]) -> None:
    """Apply LOG_LEVEL and, when set, LOG_DIR file logging from `config`."""
    level = config.get("LOG_LEVEL")
    if level:
        set_log_level(str(level))
    log_dir = config.get("LOG_DIR")
    if log_dir:
        add_file_logging(Path(os.path.expanduser(str(log_dir))), str(level or "INFO"))
