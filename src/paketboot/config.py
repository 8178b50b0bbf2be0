"""
Configuration loading for paketboot.

Settings come from a YAML file with upper-case keys; command-line options
are applied on top of them by the CLI.
"""

import os
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

import platformdirs
import yaml

from paketboot.constants import (
    BOOTSTRAPPER_EXE,
    CONFIG_APP_NAME,
    CONFIG_FILE_NAME,
    DEFAULT_TARGET_DIR,
    LOCAL_CONFIG_FILE_NAME,
    PAKET_EXE,
)
from paketboot.exceptions import ConfigurationError
from paketboot.log_utils import logger

_BOOL_KEYS = ("PREFER_NUGET", "FORCE_NUGET", "PRERELEASE", "USE_CACHE")


@dataclass
class BootstrapOptions:
    """Everything one bootstrapper run needs to know."""

    download_version: Optional[str] = None
    """Explicit version to fetch; None means resolve the latest"""

    ignore_prerelease: bool = True
    prefer_nuget: bool = False
    force_nuget: bool = False
    nuget_source: Optional[str] = None

    max_file_age: Optional[int] = None
    """Skip all checks when the target is younger than this many minutes"""

    self_update: bool = False
    use_cache: bool = True
    target: str = field(default_factory=lambda: os.path.join(DEFAULT_TARGET_DIR, PAKET_EXE))
    bootstrapper_path: str = field(
        default_factory=lambda: os.path.join(DEFAULT_TARGET_DIR, BOOTSTRAPPER_EXE)
    )
    github_token: Optional[str] = None
    log_level: str = "INFO"
    log_dir: Optional[str] = None


def get_user_config_file() -> str:
    return os.path.join(platformdirs.user_config_dir(CONFIG_APP_NAME), CONFIG_FILE_NAME)


def find_config_file(explicit_path: Optional[str] = None) -> Optional[str]:
    """
    Locate the configuration file to load.

    Checks, in order: `explicit_path`, `paket.bootstrapper.yaml` in the working
    directory, and the platformdirs user config file.

    Raises:
        ConfigurationError: If `explicit_path` is given but does not exist.
    """
    if explicit_path:
        if not os.path.isfile(explicit_path):
            raise ConfigurationError(
                "Configuration file not found", details=explicit_path
            )
        return explicit_path

    for candidate in (
        os.path.join(os.getcwd(), LOCAL_CONFIG_FILE_NAME),
        get_user_config_file(),
    ):
        if os.path.isfile(candidate):
            return candidate
    return None


def load_config(path: Optional[str] = None) -> Dict[str, Any]:
    """
    Load the YAML configuration.

    Parameters:
        path (Optional[str]): Explicit configuration file; searched for when None.

    Returns:
        Dict[str, Any]: The configuration mapping, empty when no file exists.

    Raises:
        ConfigurationError: If the file cannot be parsed or is not a mapping.
    """
    config_path = find_config_file(path)
    if config_path is None:
        logger.debug("No configuration file found; using defaults")
        return {}

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            config = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        raise ConfigurationError(
            "Failed to load configuration", details=f"{config_path}: {e}"
        ) from e

    if config is None:
        return {}
    if not isinstance(config, dict):
        raise ConfigurationError(
            "Configuration must be a mapping", details=config_path
        )

    logger.debug(f"Loaded configuration from {config_path}")
    return config


def options_from_config(config: Dict[str, Any]) -> BootstrapOptions:
    """
    Build BootstrapOptions from a configuration mapping.

    Raises:
        ConfigurationError: If a value has the wrong type.
    """
    for key in _BOOL_KEYS:
        if key in config and not isinstance(config[key], bool):
            raise ConfigurationError(f"{key} must be true or false", details=repr(config[key]))

    max_file_age = config.get("MAX_FILE_AGE")
    if max_file_age is not None and (
        isinstance(max_file_age, bool)
        or not isinstance(max_file_age, int)
        or max_file_age < 0
    ):
        raise ConfigurationError(
            "MAX_FILE_AGE must be a non-negative number of minutes",
            details=repr(max_file_age),
        )

    options = BootstrapOptions(
        prefer_nuget=config.get("PREFER_NUGET", False),
        force_nuget=config.get("FORCE_NUGET", False),
        nuget_source=config.get("NUGET_SOURCE"),
        max_file_age=max_file_age,
        ignore_prerelease=not config.get("PRERELEASE", False),
        use_cache=config.get("USE_CACHE", True),
        github_token=config.get("GITHUB_TOKEN") or os.environ.get("GITHUB_TOKEN"),
        log_level=str(config.get("LOG_LEVEL", "INFO")),
        log_dir=config.get("LOG_DIR"),
    )

    version = config.get("DOWNLOAD_VERSION")
    if version is not None:
        options.download_version = str(version)

    target = config.get("TARGET")
    if target:
        options.target = str(target)
        options.bootstrapper_path = os.path.join(
            os.path.dirname(options.target), BOOTSTRAPPER_EXE
        )
    return options
