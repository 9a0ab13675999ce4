"""Configuration loading for jspkgmgr.

Settings come from a YAML file (``--config`` or ``JSPKGMGR_CONFIG``), either
at the top level or under a ``jspkgmgr:`` section, plus environment
overrides. Every key is optional.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional

import yaml

from jspkgmgr.constants import Constants
from jspkgmgr.errors import ConfigError

logger = logging.getLogger(__name__)


@dataclass
class Settings:
    """Runtime settings shared by the factory and the facade."""

    package_manager: Optional[str] = None
    log_file_name: str = Constants.LOG_FILE_NAME
    ci_env_var: str = Constants.ENV_CI
    error_signatures: Dict[str, Dict[str, Any]] = field(default_factory=dict)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "Settings":
        """Build settings from a parsed config document.

        Raises:
            ConfigError: If a key has the wrong type.
        """
        section = data.get(Constants.CONFIG_SECTION, data)
        if not isinstance(section, Mapping):
            raise ConfigError(f"'{Constants.CONFIG_SECTION}' must be a mapping")

        signatures = section.get("error_signatures") or {}
        if not isinstance(signatures, Mapping):
            raise ConfigError("'error_signatures' must be a mapping of tool name to table")

        manager = section.get("package_manager")
        if manager is not None and manager not in Constants.SUPPORTED_MANAGERS:
            raise ConfigError(
                f"Unsupported package_manager '{manager}', expected one of "
                + ", ".join(Constants.SUPPORTED_MANAGERS)
            )

        return cls(
            package_manager=manager,
            log_file_name=str(section.get("log_file_name") or Constants.LOG_FILE_NAME),
            ci_env_var=str(section.get("ci_env_var") or Constants.ENV_CI),
            error_signatures={str(k): dict(v or {}) for k, v in signatures.items()},
        )

    def is_ci(self) -> bool:
        """True when the CI variable is set to anything but an empty/false value."""
        value = os.environ.get(self.ci_env_var, "")
        return value.strip().lower() not in ("", "0", "false")


def _read_config_file(config_path: str) -> Dict[str, Any]:
    try:
        with open(config_path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse config file {config_path}: {exc}") from exc
    except OSError as exc:
        raise ConfigError(f"Failed to read config file {config_path}: {exc}") from exc
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Config file {config_path} must contain a mapping")
    return data


def load_settings(config_path: Optional[str] = None) -> Settings:
    """Load settings from ``config_path`` (or ``JSPKGMGR_CONFIG``) and the environment.

    A missing file only logs a warning and yields defaults.
    """
    config_path = config_path or os.environ.get(Constants.ENV_CONFIG)
    data: Dict[str, Any] = {}
    if config_path:
        if os.path.isfile(config_path):
            data = _read_config_file(config_path)
            logger.info("Loaded config from: %s", config_path)
        else:
            logger.warning("Config file not found: %s", config_path)

    settings = Settings.from_mapping(data)

    forced = os.environ.get(Constants.ENV_PACKAGE_MANAGER)
    if forced:
        if forced not in Constants.SUPPORTED_MANAGERS:
            raise ConfigError(
                f"{Constants.ENV_PACKAGE_MANAGER}={forced} is not one of "
                + ", ".join(Constants.SUPPORTED_MANAGERS)
            )
        settings.package_manager = forced
    return settings
