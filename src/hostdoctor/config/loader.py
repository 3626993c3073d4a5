"""Loads HostDoctorSettings once and keeps it for the rest of the process."""

from __future__ import annotations

import os
import threading
from typing import Any, Dict, List, Optional

import yaml
from pydantic import ValidationError

from hostdoctor.config.settings import CONFIG_PATH_ENV, HostDoctorSettings


class ConfigurationError(Exception):
    """Raised when configuration is invalid or cannot be loaded."""

    pass


_config: Optional[HostDoctorSettings] = None
_config_lock = threading.Lock()
# CLI overrides of the last load, reapplied on SIGHUP
_overrides: Dict[str, Any] = {}


def load_yaml_config(config_path: Optional[str] = None) -> Dict[str, Any]:
    """Read the YAML config file, or HOSTDOCTOR_CONFIG when no path is given.

    Returns an empty dict when neither names a file or the file holds no
    mapping.

    Raises:
        ConfigurationError: If the file is missing, unreadable or not YAML.
    """
    path = config_path or os.environ.get(CONFIG_PATH_ENV)
    if not path:
        return {}

    try:
        with open(path) as fh:
            data = yaml.safe_load(fh)
    except FileNotFoundError:
        raise ConfigurationError(
            f"Configuration file not found: {path}\n"
            f"Point {CONFIG_PATH_ENV} at an existing YAML file or unset it."
        )
    except PermissionError:
        raise ConfigurationError(f"Cannot read configuration file {path}: permission denied")
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in configuration file {path}: {e}")
    return data if isinstance(data, dict) else {}


def _describe_error(error: Dict[str, Any]) -> str:
    field = ".".join(str(part) for part in error.get("loc", []))
    msg = error.get("msg", "Invalid value")
    value = error.get("input")

    if not field:
        return f"Configuration error: {msg}"
    if value is not None and not isinstance(value, dict):
        return f"Configuration error: '{field}' {msg}, got: {value}"
    return (
        f"Configuration error: '{field}' {msg}. "
        f"Set HOSTDOCTOR_{field.upper()} or add '{field}:' to the config file."
    )


def format_validation_errors(errors: List[Dict[str, Any]]) -> List[str]:
    """Turn pydantic error dicts into one readable line each."""
    return [_describe_error(error) for error in errors]


def load_config(
    config_path: Optional[str] = None,
    **overrides: Any,
) -> HostDoctorSettings:
    """Build, validate and store the process-wide settings.

    ``overrides`` come from CLI flags and beat every other source; None
    values mean "flag not given" and are dropped. ``config_path`` is
    exported as HOSTDOCTOR_CONFIG so later reloads find the same file.

    Raises:
        ConfigurationError: If the file cannot be read or validation fails.
    """
    global _config, _overrides

    if config_path:
        os.environ[CONFIG_PATH_ENV] = config_path

    # The settings source swallows file errors; surface them here first
    load_yaml_config()

    given = {key: value for key, value in overrides.items() if value is not None}
    try:
        settings = HostDoctorSettings(**given)
    except ValidationError as e:
        raise ConfigurationError("\n".join(format_validation_errors(e.errors())))

    with _config_lock:
        _config = settings
        _overrides = given
    return settings


def get_config() -> HostDoctorSettings:
    """Return the settings stored by the last load_config() call."""
    with _config_lock:
        if _config is None:
            raise ConfigurationError("Configuration not loaded. Call load_config() first.")
        return _config


def reload_config() -> HostDoctorSettings:
    """Re-read configuration from disk, keeping the CLI overrides of the last load.

    On failure the previously loaded settings stay in place.
    """
    with _config_lock:
        overrides = dict(_overrides)
    return load_config(**overrides)
