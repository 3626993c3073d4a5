"""Configuration management for hostdoctor."""

from hostdoctor.config.loader import ConfigurationError, get_config, load_config, reload_config
from hostdoctor.config.settings import HostDoctorSettings

__all__ = [
    "ConfigurationError",
    "HostDoctorSettings",
    "get_config",
    "load_config",
    "reload_config",
]
