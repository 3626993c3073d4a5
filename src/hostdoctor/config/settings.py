"""Pydantic settings models for hostdoctor configuration."""

from __future__ import annotations

import os
from typing import Any, Dict, List, Literal, Optional, Tuple, Type
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import yaml
from pydantic import Field, field_validator, model_validator
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

CONFIG_PATH_ENV = "HOSTDOCTOR_CONFIG"

DEFAULT_PROBES = "system,disk,gpu,docker,journal,reboot,packages,wsl"


class HostDoctorYamlSource(PydanticBaseSettingsSource):
    """Reads settings from the YAML file named by HOSTDOCTOR_CONFIG.

    Unreadable or malformed files yield no values here; loader.py reports
    them to the user with a proper error.
    """

    def _read(self) -> Dict[str, Any]:
        path = os.environ.get(CONFIG_PATH_ENV)
        if not path:
            return {}
        try:
            with open(path) as fh:
                data = yaml.safe_load(fh)
        except (OSError, yaml.YAMLError):
            return {}
        return data if isinstance(data, dict) else {}

    def get_field_value(self, field: Any, field_name: str) -> Tuple[Any, str, bool]:
        return self._read().get(field_name), field_name, False

    def __call__(self) -> Dict[str, Any]:
        return self._read()


class HostDoctorSettings(BaseSettings):
    """All hostdoctor settings.

    Later sources lose: constructor arguments (CLI flags), then HOSTDOCTOR_*
    environment variables, then .env, then the YAML file, then defaults.
    """

    model_config = SettingsConfigDict(
        env_prefix="HOSTDOCTOR_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Collection settings
    probes: str = Field(
        default=DEFAULT_PROBES,
        description="Comma-separated probe names, in collection order",
    )
    disk_paths: str = Field(
        default="/",
        description="Comma-separated mount points checked by the disk probe",
    )
    probe_timeout: float = Field(
        default=5.0,
        gt=0,
        le=300.0,
        description="Seconds to wait for each probe before treating it as unavailable",
    )
    parallel_probes: bool = Field(
        default=False,
        description="Run probes concurrently (report order is unchanged)",
    )
    gpu_command: str = Field(
        default="nvidia-smi",
        description="nvidia-smi executable used by the gpu probe",
    )

    # Evaluation settings
    rules_path: Optional[str] = Field(
        default=None,
        description="YAML rule table replacing the built-in rules",
    )

    # Output settings
    output_format: Literal["text", "json"] = Field(
        default="text",
        description="Report format written to stdout",
    )
    timezone: str = Field(
        default="UTC",
        description="Timezone for report timestamps",
    )

    # Logging settings
    log_level: str = Field(
        default="WARNING",
        description="Logging level: DEBUG, INFO, WARNING, ERROR",
    )
    log_format: Literal["json", "text"] = Field(
        default="text",
        description="Log output format: json (machines) or text (humans)",
    )

    # Watch mode settings
    schedule_cron: Optional[str] = Field(
        default=None,
        description="Cron expression (5-field) for watch mode",
    )
    schedule_preset: Optional[str] = Field(
        default=None,
        description="Named schedule preset for watch mode (e.g. 'hourly')",
    )
    schedule_interval_minutes: Optional[int] = Field(
        default=None,
        gt=0,
        description="Run every N minutes in watch mode",
    )
    status_file: str = Field(
        default="/tmp/hostdoctor-status.json",
        description="File receiving the latest status in watch mode",
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: Type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> Tuple[PydanticBaseSettingsSource, ...]:
        """Put CLI overrides first and the YAML file last."""
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            HostDoctorYamlSource(settings_cls),
        )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.upper()
        level = {"WARN": "WARNING"}.get(level, level)
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(
                f"Invalid log level '{v}'. Must be one of: DEBUG, INFO, WARNING, ERROR"
            )
        return level

    @field_validator("timezone")
    @classmethod
    def validate_timezone(cls, v: str) -> str:
        """Validate the timezone is a known IANA name."""
        try:
            ZoneInfo(v)
        except (ZoneInfoNotFoundError, ValueError):
            raise ValueError(f"Unknown timezone '{v}'")
        return v

    @field_validator("probes")
    @classmethod
    def validate_probes(cls, v: str) -> str:
        """At least one probe must be configured."""
        if not [name for name in v.split(",") if name.strip()]:
            raise ValueError("At least one probe must be configured")
        return v

    @model_validator(mode="after")
    def validate_schedule(self) -> "HostDoctorSettings":
        """Only one of cron, preset or interval may be set."""
        configured = [
            name
            for name, value in (
                ("schedule_cron", self.schedule_cron),
                ("schedule_preset", self.schedule_preset),
                ("schedule_interval_minutes", self.schedule_interval_minutes),
            )
            if value
        ]
        if len(configured) > 1:
            raise ValueError(f"Only one schedule may be set, got: {', '.join(configured)}")
        return self

    def get_probe_names(self) -> List[str]:
        """Parse the probes string into an ordered list of names."""
        return [name.strip() for name in self.probes.split(",") if name.strip()]

    def get_disk_paths(self) -> List[str]:
        """Parse disk_paths into a list of mount points."""
        return [path.strip() for path in self.disk_paths.split(",") if path.strip()]

    @property
    def has_schedule(self) -> bool:
        """Whether any watch-mode schedule is configured."""
        return bool(self.schedule_cron or self.schedule_preset or self.schedule_interval_minutes)
