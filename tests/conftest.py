"""Shared pytest fixtures."""

import logging
from datetime import datetime, timezone

import pytest
import structlog

from hostdoctor.config.settings import CONFIG_PATH_ENV
from hostdoctor.models import Sample


@pytest.fixture(autouse=True)
def quiet_structlog():
    """Keep structlog output out of captured stdout."""
    structlog.configure(
        wrapper_class=structlog.make_filtering_bound_logger(logging.CRITICAL),
        cache_logger_on_first_use=False,
    )


@pytest.fixture
def clean_env(monkeypatch):
    """Remove hostdoctor environment variables for the duration of a test."""
    import os

    for key in list(os.environ):
        if key.startswith("HOSTDOCTOR_"):
            monkeypatch.delenv(key, raising=False)
    monkeypatch.delenv(CONFIG_PATH_ENV, raising=False)
    return monkeypatch


@pytest.fixture
def fixed_time():
    """Fixed timestamp for deterministic samples."""
    return datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def make_sample(fixed_time):
    """Factory for samples with a fixed timestamp."""

    def _make(name, value, unit=None, source="test", **extra):
        return Sample(
            name=name,
            value=value,
            unit=unit,
            timestamp=fixed_time,
            source=source,
            extra=extra,
        )

    return _make
