"""Scheduler subsystem for watch mode."""

from hostdoctor.scheduler.presets import SCHEDULE_PRESETS, get_preset, list_presets
from hostdoctor.scheduler.runner import ScheduledRunner, SchedulerError

__all__ = [
    "ScheduledRunner",
    "SchedulerError",
    "SCHEDULE_PRESETS",
    "get_preset",
    "list_presets",
]
