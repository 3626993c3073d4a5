"""Watch-mode runner that repeats a diagnosis on an APScheduler trigger."""

from datetime import datetime, timedelta
from typing import Any, Callable, Dict, Optional, Tuple

import structlog
from apscheduler.events import EVENT_JOB_ERROR, EVENT_JOB_EXECUTED
from apscheduler.schedulers.blocking import BlockingScheduler
from apscheduler.triggers.base import BaseTrigger
from apscheduler.triggers.cron import CronTrigger
from apscheduler.triggers.interval import IntervalTrigger

from hostdoctor.scheduler.presets import get_preset, list_presets

log = structlog.get_logger()

JOB_ID = "diagnosis_job"


class SchedulerError(Exception):
    """Raised when a watch schedule is invalid."""

    pass


class ScheduledRunner:
    """Runs a job on one of three schedule kinds.

    - cron: 5-field crontab expression
    - preset: named entry of SCHEDULE_PRESETS
    - interval: every N minutes, first run immediately

    With no schedule the job runs once and the runner returns. Jobs never
    overlap and missed runs are coalesced into one.
    """

    def __init__(self, timezone: str = "UTC", misfire_grace_time: int = 300) -> None:
        """Initialize the runner.

        Args:
            timezone: IANA timezone used to interpret cron fields
            misfire_grace_time: Seconds a late job may still start
        """
        self.timezone = timezone
        self.misfire_grace_time = misfire_grace_time
        self._scheduler: Optional[BlockingScheduler] = None

    def _create_scheduler(self) -> BlockingScheduler:
        return BlockingScheduler(
            timezone=self.timezone,
            job_defaults={
                "coalesce": True,
                "misfire_grace_time": self.misfire_grace_time,
                "max_instances": 1,
            },
        )

    def build_trigger(
        self,
        cron_expr: Optional[str] = None,
        preset: Optional[str] = None,
        interval_minutes: Optional[int] = None,
    ) -> Tuple[Any, Dict[str, Any]]:
        """Translate a schedule into an add_job trigger plus extra job kwargs.

        Raises:
            SchedulerError: If the schedule is ambiguous or invalid
        """
        given = [value for value in (cron_expr, preset, interval_minutes) if value]
        if len(given) > 1:
            raise SchedulerError("Specify only one of cron expression, preset or interval")

        if cron_expr:
            # from_crontab() ignores the scheduler timezone unless passed explicitly
            try:
                trigger: BaseTrigger = CronTrigger.from_crontab(cron_expr, timezone=self.timezone)
            except ValueError as e:
                raise SchedulerError(f"Invalid cron expression '{cron_expr}': {e}")
            log.info("job_scheduled", schedule_type="cron", cron=cron_expr, timezone=self.timezone)
            return trigger, {}

        if preset:
            params = get_preset(preset)
            if params is None:
                raise SchedulerError(
                    f"Unknown schedule preset: '{preset}'. Available: {', '.join(list_presets())}"
                )
            log.info("job_scheduled", schedule_type="preset", preset=preset, params=params)
            return "cron", dict(params, timezone=self.timezone)

        if interval_minutes is not None and interval_minutes <= 0:
            raise SchedulerError(f"Interval must be positive, got {interval_minutes}")
        if interval_minutes:
            trigger = IntervalTrigger(minutes=interval_minutes, timezone=self.timezone)
            log.info("job_scheduled", schedule_type="interval", minutes=interval_minutes)
            return trigger, {"next_run_time": datetime.now(trigger.timezone)}

        raise SchedulerError("No schedule configured")

    def run_once(self, func: Callable[[], None]) -> None:
        """Run ``func`` a single time through the scheduler, then return."""
        log.info("one_shot_mode", message="Running once and exiting")
        scheduler = self._create_scheduler()
        scheduler.add_job(
            func,
            "date",
            run_date=datetime.now() + timedelta(seconds=1),
            id="oneshot_job",
        )

        def stop(event: Any) -> None:
            scheduler.shutdown(wait=False)

        scheduler.add_listener(stop, EVENT_JOB_EXECUTED | EVENT_JOB_ERROR)
        scheduler.start()

    def run(
        self,
        func: Callable[[], None],
        cron_expr: Optional[str] = None,
        preset: Optional[str] = None,
        interval_minutes: Optional[int] = None,
    ) -> None:
        """Block and run ``func`` on the given schedule until interrupted.

        Without any schedule this falls back to run_once().

        Raises:
            SchedulerError: If the schedule is ambiguous or invalid
        """
        if not (cron_expr or preset or interval_minutes):
            self.run_once(func)
            return

        trigger, job_kwargs = self.build_trigger(cron_expr, preset, interval_minutes)
        self._scheduler = self._create_scheduler()
        self._scheduler.add_job(func, trigger, id=JOB_ID, **job_kwargs)
        self._scheduler.add_listener(
            lambda event: log.error("job_failed", error=str(event.exception)),
            EVENT_JOB_ERROR,
        )

        log.info("scheduler_starting", timezone=self.timezone)
        try:
            self._scheduler.start()
        except KeyboardInterrupt:
            log.info("scheduler_shutdown", reason="keyboard interrupt")

    def shutdown(self) -> None:
        """Stop the scheduler if it is running."""
        if self._scheduler and self._scheduler.running:
            self._scheduler.shutdown(wait=True)
            log.info("scheduler_shutdown", reason="explicit shutdown")
