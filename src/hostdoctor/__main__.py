"""
Entry point for the hostdoctor CLI.

Usage:
    hostdoctor                  Collect, evaluate and print a report once
    hostdoctor --watch          Repeat on the configured schedule
    hostdoctor --list-probes    Show built-in probes and exit
    hostdoctor --list-rules     Show the active rule table and exit
    hostdoctor --version        Show version and exit

Exit Codes:
    0 - Healthy (or notices only)
    1 - Configuration error (invalid settings, rule file or probe name)
    2 - Warning issues found
    3 - Critical issues found
"""

from __future__ import annotations

import argparse
import signal
import sys
from typing import TYPE_CHECKING, List, Optional, Sequence

if TYPE_CHECKING:
    from types import FrameType
    from hostdoctor.models.enums import Severity

from hostdoctor import __version__

# Exit codes
EXIT_HEALTHY = 0
EXIT_CONFIG_ERROR = 1
EXIT_WARNING = 2
EXIT_CRITICAL = 3


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        prog="hostdoctor",
        description="Collect host diagnostics and report health issues with recommendations",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Exit Codes:
  0   Healthy (or notices only)
  1   Configuration error
  2   Warning issues found
  3   Critical issues found

Environment Variables:
  HOSTDOCTOR_CONFIG           Path to YAML configuration file
  HOSTDOCTOR_PROBES           Comma-separated probe names
  HOSTDOCTOR_DISK_PATHS       Comma-separated mount points for the disk probe
  HOSTDOCTOR_PROBE_TIMEOUT    Seconds per probe (default: 5)
  HOSTDOCTOR_PARALLEL_PROBES  Run probes concurrently (default: false)
  HOSTDOCTOR_RULES_PATH       YAML rule table replacing the built-in rules
  HOSTDOCTOR_LOG_LEVEL        Logging level: DEBUG, INFO, WARNING, ERROR
  HOSTDOCTOR_LOG_FORMAT       Log format: json or text

Examples:
  # Full diagnosis
  hostdoctor

  # Only GPU and disk checks, as JSON
  hostdoctor --probe gpu --probe disk --format json

  # Re-run every 15 minutes
  HOSTDOCTOR_SCHEDULE_PRESET=every_15_minutes hostdoctor --watch
""",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "--config",
        metavar="PATH",
        help="YAML configuration file",
    )
    parser.add_argument(
        "--rules",
        metavar="PATH",
        help="YAML rule table replacing the built-in rules",
    )
    parser.add_argument(
        "--probe",
        metavar="NAME",
        action="append",
        help="Run only this probe (repeatable, keeps the given order)",
    )
    parser.add_argument(
        "--format",
        choices=["text", "json"],
        help="Report format (default: text)",
    )
    parser.add_argument(
        "--list-probes",
        action="store_true",
        help="List built-in probes and exit",
    )
    parser.add_argument(
        "--list-rules",
        action="store_true",
        help="List the active rule table and exit",
    )
    parser.add_argument(
        "--watch",
        action="store_true",
        help="Run repeatedly on the configured schedule",
    )
    return parser.parse_args(argv)


def exit_code_for(status: "Severity") -> int:
    """Map an overall status to a process exit code."""
    from hostdoctor.models.enums import Severity

    if status == Severity.CRITICAL:
        return EXIT_CRITICAL
    if status == Severity.WARNING:
        return EXIT_WARNING
    return EXIT_HEALTHY


def handle_sighup(signum: int, frame: Optional[FrameType]) -> None:
    """Re-read configuration on SIGHUP; the next watch run picks it up."""
    from hostdoctor.config.loader import reload_config
    from hostdoctor.logging import get_logger

    log = get_logger()
    try:
        config = reload_config()
    except Exception as e:
        # keep running on the previous settings
        log.error("config_reload_failed", error=str(e))
        return
    log.info("config_reloaded", probes=config.get_probe_names())


def format_rule_table(rules: List) -> List[str]:
    """One line per rule: name, severity and condition."""
    lines = []
    for rule in rules:
        if rule.limit is None:
            condition = f"{rule.sample} {rule.comparator.value}"
        else:
            condition = f"{rule.sample} {rule.comparator.value} {rule.limit}"
        if rule.baseline:
            condition += f" (drift from {rule.baseline})"
        lines.append(f"{rule.name:<28} {rule.severity.value:<8} {condition}")
    return lines


def run_diagnosis_job() -> None:
    """Execute one diagnosis in watch mode.

    Called by the scheduler on every tick. Reads the current
    configuration (so SIGHUP reloads take effect), prints the report and
    records the status file. Failures are logged and recorded, never
    raised, so the scheduler keeps running.
    """
    from hostdoctor.config.loader import get_config
    from hostdoctor.logging import get_logger
    from hostdoctor.pipeline import run_diagnosis
    from hostdoctor.reports.generator import ReportGenerator
    from hostdoctor.status_file import write_status, write_status_error

    log = get_logger()
    config = get_config()
    log.info("job_starting")

    try:
        report = run_diagnosis(config)
        generator = ReportGenerator(display_timezone=config.timezone)
        print(generator.generate(report, config.output_format), flush=True)
        write_status(config.status_file, report)
        log.info("job_complete", status=report.status.value)
    except Exception as e:
        log.error("job_failed", error=str(e))
        write_status_error(config.status_file, str(e))


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Main entry point for hostdoctor.

    Returns:
        Exit code (0=healthy, 1=config error, 2=warning, 3=critical)
    """
    args = parse_args(argv)

    # Import here to allow --help and --version without loading dependencies
    from hostdoctor.analysis.rules import RuleConfigError, get_rules
    from hostdoctor.config.loader import ConfigurationError, load_config
    from hostdoctor.logging import configure_logging, get_logger
    from hostdoctor.pipeline import check_setup, run_diagnosis
    from hostdoctor.probes import UnknownProbeError, list_probes
    from hostdoctor.reports.generator import ReportGenerator
    from hostdoctor.scheduler import ScheduledRunner, SchedulerError
    from hostdoctor.status_file import clear_status

    if args.list_probes:
        for name in list_probes():
            print(name)
        return EXIT_HEALTHY

    try:
        config = load_config(
            args.config,
            rules_path=args.rules,
            output_format=args.format,
            probes=",".join(args.probe) if args.probe else None,
        )
    except ConfigurationError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return EXIT_CONFIG_ERROR

    configure_logging(log_format=config.log_format, log_level=config.log_level)
    log = get_logger()

    if args.list_rules:
        try:
            rules = get_rules(config.rules_path)
        except RuleConfigError as e:
            print(f"Rule configuration error: {e}", file=sys.stderr)
            return EXIT_CONFIG_ERROR
        for line in format_rule_table(rules):
            print(line)
        return EXIT_HEALTHY

    if not args.watch:
        try:
            report = run_diagnosis(config)
        except (RuleConfigError, UnknownProbeError) as e:
            log.error("diagnosis_setup_failed", error=str(e))
            print(f"Configuration error: {e}", file=sys.stderr)
            return EXIT_CONFIG_ERROR
        generator = ReportGenerator(display_timezone=config.timezone)
        print(generator.generate(report, config.output_format))
        return exit_code_for(report.status)

    # Watch mode
    try:
        check_setup(config)
    except (RuleConfigError, UnknownProbeError) as e:
        log.error("diagnosis_setup_failed", error=str(e))
        print(f"Configuration error: {e}", file=sys.stderr)
        return EXIT_CONFIG_ERROR

    log.info("starting", version=__version__)
    if hasattr(signal, "SIGHUP"):
        signal.signal(signal.SIGHUP, handle_sighup)

    runner = ScheduledRunner(timezone=config.timezone)
    log.info(
        "service_starting",
        schedule_preset=config.schedule_preset,
        schedule_cron=config.schedule_cron,
        schedule_interval_minutes=config.schedule_interval_minutes,
        timezone=config.timezone,
    )

    try:
        runner.run(
            func=run_diagnosis_job,
            cron_expr=config.schedule_cron,
            preset=config.schedule_preset,
            interval_minutes=config.schedule_interval_minutes,
        )
        return EXIT_HEALTHY
    except SchedulerError as e:
        log.error("scheduler_config_invalid", error=str(e))
        print(f"Configuration error: {e}", file=sys.stderr)
        return EXIT_CONFIG_ERROR
    except KeyboardInterrupt:
        log.info("shutdown", reason="keyboard interrupt")
        runner.shutdown()
        return EXIT_HEALTHY
    finally:
        clear_status(config.status_file)


if __name__ == "__main__":
    sys.exit(main())
