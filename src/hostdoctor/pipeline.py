"""One collection + evaluation run.

Wires the configured probes into a Collector, evaluates the collected
samples against the rule table and wraps the outcome in a
DiagnosticReport. Used by the CLI for single runs and by watch mode on
every scheduled tick.
"""

import socket
import threading
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Sequence

import structlog

from hostdoctor.analysis.evaluator import Evaluator
from hostdoctor.analysis.rules import ThresholdRule, get_rules
from hostdoctor.collector import Collector, Probe
from hostdoctor.config.settings import HostDoctorSettings
from hostdoctor.models.enums import FailureKind
from hostdoctor.models.report import DiagnosticReport
from hostdoctor.models.sample import ProbeFailure
from hostdoctor.probes import build_probes

log = structlog.get_logger()


def build_baselines(now: Optional[datetime] = None) -> Dict[str, Any]:
    """Baselines available to drift rules; ``now`` defaults to the current UTC time."""
    return {"now": now or datetime.now(timezone.utc)}


def skipped_probe_failures(probes: Sequence[Probe], probes_run: Sequence[str]) -> List[ProbeFailure]:
    """Failure records for probes a cancelled collection never reached."""
    ran = set(probes_run)
    return [
        ProbeFailure(
            probe=probe.name,
            kind=FailureKind.PROBE_UNAVAILABLE,
            message="not run, collection was cancelled",
        )
        for probe in probes
        if probe.name not in ran
    ]


def check_setup(settings: HostDoctorSettings) -> None:
    """Build the probes and load the rule table once without collecting.

    Watch mode calls this before scheduling so a bad probe name or rule
    file stops the process instead of failing every run.

    Raises:
        UnknownProbeError: If a probe name is not a built-in probe.
        RuleConfigError: If the configured rule file is invalid.
    """
    build_probes(settings)
    get_rules(settings.rules_path)


def run_diagnosis(
    settings: HostDoctorSettings,
    probe_names: Optional[Sequence[str]] = None,
    rules: Optional[List[ThresholdRule]] = None,
    stop_event: Optional[threading.Event] = None,
    now: Optional[datetime] = None,
) -> DiagnosticReport:
    """Collect samples from the configured probes and evaluate them.

    Args:
        settings: Loaded settings.
        probe_names: Probes to run instead of ``settings.probes``.
        rules: Rule table to use instead of loading it from settings.
        stop_event: Set to stop collection after the current probe.
        now: Reference time for drift rules.

    Returns:
        DiagnosticReport for this run.

    Raises:
        UnknownProbeError: If a probe name is not a built-in probe.
        RuleConfigError: If the configured rule file is invalid.
    """
    probes = build_probes(settings, probe_names)
    if rules is None:
        rules = get_rules(settings.rules_path)

    collector = Collector(
        probes,
        timeout=settings.probe_timeout,
        parallel=settings.parallel_probes,
    )
    result = collector.collect(stop_event=stop_event)

    failures = result.failures + skipped_probe_failures(probes, result.probe_names)
    evaluator = Evaluator(rules, baselines=build_baselines(now))
    diagnosis = evaluator.evaluate(result.samples, failures)

    report = DiagnosticReport(
        hostname=socket.gethostname(),
        diagnosis=diagnosis,
        samples=result.samples,
        failures=failures,
        probes_run=result.probe_names,
        cancelled=result.cancelled,
    )
    log.info(
        "diagnosis_complete",
        status=diagnosis.overall_status.value,
        issues=len(diagnosis.issues),
        notes=len(diagnosis.notes),
        cancelled=result.cancelled,
    )
    return report
