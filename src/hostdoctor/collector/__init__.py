"""Sample collection from pluggable probes."""

from hostdoctor.collector.base import BaseProbe, CommandProbe, FunctionProbe, Probe
from hostdoctor.collector.collector import (
    DEFAULT_PROBE_TIMEOUT,
    CollectionResult,
    Collector,
    ProbeOutcome,
)
from hostdoctor.collector.exceptions import ParseFailure, ProbeError, ProbeUnavailable

__all__ = [
    "BaseProbe",
    "CollectionResult",
    "Collector",
    "CommandProbe",
    "DEFAULT_PROBE_TIMEOUT",
    "FunctionProbe",
    "ParseFailure",
    "Probe",
    "ProbeError",
    "ProbeOutcome",
    "ProbeUnavailable",
]
