"""Data models for hostdoctor."""

from .diagnosis import Diagnosis, Issue
from .enums import Comparator, FailureKind, Severity, highest_severity
from .report import DiagnosticReport
from .sample import ProbeFailure, Sample, SampleValue

__all__ = [
    "Comparator",
    "Diagnosis",
    "DiagnosticReport",
    "FailureKind",
    "Issue",
    "ProbeFailure",
    "Sample",
    "SampleValue",
    "Severity",
    "highest_severity",
]
