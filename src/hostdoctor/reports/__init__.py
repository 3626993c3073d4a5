"""Report rendering for diagnoses."""

from hostdoctor.reports.formatter import DiagnosisFormatter
from hostdoctor.reports.generator import ReportGenerator

__all__ = ["DiagnosisFormatter", "ReportGenerator"]
