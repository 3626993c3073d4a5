"""Turns issues and samples into plain dicts the report templates can print."""

from datetime import datetime
from typing import Any, Dict, List, Optional
from zoneinfo import ZoneInfo

from hostdoctor.models.diagnosis import Issue
from hostdoctor.models.enums import Severity
from hostdoctor.models.sample import Sample, SampleValue


class DiagnosisFormatter:
    """Renders values and timestamps in one display timezone."""

    def __init__(self, display_timezone: str = "UTC"):
        self.display_timezone = display_timezone
        self._tz = ZoneInfo(display_timezone)

    def format_timestamp(self, dt: datetime) -> str:
        """Return e.g. "Jan 24, 2026 at 2:30 PM CET"; naive values count as UTC."""
        if dt.tzinfo is None:
            dt = dt.replace(tzinfo=ZoneInfo("UTC"))

        local_dt = dt.astimezone(self._tz)
        tz_abbrev = local_dt.strftime("%Z")
        formatted = local_dt.strftime("%b %-d, %Y at %-I:%M %p")
        return f"{formatted} {tz_abbrev}"

    @staticmethod
    def format_value(value: Optional[SampleValue], unit: Optional[str] = None) -> str:
        """Render a sample value with its unit, e.g. ``"87.0C"`` or ``"yes"``."""
        if value is None:
            return "n/a"
        if isinstance(value, bool):
            return "yes" if value else "no"
        if isinstance(value, float):
            text = f"{value:.1f}"
        else:
            text = str(value)
        return f"{text}{unit}" if unit else text

    def format_issue(self, issue: Issue) -> Dict[str, Any]:
        """Convert an issue to a display dictionary."""
        return {
            "rule": issue.rule,
            "sample": issue.sample,
            "severity": issue.severity.value,
            "category": issue.category,
            "description": issue.description,
            "recommendation": issue.recommendation,
            "value": self.format_value(issue.value),
            "limit": self.format_value(issue.limit),
        }

    def format_sample(self, sample: Sample) -> Dict[str, Any]:
        """Convert a sample to a display dictionary."""
        return {
            "name": sample.name,
            "value": self.format_value(sample.value, sample.unit),
            "source": sample.source,
            "timestamp": self.format_timestamp(sample.timestamp),
        }

    def format_grouped_issues(self, issues: List[Issue]) -> Dict[str, List[Dict[str, Any]]]:
        """Group formatted issues by severity.

        Returns:
            Dictionary with keys 'critical', 'warning', 'notice', each
            preserving the input order of issues of that severity.
        """
        grouped: Dict[str, List[Dict[str, Any]]] = {
            Severity.CRITICAL.value: [],
            Severity.WARNING.value: [],
            Severity.NOTICE.value: [],
        }
        for issue in issues:
            grouped.setdefault(issue.severity.value, []).append(self.format_issue(issue))
        return grouped
