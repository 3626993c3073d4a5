"""Report generator with Jinja2 template support.

Renders a DiagnosticReport as plain text (via a Jinja2 template) or as
JSON (via the pydantic model serializer).
"""

from typing import Any, Dict

from jinja2 import Environment, PackageLoader, select_autoescape

from hostdoctor.models.report import DiagnosticReport
from hostdoctor.reports.formatter import DiagnosisFormatter


class ReportGenerator:
    """Generator for plain text and JSON diagnosis reports.

    Attributes:
        env: Jinja2 Environment configured with PackageLoader
        formatter: DiagnosisFormatter for converting issues to display format
        report_title: Title printed at the top of text reports
    """

    def __init__(
        self,
        display_timezone: str = "UTC",
        report_title: str = "Host Diagnosis",
        show_samples: bool = True,
    ) -> None:
        """Initialize ReportGenerator with Jinja2 environment.

        Args:
            display_timezone: IANA timezone name for timestamp display.
            report_title: Title for generated reports.
            show_samples: Include every collected sample in text output.
        """
        self.report_title = report_title
        self.show_samples = show_samples
        self.formatter = DiagnosisFormatter(display_timezone=display_timezone)

        self.env = Environment(
            loader=PackageLoader("hostdoctor.reports", "templates"),
            autoescape=select_autoescape(["html", "xml"]),
            trim_blocks=True,
            lstrip_blocks=True,
        )

    def _build_context(self, report: DiagnosticReport) -> Dict[str, Any]:
        diagnosis = report.diagnosis
        grouped = self.formatter.format_grouped_issues(list(diagnosis.issues))
        return {
            "report_title": self.report_title,
            "hostname": report.hostname,
            "generated_at": self.formatter.format_timestamp(report.generated_at),
            "status": diagnosis.overall_status.value,
            "critical_issues": grouped["critical"],
            "warning_issues": grouped["warning"],
            "notice_issues": grouped["notice"],
            "notes": list(diagnosis.notes),
            "cancelled": report.cancelled,
            "probes_run": list(report.probes_run),
            "samples": [self.formatter.format_sample(s) for s in report.samples]
            if self.show_samples
            else [],
            "counts": {
                "critical": len(grouped["critical"]),
                "warning": len(grouped["warning"]),
                "notice": len(grouped["notice"]),
                "total": len(diagnosis.issues),
                "rules_evaluated": diagnosis.rules_evaluated,
                "samples": diagnosis.samples_evaluated,
            },
        }

    def generate_text(self, report: DiagnosticReport) -> str:
        """Generate plain text report.

        Issues are listed most severe first; informational notes about
        unavailable probes follow at the end.
        """
        template = self.env.get_template("diagnosis.txt")
        return template.render(**self._build_context(report))

    def generate_json(self, report: DiagnosticReport) -> str:
        """Generate JSON report from the report model."""
        return report.model_dump_json(indent=2)

    def generate(self, report: DiagnosticReport, output_format: str = "text") -> str:
        """Generate a report in the requested format ('text' or 'json')."""
        if output_format == "json":
            return self.generate_json(report)
        if output_format == "text":
            return self.generate_text(report)
        raise ValueError(f"Unknown output format: {output_format}")
