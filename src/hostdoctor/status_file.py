"""File-based status output for watch mode.

After every scheduled run the latest diagnosis status is written as JSON
to a status file, so that a monitoring agent or a container HEALTHCHECK
can read it without parsing reports.

HEALTHCHECK example:
    HEALTHCHECK --interval=60s --timeout=3s \\
        CMD python -c "import json; s=json.load(open('/tmp/hostdoctor-status.json')); exit(0 if s['status'] in ('healthy', 'notice') else 1)"

Example usage:
    from hostdoctor.status_file import write_status, read_status

    write_status(path, report)
    status = read_status(path)
"""

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional, Union

from hostdoctor.models.report import DiagnosticReport

PathLike = Union[str, Path]


def write_status(
    path: PathLike,
    report: DiagnosticReport,
    details: Optional[Dict[str, Any]] = None,
) -> None:
    """Write the status of ``report`` to ``path``.

    The file is written to a temporary sibling and renamed, so readers
    never observe a partially written file.

    Args:
        path: Status file location.
        report: Report of the run that just finished.
        details: Optional extra fields stored under "details".

    Example:
        >>> write_status("/tmp/hostdoctor-status.json", report)
        >>> # File now contains:
        >>> # {"status": "warning", "issues": 2, "timestamp": "...", ...}
    """
    target = Path(path)
    data = {
        "status": report.status.value,
        "issues": report.issue_count,
        "notes": len(report.diagnosis.notes),
        "hostname": report.hostname,
        "timestamp": report.generated_at.isoformat(),
        "written_at": datetime.now(timezone.utc).isoformat(),
        "details": details or {},
    }
    _write_json(target, data)


def write_status_error(path: PathLike, error: str) -> None:
    """Record a run that failed before producing a report."""
    _write_json(
        Path(path),
        {
            "status": "error",
            "error": error,
            "written_at": datetime.now(timezone.utc).isoformat(),
        },
    )


def _write_json(target: Path, data: Dict[str, Any]) -> None:
    tmp = target.with_name(target.name + ".tmp")
    tmp.write_text(json.dumps(data))
    tmp.replace(target)


def read_status(path: PathLike) -> Optional[Dict[str, Any]]:
    """Read the last written status.

    Returns:
        Dictionary with status data, or None if the file is missing or
        unreadable.
    """
    target = Path(path)
    if not target.exists():
        return None
    try:
        return json.loads(target.read_text())
    except (json.JSONDecodeError, OSError):
        return None


def clear_status(path: PathLike) -> None:
    """Remove the status file on shutdown. Missing files are ignored."""
    Path(path).unlink(missing_ok=True)
