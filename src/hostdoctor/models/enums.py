"""Shared enumerations for the hostdoctor models."""

from enum import Enum
from typing import Iterable


class Severity(str, Enum):
    """Severity of a triggered rule, and the overall status of a diagnosis.

    Members are ranked healthy < notice < warning < critical. The str mixin
    keeps JSON and YAML values readable, so ordering goes through ``rank``
    rather than string comparison.
    """

    HEALTHY = "healthy"
    NOTICE = "notice"
    WARNING = "warning"
    CRITICAL = "critical"

    @property
    def rank(self) -> int:
        """Ordinal position of this severity."""
        return _SEVERITY_RANK[self]

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, Severity):
            return NotImplemented
        return self.rank < other.rank

    def __le__(self, other: object) -> bool:
        if not isinstance(other, Severity):
            return NotImplemented
        return self.rank <= other.rank

    def __gt__(self, other: object) -> bool:
        if not isinstance(other, Severity):
            return NotImplemented
        return self.rank > other.rank

    def __ge__(self, other: object) -> bool:
        if not isinstance(other, Severity):
            return NotImplemented
        return self.rank >= other.rank


_SEVERITY_RANK = {
    Severity.HEALTHY: 0,
    Severity.NOTICE: 1,
    Severity.WARNING: 2,
    Severity.CRITICAL: 3,
}


def highest_severity(severities: Iterable[Severity]) -> Severity:
    """Return the highest severity in ``severities``, or HEALTHY if empty."""
    result = Severity.HEALTHY
    for severity in severities:
        if severity.rank > result.rank:
            result = severity
    return result


class Comparator(str, Enum):
    """Comparison applied by a threshold rule."""

    GT = ">"
    LT = "<"
    GE = ">="
    LE = "<="
    EQ = "=="
    NE = "!="
    CONTAINS = "contains"
    ABSENT = "absent"


class FailureKind(str, Enum):
    """Why a probe produced no samples."""

    PROBE_UNAVAILABLE = "probe_unavailable"
    PARSE_FAILURE = "parse_failure"
