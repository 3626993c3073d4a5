"""Exceptions raised by probes.

Probes raise these to signal that their slot in a collection pass produced
no samples. The collector records them; they never abort a run.
"""

from typing import Optional

from hostdoctor.models.enums import FailureKind


class ProbeError(Exception):
    """Base exception for probe failures.

    Attributes:
        probe: Name of the failing probe.
        message: Human-readable reason.
        cause: Underlying exception, if any.
    """

    kind: FailureKind = FailureKind.PROBE_UNAVAILABLE

    def __init__(
        self,
        probe: str,
        message: str,
        cause: Optional[BaseException] = None,
    ) -> None:
        self.probe = probe
        self.message = message
        self.cause = cause
        super().__init__(f"{probe}: {message}")


class ProbeUnavailable(ProbeError):
    """The probe could not run.

    Typical causes: the tool is not installed, permission was denied, the
    command exited non-zero or timed out, or the platform is unsupported.
    """

    kind = FailureKind.PROBE_UNAVAILABLE


class ParseFailure(ProbeError):
    """The probe ran but its output could not be interpreted."""

    kind = FailureKind.PARSE_FAILURE
