"""Sample and probe failure models.

A Sample is one named metric reading captured by a probe. Samples are
frozen pydantic models so that the evaluator can treat them as read-only
inputs.
"""

from datetime import datetime, timezone
from typing import Any, Dict, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .enums import FailureKind

SampleValue = Union[bool, int, float, str]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Sample(BaseModel):
    """A single named metric reading.

    Names are dotted identifiers such as ``gpu.temperature`` or
    ``disk.usedPct``. Probe-specific context (mount point, GPU index) lives
    in ``extra`` instead of ad hoc attributes.
    """

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., description="Metric identifier, e.g. 'gpu.temperature'")
    value: SampleValue = Field(..., description="Numeric or string reading")
    unit: Optional[str] = Field(default=None, description="Unit of the value, e.g. 'C' or '%'")
    timestamp: datetime = Field(default_factory=_utcnow, description="Capture time (UTC)")
    source: str = Field(default="unknown", description="Name of the probe that produced it")
    extra: Dict[str, Any] = Field(
        default_factory=dict, description="Probe-specific fields (mount, gpu_index, ...)"
    )

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        """Sample names must be non-empty."""
        if not v or not v.strip():
            raise ValueError("Sample name cannot be empty")
        return v.strip()

    @property
    def is_numeric(self) -> bool:
        """True for int/float readings (bool is not treated as numeric)."""
        return isinstance(self.value, (int, float)) and not isinstance(self.value, bool)


class ProbeFailure(BaseModel):
    """Record of a probe that could not contribute samples."""

    model_config = ConfigDict(frozen=True)

    probe: str = Field(..., description="Probe name")
    kind: FailureKind = Field(..., description="probe_unavailable or parse_failure")
    message: str = Field(default="", description="Human-readable reason")

    @property
    def note(self) -> str:
        """Informational line describing the reduced visibility."""
        if self.kind == FailureKind.PARSE_FAILURE:
            return f"{self.probe} data could not be interpreted: {self.message}"
        return f"{self.probe} data unavailable: {self.message}"
