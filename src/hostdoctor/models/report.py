"""Report model wrapping a diagnosis with collection context."""

from datetime import datetime, timezone
from typing import List
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field, computed_field

from .diagnosis import Diagnosis
from .enums import Severity
from .sample import ProbeFailure, Sample


class DiagnosticReport(BaseModel):
    """Container for one collection + evaluation run.

    The Diagnosis itself is a pure function of its inputs; run-specific
    context (when, where, what was collected) is kept here.
    """

    model_config = ConfigDict(from_attributes=True)

    id: UUID = Field(default_factory=uuid4, description="Unique identifier for this run")
    generated_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="When this report was generated",
    )
    hostname: str = Field(default="localhost", description="Host the probes ran on")
    diagnosis: Diagnosis = Field(..., description="Evaluation result")
    samples: List[Sample] = Field(default_factory=list, description="Collected samples")
    failures: List[ProbeFailure] = Field(default_factory=list, description="Failed probes")
    probes_run: List[str] = Field(default_factory=list, description="Probe names in run order")
    cancelled: bool = Field(default=False, description="Collection was stopped early")

    @computed_field  # type: ignore[prop-decorator]
    @property
    def status(self) -> Severity:
        """Overall status of the diagnosis."""
        return self.diagnosis.overall_status

    @computed_field  # type: ignore[prop-decorator]
    @property
    def issue_count(self) -> int:
        """Number of triggered issues."""
        return len(self.diagnosis.issues)
