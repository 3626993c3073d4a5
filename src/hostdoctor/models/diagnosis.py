"""Diagnosis model produced by the evaluator."""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, computed_field

from .enums import Severity
from .sample import SampleValue


class Issue(BaseModel):
    """One triggered rule, rendered for a specific sample."""

    model_config = ConfigDict(frozen=True)

    rule: str = Field(..., description="Name of the rule that triggered")
    sample: str = Field(..., description="Name of the sample the rule targeted")
    severity: Severity = Field(..., description="Severity of the rule")
    category: str = Field(default="general", description="Rule category (gpu, disk, ...)")
    description: str = Field(..., description="Rendered issue text")
    recommendation: str = Field(default="", description="Rendered recommendation text")
    value: Optional[SampleValue] = Field(default=None, description="Observed value (None if absent)")
    limit: Optional[SampleValue] = Field(default=None, description="Configured limit")


class Diagnosis(BaseModel):
    """Aggregate result of evaluating all rules against all samples.

    ``overall_status`` always equals the highest severity among ``issues``,
    or HEALTHY when nothing triggered. ``notes`` describe data sources that
    were unavailable; they are informational and never affect the status.
    """

    model_config = ConfigDict(frozen=True)

    overall_status: Severity = Field(default=Severity.HEALTHY)
    issues: List[Issue] = Field(default_factory=list)
    notes: List[str] = Field(default_factory=list)
    rules_evaluated: int = Field(default=0, description="Rules that found at least one sample")
    rules_skipped: int = Field(default=0, description="Rules with no matching sample")
    samples_evaluated: int = Field(default=0)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def recommendations(self) -> List[str]:
        """One recommendation per issue, in issue order (may repeat)."""
        return [issue.recommendation for issue in self.issues]

    @property
    def is_healthy(self) -> bool:
        """True when no rule triggered."""
        return self.overall_status == Severity.HEALTHY

    @property
    def has_reduced_visibility(self) -> bool:
        """True when at least one probe failed to provide data."""
        return len(self.notes) > 0

    def issues_with_severity(self, severity: Severity) -> List[Issue]:
        """Issues of exactly ``severity``, in evaluation order."""
        return [issue for issue in self.issues if issue.severity == severity]
