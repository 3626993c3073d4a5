"""Threshold rule definition and rule file loading."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Union

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from hostdoctor.models.enums import Comparator, Severity
from hostdoctor.models.sample import SampleValue


class RuleConfigError(Exception):
    """Raised when a rule table cannot be loaded or is invalid."""

    pass


class ThresholdRule(BaseModel):
    """Definition of a single threshold rule.

    A rule targets samples by name, compares their value (or their drift
    from a baseline) against ``limit`` and, when the comparison holds,
    produces an issue with the given severity.

    Attributes:
        name: Unique rule identifier for debugging and reports
        sample: Name of the sample this rule checks
        comparator: One of >, <, >=, <=, ==, !=, contains, absent
        limit: Value compared against (unused for 'absent')
        severity: notice, warning or critical
        issue: Issue text template with {placeholders}
        recommendation: Recommendation text template with {placeholders}
        baseline: Optional baseline key; compares baseline - value instead
        category: Grouping for reports (gpu, disk, docker, ...)
        group: Optional escalation group; for each sample only the first
            triggering rule of a group (in table order) yields an issue

    Template placeholders: {name} {value} {unit} {limit} {source}
    {drift} {rule} plus any key of the sample's ``extra`` mapping.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    name: str
    sample: str
    comparator: Comparator = Field(alias="cmp")
    limit: Optional[SampleValue] = None
    severity: Severity
    issue: str
    recommendation: str = ""
    baseline: Optional[str] = None
    category: str = "general"
    group: Optional[str] = None

    @field_validator("severity")
    @classmethod
    def validate_severity(cls, v: Severity) -> Severity:
        """A rule cannot trigger 'healthy'."""
        if v == Severity.HEALTHY:
            raise ValueError("Rule severity must be notice, warning or critical")
        return v

    @field_validator("name", "sample")
    @classmethod
    def validate_identifier(cls, v: str) -> str:
        """Rule and sample names must be non-empty."""
        if not v or not v.strip():
            raise ValueError("cannot be empty")
        return v.strip()

    @model_validator(mode="after")
    def validate_limit(self) -> "ThresholdRule":
        """Every comparator except 'absent' needs a limit."""
        if self.comparator != Comparator.ABSENT and self.limit is None:
            raise ValueError(f"Rule '{self.name}' requires a limit for comparator '{self.comparator.value}'")
        return self


def build_rules(entries: Iterable[Dict[str, Any]]) -> List[ThresholdRule]:
    """Validate a list of plain dicts into ThresholdRules, preserving order.

    Raises:
        RuleConfigError: If an entry is invalid or rule names repeat.
    """
    rules: List[ThresholdRule] = []
    seen: Dict[str, int] = {}
    for index, entry in enumerate(entries):
        if not isinstance(entry, dict):
            raise RuleConfigError(f"Rule #{index + 1} must be a mapping, got {type(entry).__name__}")
        try:
            rule = ThresholdRule.model_validate(entry)
        except ValidationError as e:
            problems = "; ".join(
                f"{'.'.join(str(p) for p in err.get('loc', [])) or 'rule'}: {err.get('msg')}"
                for err in e.errors()
            )
            label = entry.get("name", f"#{index + 1}")
            raise RuleConfigError(f"Invalid rule '{label}': {problems}") from e
        if rule.name in seen:
            raise RuleConfigError(
                f"Duplicate rule name '{rule.name}' (entries #{seen[rule.name] + 1} and #{index + 1})"
            )
        seen[rule.name] = index
        rules.append(rule)
    return rules


def load_rules(path: Union[str, Path]) -> List[ThresholdRule]:
    """Load an ordered rule table from a YAML file.

    The file holds either a list of rules or a mapping with a ``rules`` key.

    Example file::

        rules:
          - name: gpu_hot
            sample: gpu.temperature
            cmp: ">"
            limit: 85
            severity: warning
            issue: "High temperature ({value}{unit})"
            recommendation: "Check case airflow"

    Raises:
        RuleConfigError: If the file is missing, unreadable or invalid.
    """
    path = Path(path)
    try:
        with open(path) as f:
            data = yaml.safe_load(f)
    except FileNotFoundError:
        raise RuleConfigError(f"Rules file not found: {path}")
    except PermissionError:
        raise RuleConfigError(f"Cannot read rules file {path}: permission denied")
    except yaml.YAMLError as e:
        raise RuleConfigError(f"Invalid YAML in rules file {path}: {e}")

    if data is None:
        return []
    if isinstance(data, dict):
        data = data.get("rules", [])
    if not isinstance(data, list):
        raise RuleConfigError(f"Rules file {path} must contain a list of rules")
    return build_rules(data)
