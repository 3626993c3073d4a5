"""Evaluator that applies threshold rules to collected samples.

Evaluation is a single stateless pass: rules run in table order, each rule
is applied to every sample with a matching name, and every triggering
sample yields one Issue. Nothing here raises; a rule that cannot be
evaluated for any reason is treated as not triggered.
"""

from datetime import date, datetime
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Set, Tuple

import structlog

from hostdoctor.analysis.rules.base import ThresholdRule
from hostdoctor.models.diagnosis import Diagnosis, Issue
from hostdoctor.models.enums import Comparator, highest_severity
from hostdoctor.models.sample import ProbeFailure, Sample, SampleValue
from hostdoctor.utils.timestamps import days_between

logger = structlog.get_logger(__name__)

_ORDERING = {
    Comparator.GT: lambda a, b: a > b,
    Comparator.LT: lambda a, b: a < b,
    Comparator.GE: lambda a, b: a >= b,
    Comparator.LE: lambda a, b: a <= b,
}


class _SafeDict(dict):
    """Template context that renders unknown placeholders as 'Unknown'."""

    def __missing__(self, key: str) -> str:
        logger.debug("template_missing_key", key=key)
        return "Unknown"


def _as_number(value: Any) -> Optional[float]:
    """Coerce a sample value or limit to float, or None if not numeric."""
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value.strip())
        except ValueError:
            return None
    return None


def compare(comparator: Comparator, observed: Any, limit: Any) -> bool:
    """Apply ``comparator`` to an observed value and a limit.

    Ordering comparators need both sides numeric (numeric strings are
    accepted). Equality compares numerically when both sides are numbers,
    booleans by identity, and anything else as stripped strings. Values
    that cannot be compared never trigger.
    """
    if comparator in _ORDERING:
        left = _as_number(observed)
        right = _as_number(limit)
        if left is None or right is None:
            return False
        return _ORDERING[comparator](left, right)

    if comparator in (Comparator.EQ, Comparator.NE):
        equal = _values_equal(observed, limit)
        return equal if comparator == Comparator.EQ else not equal

    if comparator == Comparator.CONTAINS:
        if observed is None or limit is None:
            return False
        return str(limit).lower() in str(observed).lower()

    return False


def _values_equal(observed: Any, limit: Any) -> bool:
    if isinstance(observed, bool) or isinstance(limit, bool):
        return isinstance(observed, bool) and isinstance(limit, bool) and observed is limit
    left = _as_number(observed)
    right = _as_number(limit)
    if left is not None and right is not None:
        return left == right
    return str(observed).strip() == str(limit).strip()


def _drift(observed: SampleValue, baseline: Any) -> float:
    """Compute ``baseline - observed``; in days for dates and date strings."""
    if isinstance(baseline, (datetime, date)):
        return days_between(observed, baseline)
    left = _as_number(observed)
    right = _as_number(baseline)
    if left is None or right is None:
        raise ValueError(f"Cannot compute drift between {observed!r} and {baseline!r}")
    return right - left


class Evaluator:
    """Applies an ordered rule table to samples and produces a Diagnosis.

    Usage:
        evaluator = Evaluator(DEFAULT_RULES, baselines={"now": now})
        diagnosis = evaluator.evaluate(samples, failures=result.failures)
    """

    def __init__(
        self,
        rules: Iterable[ThresholdRule],
        baselines: Optional[Mapping[str, Any]] = None,
    ) -> None:
        """Initialize the evaluator.

        Args:
            rules: Ordered rule table. Order determines issue order.
            baselines: Reference values for drift rules, keyed by the
                rule's ``baseline`` name (e.g. {"now": datetime}).
        """
        self._rules: List[ThresholdRule] = list(rules)
        self._baselines: Dict[str, Any] = dict(baselines or {})

    @property
    def rules(self) -> List[ThresholdRule]:
        """The rule table in evaluation order."""
        return list(self._rules)

    @property
    def baselines(self) -> Dict[str, Any]:
        """Copy of the configured baselines."""
        return dict(self._baselines)

    def evaluate(
        self,
        samples: Sequence[Sample],
        failures: Sequence[ProbeFailure] = (),
    ) -> Diagnosis:
        """Evaluate all rules against the samples.

        Args:
            samples: Collected samples, in collection order.
            failures: Probe failures; rendered as informational notes.

        Returns:
            Diagnosis with status, issues, recommendations and notes.
        """
        by_name: Dict[str, List[Tuple[int, Sample]]] = {}
        for index, sample in enumerate(samples):
            by_name.setdefault(sample.name, []).append((index, sample))

        issues: List[Issue] = []
        consumed: Set[Tuple[str, int]] = set()
        rules_evaluated = 0
        rules_skipped = 0

        for rule in self._rules:
            matches = by_name.get(rule.sample, [])

            if rule.comparator == Comparator.ABSENT:
                rules_evaluated += 1
                if not matches:
                    issues.append(self._absent_issue(rule))
                continue

            if not matches:
                rules_skipped += 1
                logger.debug("rule_skipped", rule=rule.name, sample=rule.sample)
                continue

            rules_evaluated += 1
            for index, sample in matches:
                if rule.group and (rule.group, index) in consumed:
                    continue
                # a bad sample only costs its own result
                try:
                    issue = self._evaluate_sample(rule, sample)
                except Exception as e:
                    logger.warning(
                        "rule_evaluation_error",
                        rule=rule.name,
                        sample_index=index,
                        error=str(e),
                        error_type=type(e).__name__,
                    )
                    continue
                if issue is None:
                    continue
                issues.append(issue)
                if rule.group:
                    consumed.add((rule.group, index))

        notes = [failure.note for failure in failures]
        diagnosis = Diagnosis(
            overall_status=highest_severity(issue.severity for issue in issues),
            issues=issues,
            notes=notes,
            rules_evaluated=rules_evaluated,
            rules_skipped=rules_skipped,
            samples_evaluated=len(samples),
        )

        logger.info(
            "evaluation_complete",
            status=diagnosis.overall_status.value,
            issues=len(issues),
            rules_evaluated=rules_evaluated,
            rules_skipped=rules_skipped,
            notes=len(notes),
        )
        return diagnosis

    def _evaluate_sample(self, rule: ThresholdRule, sample: Sample) -> Optional[Issue]:
        """Return an Issue if ``rule`` triggers for ``sample``."""
        drift: Optional[float] = None
        if rule.baseline:
            if rule.baseline not in self._baselines:
                logger.debug("baseline_missing", rule=rule.name, baseline=rule.baseline)
                return None
            try:
                drift = _drift(sample.value, self._baselines[rule.baseline])
            except (ValueError, OverflowError, OSError) as e:
                logger.debug("drift_unavailable", rule=rule.name, error=str(e))
                return None
            observed: Any = drift
        else:
            observed = sample.value

        if not compare(rule.comparator, observed, rule.limit):
            return None

        context = self._build_template_context(rule, sample, drift)
        return Issue(
            rule=rule.name,
            sample=sample.name,
            severity=rule.severity,
            category=rule.category,
            description=self._safe_format(rule.issue, context),
            recommendation=self._safe_format(rule.recommendation, context),
            value=sample.value,
            limit=rule.limit,
        )

    def _absent_issue(self, rule: ThresholdRule) -> Issue:
        context: Dict[str, Any] = {
            "name": rule.sample,
            "value": "Unknown",
            "unit": "",
            "limit": rule.limit,
            "source": "Unknown",
            "rule": rule.name,
            "drift": "Unknown",
        }
        return Issue(
            rule=rule.name,
            sample=rule.sample,
            severity=rule.severity,
            category=rule.category,
            description=self._safe_format(rule.issue, context),
            recommendation=self._safe_format(rule.recommendation, context),
            value=None,
            limit=rule.limit,
        )

    def _build_template_context(
        self,
        rule: ThresholdRule,
        sample: Sample,
        drift: Optional[float],
    ) -> Dict[str, Any]:
        context: Dict[str, Any] = dict(sample.extra)
        context.update(
            {
                "name": sample.name,
                "value": sample.value,
                "unit": sample.unit or "",
                "limit": rule.limit,
                "source": sample.source,
                "rule": rule.name,
                "drift": round(drift, 1) if drift is not None else "Unknown",
            }
        )
        return context

    def _safe_format(self, template: str, context: Dict[str, Any]) -> str:
        """Format a template, replacing missing keys with 'Unknown'."""
        try:
            return template.format_map(_SafeDict(context))
        except Exception as e:
            logger.warning("template_format_error", template=template[:50], error=str(e))
            return template


def evaluate(
    samples: Sequence[Sample],
    rules: Iterable[ThresholdRule],
    baselines: Optional[Mapping[str, Any]] = None,
    failures: Sequence[ProbeFailure] = (),
) -> Diagnosis:
    """Evaluate ``rules`` against ``samples`` in one call.

    Convenience wrapper around Evaluator for one-off evaluations.
    """
    return Evaluator(rules, baselines=baselines).evaluate(samples, failures=failures)
