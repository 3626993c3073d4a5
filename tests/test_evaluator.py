"""Tests for the threshold evaluator."""

from datetime import datetime, timezone

import pytest

from hostdoctor.analysis import DEFAULT_RULES, Evaluator, ThresholdRule, compare, evaluate
from hostdoctor.models import Comparator, FailureKind, ProbeFailure, Severity


def rule(name, sample, cmp, limit=None, severity=Severity.WARNING, issue=None, **kwargs):
    """Build a rule with short defaults."""
    return ThresholdRule(
        name=name,
        sample=sample,
        comparator=Comparator(cmp),
        limit=limit,
        severity=severity,
        issue=issue or f"{name} triggered",
        recommendation=kwargs.pop("recommendation", f"fix {name}"),
        **kwargs,
    )


class TestCompare:
    """Tests for the comparison function."""

    @pytest.mark.parametrize(
        "cmp,observed,limit,expected",
        [
            (">", 90, 85, True),
            (">", 85, 85, False),
            (">=", 85, 85, True),
            ("<", 10, 20, True),
            ("<=", 20, 20, True),
            ("<", 30, 20, False),
        ],
    )
    def test_ordering(self, cmp, observed, limit, expected):
        """Numeric ordering comparators."""
        assert compare(Comparator(cmp), observed, limit) is expected

    def test_numeric_strings_accepted(self):
        """Numeric strings compare numerically."""
        assert compare(Comparator.GT, "90.5", 85)

    def test_non_numeric_never_triggers_ordering(self):
        """Non-numeric values do not satisfy ordering comparators."""
        assert not compare(Comparator.GT, "hot", 85)
        assert not compare(Comparator.LT, "hot", 85)

    def test_bool_not_numeric_for_ordering(self):
        """Booleans are not treated as 0/1."""
        assert not compare(Comparator.GT, True, 0)

    def test_equality(self):
        """Equality across types."""
        assert compare(Comparator.EQ, 1, 1.0)
        assert compare(Comparator.EQ, "WSL2", " WSL2 ")
        assert compare(Comparator.EQ, True, True)
        assert not compare(Comparator.EQ, True, 1)
        assert compare(Comparator.NE, 2, 1)
        assert not compare(Comparator.NE, 1, 1)

    def test_contains_case_insensitive(self):
        """contains is a case-insensitive substring test."""
        assert compare(Comparator.CONTAINS, "5.15.90.1-microsoft-standard-WSL2", "wsl2")
        assert not compare(Comparator.CONTAINS, "generic", "wsl")


class TestEvaluatorScenarios:
    """Reference scenarios."""

    def test_gpu_temperature_warning(self, make_sample):
        """A single hot GPU sample yields a warning."""
        samples = [make_sample("gpu.temperature", 90)]
        rules = [rule("gpu.temperature", "gpu.temperature", ">", 85, issue="High temperature")]

        diagnosis = evaluate(samples, rules)

        assert diagnosis.overall_status == Severity.WARNING
        assert [i.description for i in diagnosis.issues] == ["High temperature"]
        assert len(diagnosis.recommendations) == 1

    def test_only_memory_rule_triggers(self, make_sample):
        """Fan rule is evaluated but does not trigger."""
        samples = [make_sample("mem.usedPct", 95), make_sample("fan.pct", 50)]
        rules = [
            rule("mem", "mem.usedPct", ">", 90),
            rule("fan", "fan.pct", ">", 80),
        ]

        diagnosis = evaluate(samples, rules)

        assert len(diagnosis.issues) == 1
        assert diagnosis.issues[0].rule == "mem"
        assert diagnosis.rules_evaluated == 2
        assert diagnosis.rules_skipped == 0

    def test_missing_gpu_probe_is_not_critical(self, make_sample):
        """An unavailable probe becomes a note and never raises the status."""
        samples = [make_sample("disk.usedPct", 50, "%", mount="/")]
        failures = [
            ProbeFailure(probe="gpu", kind=FailureKind.PROBE_UNAVAILABLE, message="nvidia-smi not found")
        ]

        diagnosis = Evaluator(DEFAULT_RULES).evaluate(samples, failures)

        assert diagnosis.overall_status == Severity.HEALTHY
        assert diagnosis.issues == []
        assert diagnosis.notes == ["gpu data unavailable: nvidia-smi not found"]
        assert diagnosis.has_reduced_visibility

    def test_missing_probe_with_other_issue(self, make_sample):
        """Other samples are still evaluated normally."""
        samples = [make_sample("disk.usedPct", 85, "%", mount="/")]
        failures = [ProbeFailure(probe="gpu", kind=FailureKind.PROBE_UNAVAILABLE, message="x")]

        diagnosis = Evaluator(DEFAULT_RULES).evaluate(samples, failures)

        assert diagnosis.overall_status == Severity.WARNING
        assert [i.rule for i in diagnosis.issues] == ["disk_usage_high"]


class TestEvaluatorProperties:
    """Properties that hold for any input."""

    RULES = [
        rule("notice", "a", ">", 10, severity=Severity.NOTICE),
        rule("warning", "b", ">", 10, severity=Severity.WARNING),
        rule("critical", "c", ">", 10, severity=Severity.CRITICAL),
    ]

    def test_status_is_max_severity(self, make_sample):
        """Overall status equals the highest triggered severity."""
        samples = [make_sample("a", 20), make_sample("b", 20), make_sample("c", 5)]
        diagnosis = evaluate(samples, self.RULES)
        assert diagnosis.overall_status == Severity.WARNING

    def test_healthy_when_nothing_triggers(self, make_sample):
        """No triggered rules means healthy."""
        samples = [make_sample("a", 1), make_sample("b", 1), make_sample("c", 1)]
        diagnosis = evaluate(samples, self.RULES)
        assert diagnosis.overall_status == Severity.HEALTHY
        assert diagnosis.issues == []

    def test_idempotent(self, make_sample):
        """Evaluating the same input twice yields identical diagnoses."""
        samples = [make_sample("a", 20), make_sample("c", 20)]
        evaluator = Evaluator(self.RULES)
        assert evaluator.evaluate(samples) == evaluator.evaluate(samples)

    def test_monotonic_escalation(self, make_sample):
        """Adding a sample triggering a higher severity raises the status."""
        samples = [make_sample("a", 20)]
        assert evaluate(samples, self.RULES).overall_status == Severity.NOTICE

        samples.append(make_sample("c", 20))
        assert evaluate(samples, self.RULES).overall_status == Severity.CRITICAL

    def test_removing_sample_preserves_other_order(self, make_sample):
        """Removing a triggering sample drops only its issue."""
        all_samples = [make_sample("a", 20), make_sample("b", 20), make_sample("c", 20)]
        full = evaluate(all_samples, self.RULES)
        assert [i.rule for i in full.issues] == ["notice", "warning", "critical"]

        reduced = evaluate([all_samples[0], all_samples[2]], self.RULES)
        assert [i.rule for i in reduced.issues] == ["notice", "critical"]

    def test_empty_samples_all_rules_skipped(self):
        """No samples: healthy, no issues, every rule skipped."""
        diagnosis = Evaluator(DEFAULT_RULES).evaluate([])
        assert diagnosis.overall_status == Severity.HEALTHY
        assert diagnosis.issues == []
        assert diagnosis.rules_evaluated == 0
        assert diagnosis.rules_skipped == len(DEFAULT_RULES)

    def test_issue_order_follows_rule_table(self, make_sample):
        """Issues appear in rule order, not sample order."""
        samples = [make_sample("c", 20), make_sample("a", 20)]
        diagnosis = evaluate(samples, self.RULES)
        assert [i.rule for i in diagnosis.issues] == ["notice", "critical"]


class TestEvaluatorMatching:
    """Tests for how rules match samples."""

    def test_rule_applies_to_every_matching_sample(self, make_sample):
        """Two mounts over the threshold give two issues."""
        samples = [
            make_sample("disk.usedPct", 85, "%", mount="/"),
            make_sample("disk.usedPct", 40, "%", mount="/boot"),
            make_sample("disk.usedPct", 90, "%", mount="/data"),
        ]
        rules = [rule("disk", "disk.usedPct", ">", 80, issue="{mount} at {value}{unit}")]

        diagnosis = evaluate(samples, rules)

        assert [i.description for i in diagnosis.issues] == ["/ at 85%", "/data at 90%"]

    def test_group_reports_first_triggering_rule_only(self, make_sample):
        """Escalation groups avoid a warning next to a critical."""
        samples = [
            make_sample("gpu.temperature", 97, "C", gpu_index=0),
            make_sample("gpu.temperature", 88, "C", gpu_index=1),
        ]
        rules = [
            rule("hot_critical", "gpu.temperature", ">", 95, severity=Severity.CRITICAL, group="temp"),
            rule("hot_warning", "gpu.temperature", ">", 85, severity=Severity.WARNING, group="temp"),
        ]

        diagnosis = evaluate(samples, rules)

        assert [(i.rule, i.value) for i in diagnosis.issues] == [
            ("hot_critical", 97),
            ("hot_warning", 88),
        ]
        assert diagnosis.overall_status == Severity.CRITICAL

    def test_rules_without_group_all_fire(self, make_sample):
        """Ungrouped rules on the same sample each produce an issue."""
        samples = [make_sample("x", 100)]
        rules = [rule("one", "x", ">", 50), rule("two", "x", ">", 10)]
        assert len(evaluate(samples, rules).issues) == 2

    def test_type_mismatch_does_not_trigger(self, make_sample):
        """A string value against a numeric threshold is simply not triggered."""
        samples = [make_sample("gpu.temperature", "[Not Supported]")]
        rules = [rule("t", "gpu.temperature", ">", 85)]
        diagnosis = evaluate(samples, rules)
        assert diagnosis.issues == []
        assert diagnosis.rules_evaluated == 1

    def test_bool_equality_rule(self, make_sample):
        """Boolean samples match == True rules."""
        samples = [make_sample("system.rebootRequired", True)]
        rules = [rule("reboot", "system.rebootRequired", "==", True, severity=Severity.NOTICE)]
        assert evaluate(samples, rules).overall_status == Severity.NOTICE

    def test_absent_rule(self, make_sample):
        """absent triggers only when no sample carries the name."""
        rules = [
            rule(
                "no_gpu",
                "gpu.temperature",
                "absent",
                severity=Severity.NOTICE,
                issue="No reading for {name} (value: {value})",
            )
        ]
        missing = evaluate([make_sample("disk.usedPct", 10)], rules)
        assert [i.description for i in missing.issues] == ["No reading for gpu.temperature (value: Unknown)"]
        assert missing.issues[0].value is None

        present = evaluate([make_sample("gpu.temperature", 50)], rules)
        assert present.issues == []


class TestEvaluatorTemplates:
    """Tests for issue and recommendation rendering."""

    def test_placeholders_from_sample(self, make_sample):
        """value, unit, limit, name, source and extra fields are available."""
        samples = [make_sample("gpu.temperature", 90, "C", source="gpu", gpu_index=0)]
        rules = [
            rule(
                "t",
                "gpu.temperature",
                ">",
                85,
                issue="{name}={value}{unit} > {limit} on GPU {gpu_index} via {source}",
                recommendation="rule {rule}",
            )
        ]
        issue = evaluate(samples, rules).issues[0]
        assert issue.description == "gpu.temperature=90C > 85 on GPU 0 via gpu"
        assert issue.recommendation == "rule t"

    def test_unknown_placeholder_renders_unknown(self, make_sample):
        """Missing template keys do not break rendering."""
        samples = [make_sample("x", 100)]
        rules = [rule("r", "x", ">", 1, issue="mount {mount}")]
        assert evaluate(samples, rules).issues[0].description == "mount Unknown"

    def test_broken_template_kept_verbatim(self, make_sample):
        """A malformed template is returned unformatted."""
        samples = [make_sample("x", 100)]
        rules = [rule("r", "x", ">", 1, issue="broken {")]
        assert evaluate(samples, rules).issues[0].description == "broken {"


class TestEvaluatorDrift:
    """Tests for baseline drift rules."""

    NOW = datetime(2026, 3, 1, tzinfo=timezone.utc)

    def _driver_rule(self):
        return rule(
            "driver_old",
            "gpu.driverDate",
            ">",
            365,
            severity=Severity.NOTICE,
            baseline="now",
            issue="driver is {drift} days old",
        )

    def test_date_drift_triggers(self, make_sample):
        """A driver date more than a year old triggers."""
        samples = [make_sample("gpu.driverDate", "2024-06-01")]
        diagnosis = evaluate(samples, [self._driver_rule()], baselines={"now": self.NOW})
        assert diagnosis.overall_status == Severity.NOTICE
        assert diagnosis.issues[0].description == "driver is 638.0 days old"

    def test_recent_date_does_not_trigger(self, make_sample):
        """A recent driver is fine."""
        samples = [make_sample("gpu.driverDate", "2026-01-15")]
        diagnosis = evaluate(samples, [self._driver_rule()], baselines={"now": self.NOW})
        assert diagnosis.issues == []

    def test_missing_baseline_does_not_trigger(self, make_sample):
        """Without the baseline the rule cannot trigger."""
        samples = [make_sample("gpu.driverDate", "2020-01-01")]
        diagnosis = evaluate(samples, [self._driver_rule()])
        assert diagnosis.issues == []
        assert diagnosis.rules_evaluated == 1

    def test_unparseable_date_does_not_trigger(self, make_sample):
        """Garbage dates are not triggered."""
        samples = [make_sample("gpu.driverDate", "not a date")]
        diagnosis = evaluate(samples, [self._driver_rule()], baselines={"now": self.NOW})
        assert diagnosis.issues == []

    def test_out_of_range_date_does_not_hide_later_samples(self, make_sample):
        """An epoch value too large for datetime skips only that sample."""
        samples = [
            make_sample("gpu.driverDate", 1e20, gpu_index=0),
            make_sample("gpu.driverDate", "2020-01-01", gpu_index=1),
        ]
        diagnosis = evaluate(samples, [self._driver_rule()], baselines={"now": self.NOW})
        assert len(diagnosis.issues) == 1
        assert diagnosis.overall_status == Severity.NOTICE

    def test_numeric_drift(self, make_sample):
        """Numeric baselines compare baseline - value."""
        samples = [make_sample("disk.freeGb", 40)]
        rules = [rule("shrinking", "disk.freeGb", ">", 50, baseline="yesterday", issue="lost {drift} GB")]
        diagnosis = evaluate(samples, rules, baselines={"yesterday": 100})
        assert diagnosis.issues[0].description == "lost 60.0 GB"


class TestEvaluatorRobustness:
    """The evaluator never raises on odd input."""

    def test_accessors_return_copies(self):
        """Rules and baselines cannot be mutated through accessors."""
        evaluator = Evaluator(DEFAULT_RULES, baselines={"now": 1})
        evaluator.rules.clear()
        evaluator.baselines.clear()
        assert len(evaluator.rules) == len(DEFAULT_RULES)
        assert evaluator.baselines == {"now": 1}

    def test_default_rules_against_mixed_samples(self, make_sample):
        """Default rules handle strings, bools and numbers without raising."""
        samples = [
            make_sample("gpu.temperature", 99.0, "C", gpu_index=0, gpu_name="RTX"),
            make_sample("gpu.driverVersion", "535.104"),
            make_sample("system.rebootRequired", True),
            make_sample("wsl.version", 1),
            make_sample("mem.usedPct", "n/a"),
        ]
        diagnosis = Evaluator(DEFAULT_RULES, baselines={"now": datetime.now(timezone.utc)}).evaluate(samples)
        rules = [i.rule for i in diagnosis.issues]
        assert "gpu_temperature_critical" in rules
        assert "gpu_temperature_high" not in rules
        assert "reboot_required" in rules
        assert "wsl_version_1" in rules
        assert diagnosis.overall_status == Severity.CRITICAL
