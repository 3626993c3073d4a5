"""Rule evaluation for collected samples."""

from hostdoctor.analysis.evaluator import Evaluator, compare, evaluate
from hostdoctor.analysis.rules import (
    DEFAULT_RULES,
    RuleConfigError,
    ThresholdRule,
    build_rules,
    get_rules,
    load_rules,
)

__all__ = [
    "DEFAULT_RULES",
    "Evaluator",
    "RuleConfigError",
    "ThresholdRule",
    "build_rules",
    "compare",
    "evaluate",
    "get_rules",
    "load_rules",
]
