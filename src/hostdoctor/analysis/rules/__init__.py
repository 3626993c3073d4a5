"""Rule definitions for the evaluator.

Aggregates all category rules into the default ordered rule table.
"""

from typing import List, Optional, Union
from pathlib import Path

from hostdoctor.analysis.rules.base import (
    RuleConfigError,
    ThresholdRule,
    build_rules,
    load_rules,
)
from hostdoctor.analysis.rules.gpu import GPU_RULES
from hostdoctor.analysis.rules.host import DISK_RULES, MEMORY_RULES, SYSTEM_LOAD_RULES
from hostdoctor.analysis.rules.maintenance import (
    DOCKER_RULES,
    SYSTEM_MAINTENANCE_RULES,
    WSL_RULES,
)


# Table order is evaluation order, and therefore issue order
DEFAULT_RULES: List[ThresholdRule] = (
    GPU_RULES
    + MEMORY_RULES
    + SYSTEM_LOAD_RULES
    + DISK_RULES
    + DOCKER_RULES
    + SYSTEM_MAINTENANCE_RULES
    + WSL_RULES
)


def get_rules(path: Optional[Union[str, Path]] = None) -> List[ThresholdRule]:
    """Return the rule table to evaluate.

    Args:
        path: Optional YAML rules file. When given it replaces the defaults.

    Returns:
        Ordered list of ThresholdRules.

    Raises:
        RuleConfigError: If the rules file is invalid.
    """
    if path:
        return load_rules(path)
    return list(DEFAULT_RULES)


__all__ = [
    "DEFAULT_RULES",
    "DISK_RULES",
    "DOCKER_RULES",
    "GPU_RULES",
    "MEMORY_RULES",
    "RuleConfigError",
    "SYSTEM_LOAD_RULES",
    "SYSTEM_MAINTENANCE_RULES",
    "ThresholdRule",
    "WSL_RULES",
    "build_rules",
    "get_rules",
    "load_rules",
]
