"""Host resource rules: memory, swap, CPU load, uptime and disk space."""

from typing import List

from hostdoctor.analysis.rules.base import ThresholdRule
from hostdoctor.models.enums import Comparator, Severity


MEMORY_RULES: List[ThresholdRule] = [
    ThresholdRule(
        name="memory_pressure",
        sample="mem.usedPct",
        comparator=Comparator.GT,
        limit=90,
        severity=Severity.WARNING,
        category="memory",
        issue="Memory usage is {value}{unit}",
        recommendation=(
            "Close memory-heavy applications or containers. If this is "
            "persistent, add RAM or limit WSL/VM memory allocation."
        ),
    ),
    ThresholdRule(
        name="swap_in_use",
        sample="swap.usedPct",
        comparator=Comparator.GT,
        limit=40,
        severity=Severity.NOTICE,
        category="memory",
        issue="Swap is {value}{unit} used",
        recommendation="Heavy swapping slows the machine; free memory or add RAM.",
    ),
]


SYSTEM_LOAD_RULES: List[ThresholdRule] = [
    ThresholdRule(
        name="cpu_overloaded",
        sample="load.perCore",
        comparator=Comparator.GT,
        limit=1.5,
        severity=Severity.WARNING,
        category="cpu",
        issue="1-minute load is {value} per core",
        recommendation="Look for runaway builds, containers or VMs with 'top' and stop what you don't need.",
    ),
    ThresholdRule(
        name="long_uptime",
        sample="uptime.days",
        comparator=Comparator.GT,
        limit=30,
        severity=Severity.NOTICE,
        category="system",
        issue="System has been up for {value} days",
        recommendation="Reboot during a quiet moment to apply kernel and library updates.",
    ),
]


DISK_RULES: List[ThresholdRule] = [
    ThresholdRule(
        name="disk_full",
        sample="disk.usedPct",
        comparator=Comparator.GE,
        limit=95,
        severity=Severity.CRITICAL,
        category="disk",
        group="disk_usage",
        issue="Filesystem {mount} is {value}{unit} full",
        recommendation=(
            "Free space now: prune Docker ('docker system prune'), vacuum the "
            "journal ('journalctl --vacuum-time=2d') and clear package caches."
        ),
    ),
    # Matches the 80% threshold of the disk usage alert cron job
    ThresholdRule(
        name="disk_usage_high",
        sample="disk.usedPct",
        comparator=Comparator.GT,
        limit=80,
        severity=Severity.WARNING,
        category="disk",
        group="disk_usage",
        issue="Disk usage is above {limit}{unit} on {mount}: {value}{unit}",
        recommendation="Remove old logs, caches and unused images before the filesystem fills up.",
    ),
]
