"""GPU category rules.

Rules for discrete GPU health: temperature, memory pressure, fan speed and
driver age. Hosts without a GPU simply produce no gpu.* samples and these
rules are skipped.
"""

from typing import List

from hostdoctor.analysis.rules.base import ThresholdRule
from hostdoctor.models.enums import Comparator, Severity


GPU_RULES: List[ThresholdRule] = [
    # CRITICAL: thermal throttling / damage range
    ThresholdRule(
        name="gpu_temperature_critical",
        sample="gpu.temperature",
        comparator=Comparator.GT,
        limit=95,
        severity=Severity.CRITICAL,
        category="gpu",
        group="gpu_temperature",
        issue="GPU {gpu_index} ({gpu_name}) is at {value}{unit}, above the {limit}{unit} throttling point",
        recommendation=(
            "Reduce GPU load immediately, clean dust from heatsink and fans, "
            "and verify case airflow. Sustained operation at this temperature "
            "can damage the card."
        ),
    ),
    # WARNING: hot but not yet throttling
    ThresholdRule(
        name="gpu_temperature_high",
        sample="gpu.temperature",
        comparator=Comparator.GT,
        limit=85,
        severity=Severity.WARNING,
        category="gpu",
        group="gpu_temperature",
        issue="High GPU temperature on GPU {gpu_index} ({gpu_name}): {value}{unit}",
        recommendation=(
            "Check fan curves and case ventilation. Consider lowering the "
            "power limit with 'nvidia-smi -pl' during long workloads."
        ),
    ),
    ThresholdRule(
        name="gpu_memory_high",
        sample="gpu.memUsedPct",
        comparator=Comparator.GE,
        limit=95,
        severity=Severity.WARNING,
        category="gpu",
        issue="GPU {gpu_index} memory is {value}{unit} used",
        recommendation=(
            "Close idle CUDA processes ('nvidia-smi' lists them) or reduce "
            "batch sizes to avoid out-of-memory failures."
        ),
    ),
    ThresholdRule(
        name="gpu_fan_saturated",
        sample="gpu.fan.pct",
        comparator=Comparator.GE,
        limit=90,
        severity=Severity.NOTICE,
        category="gpu",
        issue="GPU {gpu_index} fan running at {value}{unit}",
        recommendation="Fans near maximum usually mean poor airflow or a dusty heatsink.",
    ),
    # NOTICE: driver age drift, needs a "now" baseline and a gpu.driverDate sample
    ThresholdRule(
        name="gpu_driver_outdated",
        sample="gpu.driverDate",
        comparator=Comparator.GT,
        limit=365,
        baseline="now",
        severity=Severity.NOTICE,
        category="gpu",
        issue="GPU driver is {drift} days old (released {value})",
        recommendation="Update the GPU driver from the vendor or your distribution's driver manager.",
    ),
]
