"""Host resource probes backed by psutil.

Percentages and per-core load are computed here, before evaluation, so
rules only compare ready-made values.
"""

from __future__ import annotations

import os
import time
from typing import List, Optional, Sequence

import psutil

from hostdoctor.collector.base import BaseProbe
from hostdoctor.collector.exceptions import ProbeUnavailable
from hostdoctor.models.sample import Sample
from hostdoctor.utils.units import bytes_to_gb


class SystemProbe(BaseProbe):
    """CPU, memory, swap, load and uptime.

    Samples: cpu.pct, mem.usedPct, swap.usedPct, load.perCore, uptime.days
    """

    def __init__(self, name: str = "system", cpu_interval: float = 0.3) -> None:
        super().__init__(name)
        self.cpu_interval = cpu_interval

    def collect(self) -> List[Sample]:
        try:
            cpu_percent = psutil.cpu_percent(interval=self.cpu_interval)
            memory = psutil.virtual_memory()
            swap = psutil.swap_memory()
            boot_time = psutil.boot_time()
            cpu_count = psutil.cpu_count() or 1
        except psutil.AccessDenied as e:
            raise ProbeUnavailable(self.name, f"permission denied: {e}", cause=e)

        samples = [
            self.sample("cpu.pct", round(cpu_percent, 1), "%"),
            self.sample(
                "mem.usedPct",
                round(memory.percent, 1),
                "%",
                total_gb=bytes_to_gb(memory.total),
                available_gb=bytes_to_gb(memory.available),
            ),
        ]

        # Machines without swap report total == 0; skip rather than report 0%
        if swap.total:
            samples.append(
                self.sample("swap.usedPct", round(swap.percent, 1), "%", total_gb=bytes_to_gb(swap.total))
            )

        load = _load_average()
        if load is not None:
            samples.append(
                self.sample(
                    "load.perCore",
                    round(load / cpu_count, 2),
                    None,
                    load_1m=round(load, 2),
                    cpu_count=cpu_count,
                )
            )

        uptime_days = (time.time() - boot_time) / 86400.0
        samples.append(self.sample("uptime.days", round(uptime_days, 1), "days"))
        return samples


def _load_average() -> Optional[float]:
    """1-minute load average, or None where the OS has none."""
    if hasattr(os, "getloadavg"):
        try:
            return os.getloadavg()[0]
        except OSError:
            return None
    return None


class DiskProbe(BaseProbe):
    """Filesystem usage for a set of mount points.

    Samples (one set per mount, ``extra.mount`` identifies it):
    disk.usedPct, disk.freeGb. Mounts that do not exist are skipped; the
    probe fails only when none of them could be read.
    """

    def __init__(self, paths: Sequence[str] = ("/",), name: str = "disk") -> None:
        super().__init__(name)
        self.paths = list(paths)

    def collect(self) -> List[Sample]:
        samples: List[Sample] = []
        errors: List[str] = []
        for path in self.paths:
            try:
                usage = psutil.disk_usage(path)
            except (FileNotFoundError, PermissionError, OSError) as e:
                errors.append(f"{path}: {e}")
                continue
            samples.append(self.sample("disk.usedPct", round(usage.percent, 1), "%", mount=path))
            samples.append(self.sample("disk.freeGb", bytes_to_gb(usage.free), "GB", mount=path))

        if not samples and errors:
            raise ProbeUnavailable(self.name, "; ".join(errors))
        return samples
