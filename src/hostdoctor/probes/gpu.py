"""NVIDIA GPU probe using nvidia-smi's CSV query interface."""

from __future__ import annotations

from typing import List, Optional, Sequence

from hostdoctor.collector.base import DEFAULT_COMMAND_TIMEOUT, CommandProbe
from hostdoctor.collector.exceptions import ParseFailure
from hostdoctor.models.sample import Sample

# Order matters: parse_nvidia_smi relies on these column positions
QUERY_FIELDS = [
    "index",
    "name",
    "temperature.gpu",
    "utilization.gpu",
    "memory.used",
    "memory.total",
    "fan.speed",
    "power.draw",
    "driver_version",
]

_UNSUPPORTED = {"[not supported]", "[n/a]", "n/a", ""}


def _number(raw: str) -> Optional[float]:
    """Parse a numeric nvidia-smi field; None for unsupported values."""
    if raw.strip().lower() in _UNSUPPORTED:
        return None
    return float(raw.strip())


class NvidiaGpuProbe(CommandProbe):
    """GPU temperature, utilization, memory, fan, power and driver version.

    Samples per GPU (``extra.gpu_index`` / ``extra.gpu_name``):
    gpu.temperature, gpu.utilization, gpu.memUsedPct, gpu.fan.pct,
    gpu.power.watts, gpu.driverVersion. Fields the card does not support
    are omitted rather than failing the probe.
    """

    def __init__(
        self,
        executable: str = "nvidia-smi",
        timeout: float = DEFAULT_COMMAND_TIMEOUT,
        name: str = "gpu",
    ) -> None:
        super().__init__(
            name,
            [
                executable,
                f"--query-gpu={','.join(QUERY_FIELDS)}",
                "--format=csv,noheader,nounits",
            ],
            timeout=timeout,
        )

    def parse(self, output: str) -> List[Sample]:
        samples: List[Sample] = []
        lines = [line for line in output.splitlines() if line.strip()]
        if not lines:
            raise ParseFailure(self.name, "nvidia-smi returned no GPUs")

        for line in lines:
            parts = [part.strip() for part in line.split(",")]
            if len(parts) != len(QUERY_FIELDS):
                raise ParseFailure(
                    self.name,
                    f"expected {len(QUERY_FIELDS)} fields, got {len(parts)}: {line!r}",
                )
            samples.extend(self._gpu_samples(parts))
        return samples

    def _gpu_samples(self, parts: Sequence[str]) -> List[Sample]:
        index, gpu_name, temp, util, mem_used, mem_total, fan, power, driver = parts
        extra = {"gpu_index": int(index), "gpu_name": gpu_name}
        samples: List[Sample] = []

        temperature = _number(temp)
        if temperature is not None:
            samples.append(self.sample("gpu.temperature", temperature, "C", **extra))

        utilization = _number(util)
        if utilization is not None:
            samples.append(self.sample("gpu.utilization", utilization, "%", **extra))

        used = _number(mem_used)
        total = _number(mem_total)
        if used is not None and total:
            samples.append(
                self.sample("gpu.memUsedPct", round(used / total * 100, 1), "%", used_mb=used, total_mb=total, **extra)
            )

        fan_pct = _number(fan)
        if fan_pct is not None:
            samples.append(self.sample("gpu.fan.pct", fan_pct, "%", **extra))

        watts = _number(power)
        if watts is not None:
            samples.append(self.sample("gpu.power.watts", watts, "W", **extra))

        if driver.strip().lower() not in _UNSUPPORTED:
            samples.append(self.sample("gpu.driverVersion", driver, None, **extra))
        return samples
