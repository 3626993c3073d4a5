"""Built-in probes and the registry that builds them from settings.

The registry is a fixed mapping of probe names to factories (no dynamic
plugin discovery). Callers that need other data sources construct their
own probes and register them on a Collector directly. Command probes get
the collector timeout so no subprocess outlives its probe.
"""

from __future__ import annotations

from typing import Any, Callable, Dict, List, Optional, Sequence

from hostdoctor.collector.base import Probe
from hostdoctor.probes.docker import DockerDiskProbe
from hostdoctor.probes.gpu import NvidiaGpuProbe
from hostdoctor.probes.maintenance import AptUpgradableProbe, JournalProbe, RebootRequiredProbe
from hostdoctor.probes.system import DiskProbe, SystemProbe
from hostdoctor.probes.wsl import WslProbe

ProbeFactory = Callable[[Any], Probe]

PROBE_FACTORIES: Dict[str, ProbeFactory] = {
    "system": lambda settings: SystemProbe(),
    "disk": lambda settings: DiskProbe(paths=settings.get_disk_paths()),
    "gpu": lambda settings: NvidiaGpuProbe(
        executable=settings.gpu_command, timeout=settings.probe_timeout
    ),
    "docker": lambda settings: DockerDiskProbe(timeout=settings.probe_timeout),
    "journal": lambda settings: JournalProbe(timeout=settings.probe_timeout),
    "reboot": lambda settings: RebootRequiredProbe(),
    "packages": lambda settings: AptUpgradableProbe(timeout=settings.probe_timeout),
    "wsl": lambda settings: WslProbe(),
}


class UnknownProbeError(ValueError):
    """Raised when a configured probe name has no factory."""

    pass


def list_probes() -> List[str]:
    """Names of the built-in probes, in default collection order."""
    return list(PROBE_FACTORIES.keys())


def build_probes(settings: Any, names: Optional[Sequence[str]] = None) -> List[Probe]:
    """Instantiate built-in probes.

    Args:
        settings: Settings object (HostDoctorSettings or compatible).
        names: Probe names in collection order. Defaults to the names
            configured in ``settings.get_probe_names()``.

    Returns:
        List of probe instances.

    Raises:
        UnknownProbeError: If a name is not a built-in probe.
    """
    selected = list(names) if names else settings.get_probe_names()
    unknown = [name for name in selected if name not in PROBE_FACTORIES]
    if unknown:
        available = ", ".join(PROBE_FACTORIES.keys())
        raise UnknownProbeError(f"Unknown probe(s): {', '.join(unknown)}. Available: {available}")
    return [PROBE_FACTORIES[name](settings) for name in selected]


__all__ = [
    "AptUpgradableProbe",
    "DiskProbe",
    "DockerDiskProbe",
    "JournalProbe",
    "NvidiaGpuProbe",
    "PROBE_FACTORIES",
    "RebootRequiredProbe",
    "SystemProbe",
    "UnknownProbeError",
    "WslProbe",
    "build_probes",
    "list_probes",
]
