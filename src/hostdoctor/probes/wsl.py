"""Windows Subsystem for Linux detection from inside the distribution."""

from __future__ import annotations

from pathlib import Path
from typing import List, Union

from hostdoctor.collector.base import BaseProbe
from hostdoctor.collector.exceptions import ParseFailure, ProbeUnavailable
from hostdoctor.models.sample import Sample

PROC_VERSION = Path("/proc/version")
WSL_INTEROP = Path("/proc/sys/fs/binfmt_misc/WSLInterop")


class WslProbe(BaseProbe):
    """WSL generation and kernel.

    Samples: wsl.version (1 or 2), wsl.kernelRelease, wsl.interop.
    Unavailable when not running under WSL.

    WSL 1 kernels report e.g. "4.4.0-19041-Microsoft"; WSL 2 kernels
    report e.g. "5.15.90.1-microsoft-standard-WSL2".
    """

    def __init__(
        self,
        proc_version: Union[str, Path] = PROC_VERSION,
        interop_path: Union[str, Path] = WSL_INTEROP,
        name: str = "wsl",
    ) -> None:
        super().__init__(name)
        self.proc_version = Path(proc_version)
        self.interop_path = Path(interop_path)

    def collect(self) -> List[Sample]:
        try:
            version_text = self.proc_version.read_text()
        except FileNotFoundError as e:
            raise ProbeUnavailable(self.name, f"{self.proc_version} not present (not Linux)", cause=e)
        except PermissionError as e:
            raise ProbeUnavailable(self.name, f"permission denied reading {self.proc_version}", cause=e)

        lowered = version_text.lower()
        if "microsoft" not in lowered:
            raise ProbeUnavailable(self.name, "not running under WSL")

        parts = version_text.split()
        if len(parts) < 3 or parts[:2] != ["Linux", "version"]:
            raise ParseFailure(self.name, f"unrecognised kernel banner: {version_text.strip()[:80]!r}")
        release = parts[2]

        generation = 2 if ("microsoft-standard" in lowered or "wsl2" in lowered) else 1
        return [
            self.sample("wsl.version", generation),
            self.sample("wsl.kernelRelease", release),
            self.sample("wsl.interop", self.interop_path.exists()),
        ]
