"""Probes for routine maintenance signals.

journald disk usage, pending reboots and upgradable packages: the things
the cleanup and update cron jobs used to take care of blindly.
"""

from __future__ import annotations

import re
from pathlib import Path
from typing import List, Union

from hostdoctor.collector.base import DEFAULT_COMMAND_TIMEOUT, BaseProbe, CommandProbe
from hostdoctor.collector.exceptions import ParseFailure, ProbeUnavailable
from hostdoctor.models.sample import Sample
from hostdoctor.utils.units import bytes_to_mb, parse_size

REBOOT_REQUIRED_FILE = Path("/var/run/reboot-required")

_JOURNAL_RE = re.compile(r"take up (?P<size>[0-9.]+\s*[A-Za-z]*)")


class JournalProbe(CommandProbe):
    """systemd journal size. Sample: journal.sizeMb"""

    def __init__(
        self,
        executable: str = "journalctl",
        timeout: float = DEFAULT_COMMAND_TIMEOUT,
        name: str = "journal",
    ) -> None:
        super().__init__(name, [executable, "--disk-usage"], timeout=timeout)

    def parse(self, output: str) -> List[Sample]:
        match = _JOURNAL_RE.search(output)
        if not match:
            raise ParseFailure(self.name, f"unrecognised journalctl output: {output.strip()[:80]!r}")
        size = parse_size(match.group("size"))
        return [self.sample("journal.sizeMb", bytes_to_mb(size), "MB")]


class RebootRequiredProbe(BaseProbe):
    """Debian/Ubuntu reboot marker. Sample: system.rebootRequired

    ``extra.packages`` lists the packages that requested the reboot.
    """

    def __init__(
        self,
        marker: Union[str, Path] = REBOOT_REQUIRED_FILE,
        name: str = "reboot",
    ) -> None:
        super().__init__(name)
        self.marker = Path(marker)

    def collect(self) -> List[Sample]:
        try:
            required = self.marker.exists()
            packages: List[str] = []
            pkgs_file = self.marker.with_name(self.marker.name + ".pkgs")
            if required and pkgs_file.exists():
                packages = [line.strip() for line in pkgs_file.read_text().splitlines() if line.strip()]
        except PermissionError as e:
            raise ProbeUnavailable(self.name, f"permission denied reading {self.marker}", cause=e)
        return [self.sample("system.rebootRequired", required, None, packages=packages)]


class AptUpgradableProbe(CommandProbe):
    """Pending apt upgrades. Sample: packages.upgradable"""

    def __init__(
        self,
        executable: str = "apt",
        timeout: float = 15.0,
        name: str = "packages",
    ) -> None:
        super().__init__(name, [executable, "list", "--upgradable"], timeout=timeout)

    def parse(self, output: str) -> List[Sample]:
        count = sum(1 for line in output.splitlines() if "[upgradable from" in line)
        return [self.sample("packages.upgradable", count, "packages")]
