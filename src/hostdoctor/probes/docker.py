"""Docker storage probe using ``docker system df``."""

from __future__ import annotations

import json
import re
from typing import Any, Dict, List

from hostdoctor.collector.base import DEFAULT_COMMAND_TIMEOUT, CommandProbe
from hostdoctor.collector.exceptions import ParseFailure
from hostdoctor.models.sample import Sample
from hostdoctor.utils.units import bytes_to_gb, parse_size

# docker's "Type" column -> sample name segment
TYPE_KEYS = {
    "images": "images",
    "containers": "containers",
    "local volumes": "volumes",
    "build cache": "buildCache",
}

_RECLAIMABLE_RE = re.compile(r"^\s*(?P<size>[0-9.]+\s*[A-Za-z]*)\s*(?:\((?P<pct>[0-9.]+)%\))?\s*$")


class DockerDiskProbe(CommandProbe):
    """Disk usage and reclaimable space per Docker object type.

    Samples per type (images, containers, volumes, buildCache):
    docker.<type>.sizeGb, docker.<type>.reclaimablePct. The probe is
    unavailable when docker is missing or the daemon is not running.
    """

    def __init__(
        self,
        executable: str = "docker",
        timeout: float = DEFAULT_COMMAND_TIMEOUT,
        name: str = "docker",
    ) -> None:
        super().__init__(
            name,
            [executable, "system", "df", "--format", "{{json .}}"],
            timeout=timeout,
        )

    def parse(self, output: str) -> List[Sample]:
        samples: List[Sample] = []
        for line in output.splitlines():
            if not line.strip():
                continue
            try:
                row: Dict[str, Any] = json.loads(line)
            except json.JSONDecodeError as e:
                raise ParseFailure(self.name, f"invalid JSON line {line[:60]!r}", cause=e)

            key = TYPE_KEYS.get(str(row.get("Type", "")).strip().lower())
            if key is None:
                continue
            samples.extend(self._type_samples(key, row))

        if not samples:
            raise ParseFailure(self.name, "no recognised rows in docker system df output")
        return samples

    def _type_samples(self, key: str, row: Dict[str, Any]) -> List[Sample]:
        size_bytes = parse_size(str(row.get("Size", "0B")))
        extra = {
            "total_count": _count(row.get("TotalCount")),
            "active": _count(row.get("Active")),
        }
        samples = [self.sample(f"docker.{key}.sizeGb", bytes_to_gb(size_bytes), "GB", **extra)]

        match = _RECLAIMABLE_RE.match(str(row.get("Reclaimable", "")))
        if match:
            reclaimable_bytes = parse_size(match.group("size"))
            if match.group("pct") is not None:
                pct = float(match.group("pct"))
            elif size_bytes:
                pct = round(reclaimable_bytes / size_bytes * 100, 1)
            else:
                pct = 0.0
            samples.append(
                self.sample(
                    f"docker.{key}.reclaimablePct",
                    pct,
                    "%",
                    reclaimable_gb=bytes_to_gb(reclaimable_bytes),
                    **extra,
                )
            )
        return samples


def _count(raw: Any) -> int:
    try:
        return int(str(raw).strip())
    except (TypeError, ValueError):
        return 0
