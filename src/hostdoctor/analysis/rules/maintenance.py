"""Maintenance rules: Docker storage, journal size, pending updates, WSL."""

from typing import List

from hostdoctor.analysis.rules.base import ThresholdRule
from hostdoctor.models.enums import Comparator, Severity


DOCKER_RULES: List[ThresholdRule] = [
    ThresholdRule(
        name="docker_images_reclaimable",
        sample="docker.images.reclaimablePct",
        comparator=Comparator.GT,
        limit=50,
        severity=Severity.NOTICE,
        category="docker",
        issue="{value}{unit} of Docker image storage is reclaimable",
        recommendation="Run 'docker image prune -a' to remove unused images.",
    ),
    ThresholdRule(
        name="docker_build_cache_large",
        sample="docker.buildCache.sizeGb",
        comparator=Comparator.GT,
        limit=10,
        severity=Severity.NOTICE,
        category="docker",
        issue="Docker build cache uses {value} {unit}",
        recommendation="Run 'docker builder prune -af' to clear the build cache.",
    ),
    ThresholdRule(
        name="docker_volumes_reclaimable",
        sample="docker.volumes.reclaimablePct",
        comparator=Comparator.GT,
        limit=50,
        severity=Severity.NOTICE,
        category="docker",
        issue="{value}{unit} of Docker volume storage belongs to unused volumes",
        recommendation="Review 'docker volume ls -f dangling=true' and remove volumes you no longer need.",
    ),
]


SYSTEM_MAINTENANCE_RULES: List[ThresholdRule] = [
    ThresholdRule(
        name="journal_large",
        sample="journal.sizeMb",
        comparator=Comparator.GT,
        limit=1024,
        severity=Severity.NOTICE,
        category="logs",
        issue="systemd journal uses {value} {unit}",
        recommendation="Run 'journalctl --vacuum-time=2d' or set SystemMaxUse in journald.conf.",
    ),
    ThresholdRule(
        name="reboot_required",
        sample="system.rebootRequired",
        comparator=Comparator.EQ,
        limit=True,
        severity=Severity.NOTICE,
        category="system",
        issue="A reboot is required to finish installing updates",
        recommendation="Reboot to load the updated kernel and libraries.",
    ),
    ThresholdRule(
        name="packages_outdated",
        sample="packages.upgradable",
        comparator=Comparator.GT,
        limit=50,
        severity=Severity.NOTICE,
        category="system",
        issue="{value} packages have pending upgrades",
        recommendation="Run 'sudo apt update && sudo apt upgrade'.",
    ),
]


WSL_RULES: List[ThresholdRule] = [
    ThresholdRule(
        name="wsl_version_1",
        sample="wsl.version",
        comparator=Comparator.EQ,
        limit=1,
        severity=Severity.NOTICE,
        category="wsl",
        issue="This distribution runs under WSL 1",
        recommendation="Convert it with 'wsl --set-version <distro> 2' for full Docker and systemd support.",
    ),
]
