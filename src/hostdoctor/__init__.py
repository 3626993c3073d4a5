"""
hostdoctor - Collect host metrics and turn them into an actionable diagnosis.

This package runs pluggable probes against a developer machine (system
counters, disks, GPUs, Docker, systemd journal, WSL), evaluates the samples
against a declarative threshold rule table and reports a health status with
issues and recommendations.

Features:
- Configuration via YAML with environment variable overrides
- Structured logging (JSON for machines, text for humans)
- Partial-failure tolerant collection with per-probe timeouts
- Text and JSON reports, optional scheduled watch mode
"""

__version__ = "0.3.0"
__all__ = ["__version__"]
