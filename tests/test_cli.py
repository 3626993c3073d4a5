"""Tests for the command line entry point."""

import json
from unittest.mock import MagicMock, patch

import pytest

from hostdoctor import __version__
from hostdoctor.__main__ import (
    EXIT_CONFIG_ERROR,
    EXIT_CRITICAL,
    EXIT_HEALTHY,
    EXIT_WARNING,
    exit_code_for,
    format_rule_table,
    handle_sighup,
    main,
    parse_args,
)
from hostdoctor.analysis.rules import DEFAULT_RULES
from hostdoctor.collector import FunctionProbe
from hostdoctor.models import Severity


@pytest.fixture(autouse=True)
def no_logging_setup():
    """Keep CLI runs from reconfiguring structlog for later tests."""
    with patch("hostdoctor.logging.configure_logging"):
        yield


def probes_with(values):
    def _build(settings, names=None):
        return [FunctionProbe("fake", lambda: dict(values))]

    return _build


class TestParseArgs:
    """Tests for argument parsing."""

    def test_repeatable_probe(self):
        """--probe may be given several times."""
        args = parse_args(["--probe", "gpu", "--probe", "disk", "--format", "json"])
        assert args.probe == ["gpu", "disk"]
        assert args.format == "json"
        assert not args.watch

    def test_version(self, capsys):
        """--version prints the version and exits."""
        with pytest.raises(SystemExit) as exc_info:
            parse_args(["--version"])
        assert exc_info.value.code == 0
        assert __version__ in capsys.readouterr().out

    def test_invalid_format(self):
        """Only text and json formats exist."""
        with pytest.raises(SystemExit):
            parse_args(["--format", "html"])


class TestExitCodes:
    """Tests for status to exit code mapping."""

    @pytest.mark.parametrize(
        "status,code",
        [
            (Severity.HEALTHY, EXIT_HEALTHY),
            (Severity.NOTICE, EXIT_HEALTHY),
            (Severity.WARNING, EXIT_WARNING),
            (Severity.CRITICAL, EXIT_CRITICAL),
        ],
    )
    def test_mapping(self, status, code):
        """Notices do not fail the run."""
        assert exit_code_for(status) == code


class TestMain:
    """Tests for main()."""

    def test_list_probes(self, capsys, clean_env):
        """--list-probes prints built-in probe names."""
        assert main(["--list-probes"]) == EXIT_HEALTHY
        out = capsys.readouterr().out.split()
        assert "gpu" in out
        assert "wsl" in out

    def test_list_rules(self, capsys, clean_env):
        """--list-rules prints one line per rule."""
        assert main(["--list-rules"]) == EXIT_HEALTHY
        lines = capsys.readouterr().out.strip().splitlines()
        assert len(lines) == len(DEFAULT_RULES)
        assert lines[0].startswith("gpu_temperature_critical")

    def test_missing_config_file(self, capsys, clean_env, tmp_path):
        """A missing config file exits with a configuration error."""
        clean_env.setenv("HOSTDOCTOR_CONFIG", "")
        code = main(["--config", str(tmp_path / "missing.yaml")])
        assert code == EXIT_CONFIG_ERROR
        assert "Configuration error" in capsys.readouterr().err

    def test_invalid_rules_file(self, capsys, clean_env, tmp_path):
        """An invalid rules file exits with a configuration error."""
        rules = tmp_path / "rules.yaml"
        rules.write_text("- {name: x}\n")
        assert main(["--rules", str(rules), "--list-rules"]) == EXIT_CONFIG_ERROR

    def test_unknown_probe(self, capsys, clean_env):
        """Unknown probe names exit with a configuration error."""
        assert main(["--probe", "battery"]) == EXIT_CONFIG_ERROR
        assert "Unknown probe" in capsys.readouterr().err

    @patch("hostdoctor.pipeline.build_probes", side_effect=probes_with({"mem.usedPct": 20.0}))
    def test_healthy_run(self, _build, capsys, clean_env):
        """A healthy host exits 0 and prints the text report."""
        assert main([]) == EXIT_HEALTHY
        assert "Status: HEALTHY" in capsys.readouterr().out

    @patch("hostdoctor.pipeline.build_probes", side_effect=probes_with({"mem.usedPct": 95.0}))
    def test_warning_run_json(self, _build, capsys, clean_env):
        """Warnings exit 2; JSON output is parseable."""
        assert main(["--format", "json"]) == EXIT_WARNING
        data = json.loads(capsys.readouterr().out)
        assert data["status"] == "warning"
        assert data["diagnosis"]["issues"][0]["rule"] == "memory_pressure"

    @patch("hostdoctor.pipeline.build_probes", side_effect=probes_with({"disk.usedPct": 99.0}))
    def test_critical_run(self, _build, capsys, clean_env):
        """Critical issues exit 3."""
        assert main([]) == EXIT_CRITICAL

    @patch("hostdoctor.scheduler.ScheduledRunner")
    def test_watch_uses_schedule(self, mock_runner_class, clean_env, tmp_path):
        """--watch hands the configured schedule to the runner."""
        clean_env.setenv("HOSTDOCTOR_SCHEDULE_INTERVAL_MINUTES", "10")
        clean_env.setenv("HOSTDOCTOR_STATUS_FILE", str(tmp_path / "status.json"))
        runner = MagicMock()
        mock_runner_class.return_value = runner

        with patch("hostdoctor.__main__.signal.signal"):
            assert main(["--watch"]) == EXIT_HEALTHY

        kwargs = runner.run.call_args[1]
        assert kwargs["interval_minutes"] == 10
        assert kwargs["cron_expr"] is None
        assert kwargs["preset"] is None

    @patch("hostdoctor.scheduler.ScheduledRunner")
    def test_watch_unknown_probe_exits(self, mock_runner_class, capsys, clean_env):
        """--watch refuses to start with an unknown probe name."""
        clean_env.setenv("HOSTDOCTOR_SCHEDULE_INTERVAL_MINUTES", "1")

        with patch("hostdoctor.__main__.signal.signal"):
            assert main(["--watch", "--probe", "bogus"]) == EXIT_CONFIG_ERROR

        assert "Unknown probe" in capsys.readouterr().err
        mock_runner_class.return_value.run.assert_not_called()

    @patch("hostdoctor.scheduler.ScheduledRunner")
    def test_watch_invalid_rules_exits(self, mock_runner_class, clean_env, tmp_path):
        """--watch refuses to start with an invalid rules file."""
        rules = tmp_path / "rules.yaml"
        rules.write_text("- {name: x}\n")
        clean_env.setenv("HOSTDOCTOR_SCHEDULE_INTERVAL_MINUTES", "1")

        with patch("hostdoctor.__main__.signal.signal"):
            assert main(["--watch", "--rules", str(rules)]) == EXIT_CONFIG_ERROR

        mock_runner_class.return_value.run.assert_not_called()


class TestFormatRuleTable:
    """Tests for rule listing."""

    def test_drift_rule_mentions_baseline(self):
        """Drift rules show their baseline."""
        lines = format_rule_table(DEFAULT_RULES)
        driver = [line for line in lines if line.startswith("gpu_driver_outdated")][0]
        assert "gpu.driverDate > 365 (drift from now)" in driver


class TestHandleSighup:
    """Tests for configuration reload on SIGHUP."""

    def test_reload_called(self):
        """SIGHUP re-reads configuration."""
        with patch("hostdoctor.config.loader.reload_config") as reload:
            handle_sighup(1, None)
        reload.assert_called_once()

    def test_reload_failure_is_logged_not_raised(self):
        """A broken config on reload does not kill the watcher."""
        from hostdoctor.config import ConfigurationError

        with patch(
            "hostdoctor.config.loader.reload_config",
            side_effect=ConfigurationError("bad"),
        ):
            handle_sighup(1, None)
