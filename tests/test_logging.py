"""Tests for structlog configuration."""

import json
import logging
from unittest.mock import patch

import structlog

from hostdoctor.logging import configure_logging, get_logger


class TestConfigureLogging:
    """Tests for configure_logging."""

    @patch("hostdoctor.logging.logging.basicConfig")
    def test_json_logs_go_to_stderr(self, mock_basic, capsys):
        """JSON logs are written to stderr, leaving stdout for reports."""
        configure_logging(log_format="json", log_level="INFO")
        structlog.get_logger().info("probe_unavailable", probe="gpu")

        captured = capsys.readouterr()
        assert captured.out == ""
        record = json.loads(captured.err.strip().splitlines()[-1])
        assert record["event"] == "probe_unavailable"
        assert record["probe"] == "gpu"
        assert record["level"] == "info"
        assert mock_basic.call_args[1]["level"] == logging.INFO

    @patch("hostdoctor.logging.logging.basicConfig")
    def test_level_filtering(self, _basic, capsys):
        """Events below the configured level are dropped."""
        configure_logging(log_format="json", log_level="WARNING")
        logger = structlog.get_logger()
        logger.info("rule_skipped")
        logger.warning("rule_evaluation_error")

        err = capsys.readouterr().err
        assert "rule_skipped" not in err
        assert "rule_evaluation_error" in err

    def test_get_logger(self):
        """get_logger returns a usable logger."""
        assert hasattr(get_logger(), "info")
