"""Tests for configuration module."""

import logging

import pytest
from pydantic import ValidationError

from aws_resource_audit.config import load_config
from aws_resource_audit.config.logging import SUCCESS, RunLogFormatter, attach_run_log, configure_logging
from aws_resource_audit.config.schema import (
    AuditConfig,
    CostConfig,
    EmailConfig,
    SlackConfig,
    SMTPConfig,
)
from aws_resource_audit.exceptions import ConfigError, ExitCode


class TestConfig:
    """Tests for AuditConfig schema."""

    def test_default_config(self):
        """Test that default config is valid."""
        config = AuditConfig()
        assert config.source is None
        assert config.email.enabled is False
        assert config.email.subject == "AWS Resource Audit Report"
        assert config.email.smtp.server == "smtp.gmail.com"
        assert config.email.smtp.port == 587
        assert config.slack.configured is False
        assert config.cost.tag_key == "Environment"
        assert config.cost.tag_value == "Production"
        assert config.cost.lookback_days == 30
        assert config.reports.report_dir == "reports"
        assert config.reports.log_file == "aws_resource_audit.log"

    def test_email_address_fallbacks(self):
        """Test sender and SMTP user fall back to the recipient."""
        config = EmailConfig(enabled=True, to="ops@example.com")
        assert config.from_address == "ops@example.com"
        assert config.smtp_user == "ops@example.com"

        config = EmailConfig(
            enabled=True,
            to="ops@example.com",
            sender="audit@example.com",
            smtp=SMTPConfig(user="smtp-login"),
        )
        assert config.from_address == "audit@example.com"
        assert config.smtp_user == "smtp-login"

    def test_email_configured(self):
        """Test email needs both the flag and a recipient."""
        assert EmailConfig(enabled=True, to="ops@example.com").configured is True
        assert EmailConfig(enabled=True).configured is False
        assert EmailConfig(to="ops@example.com").configured is False

    def test_slack_configured(self):
        """Test Slack is configured by its webhook URL."""
        assert SlackConfig(webhook_url="https://hooks.slack.com/services/T/B/X").configured is True


class TestConfigValidation:
    """Tests for config validation."""

    def test_invalid_port(self):
        """Test that an out-of-range port raises error."""
        with pytest.raises(ValueError):
            SMTPConfig(port=70000)

    def test_invalid_lookback(self):
        """Test that a zero lookback window raises error."""
        with pytest.raises(ValueError):
            CostConfig(lookback_days=0)

    def test_config_is_frozen(self):
        """Test config cannot be mutated after load."""
        config = AuditConfig()
        with pytest.raises(ValidationError):
            config.source = "elsewhere"


class TestLoadConfig:
    """Tests for load_config."""

    def test_explicit_file(self, tmp_path):
        """Test loading KEY=value settings from a given file."""
        env_file = tmp_path / "audit.env"
        env_file.write_text(
            "EMAIL_ENABLED=true\n"
            "EMAIL_TO=ops@example.com\n"
            "SMTP_PORT=465\n"
            "SMTP_PASSWORD=hunter2\n"
            'SLACK_WEBHOOK_URL="https://hooks.slack.com/services/T/B/X"\n'
            "COST_TAG_KEY=Team\n"
            "COST_TAG_VALUE=platform\n"
        )

        config = load_config(env_file, environ={})

        assert config.source == str(env_file)
        assert config.email.configured is True
        assert config.email.smtp.port == 465
        assert config.email.smtp.password.get_secret_value() == "hunter2"
        assert "hunter2" not in repr(config)
        assert config.slack.webhook_url == "https://hooks.slack.com/services/T/B/X"
        assert config.cost.tag_key == "Team"
        assert config.cost.tag_value == "platform"

    def test_search_order(self, tmp_path):
        """Test the first file in the search order wins."""
        (tmp_path / "config").mkdir()
        (tmp_path / "config" / "config.env").write_text("COST_TAG_VALUE=from-config\n")
        (tmp_path / "config" / "config.env.local").write_text("COST_TAG_VALUE=from-local\n")

        config = load_config(environ={"AUDIT_PROJECT_ROOT": str(tmp_path)})
        assert config.cost.tag_value == "from-local"

        (tmp_path / ".env").write_text("COST_TAG_VALUE=from-dotenv\n")
        config = load_config(environ={"AUDIT_PROJECT_ROOT": str(tmp_path)})
        assert config.cost.tag_value == "from-dotenv"

    def test_environment_overrides_file(self, tmp_path):
        """Test process environment beats the file."""
        env_file = tmp_path / "audit.env"
        env_file.write_text("COST_TAG_VALUE=Staging\nREPORT_DIR=out\n")

        config = load_config(env_file, environ={"COST_TAG_VALUE": "Production-EU"})

        assert config.cost.tag_value == "Production-EU"
        assert config.reports.report_dir == "out"

    def test_empty_values_use_defaults(self, tmp_path):
        """Test empty values fall back to defaults."""
        env_file = tmp_path / "audit.env"
        env_file.write_text("COST_TAG_KEY=\nSMTP_SERVER=\nEMAIL_SUBJECT=\n")

        config = load_config(env_file, environ={})

        assert config.cost.tag_key == "Environment"
        assert config.email.smtp.server == "smtp.gmail.com"
        assert config.email.subject == "AWS Resource Audit Report"

    def test_unknown_keys_ignored(self, tmp_path):
        """Test unrecognized keys are ignored."""
        env_file = tmp_path / "audit.env"
        env_file.write_text("SOMETHING_ELSE=1\nCOST_TAG_KEY=Owner\n")

        config = load_config(env_file, environ={"PATH": "/usr/bin"})

        assert config.cost.tag_key == "Owner"

    def test_missing_file_uses_defaults(self, tmp_path, caplog):
        """Test a missing config file warns and falls back to defaults."""
        with caplog.at_level(logging.WARNING):
            config = load_config(environ={"AUDIT_PROJECT_ROOT": str(tmp_path)})

        assert config.source is None
        assert config.cost.tag_key == "Environment"
        assert "No config file found" in caplog.text

    def test_missing_explicit_file(self, tmp_path, caplog):
        """Test an explicit path that does not exist warns."""
        with caplog.at_level(logging.WARNING):
            config = load_config(tmp_path / "nope.env", environ={})

        assert config.source is None
        assert "Config file not found" in caplog.text

    def test_invalid_value(self, tmp_path):
        """Test an invalid value is a configuration error."""
        env_file = tmp_path / "audit.env"
        env_file.write_text("SMTP_PORT=not-a-port\n")

        with pytest.raises(ConfigError) as exc_info:
            load_config(env_file, environ={})

        assert exc_info.value.exit_code == ExitCode.CONFIG


class TestLogging:
    """Tests for the run log."""

    def test_formatter(self):
        """Test the run log line format and level names."""
        formatter = RunLogFormatter()
        record = logging.LogRecord("aws_resource_audit", logging.WARNING, __file__, 1, "careful", None, None)

        line = formatter.format(record)

        assert line.endswith(" | WARN | careful")
        assert len(line.split(" | ")[0]) == len("2024-01-01 00:00:00")

    def test_run_log_file(self, tmp_path):
        """Test levels are written to the appended run log."""
        log_file = tmp_path / "logs" / "audit.log"
        log_file.parent.mkdir()
        log_file.write_text("earlier run\n")

        logger = configure_logging(verbose=True)
        attach_run_log(log_file)
        logger.log(SUCCESS, "done")
        logger.debug("details")

        lines = log_file.read_text().splitlines()
        assert lines[0] == "earlier run"
        assert lines[1].endswith(" | SUCCESS | done")
        assert lines[2].endswith(" | DEBUG | details")

    def test_quiet_without_verbose(self, tmp_path):
        """Test DEBUG lines are dropped without --verbose."""
        log_file = tmp_path / "audit.log"

        logger = configure_logging(verbose=False)
        attach_run_log(log_file)
        logger.debug("hidden")
        logger.info("shown")

        content = log_file.read_text()
        assert "hidden" not in content
        assert " | INFO | shown" in content

    def test_warning_level_name_untouched(self):
        """Test WARN is a run log rendering only, not a global level rename."""
        record = logging.LogRecord("aws_resource_audit", logging.WARNING, __file__, 1, "careful", None, None)

        RunLogFormatter().format(record)

        assert logging.getLevelName(logging.WARNING) == "WARNING"
        assert record.levelname == "WARNING"

    def test_run_log_unavailable(self, tmp_path, caplog):
        """Test an unopenable run log is reported and skipped."""
        blocker = tmp_path / "blocker"
        blocker.write_text("not a directory\n")

        logger = configure_logging()
        with caplog.at_level(logging.WARNING, logger="aws_resource_audit"):
            assert attach_run_log(blocker / "audit.log") is None

        assert "Cannot open run log" in caplog.text
        assert all(not isinstance(h, logging.FileHandler) for h in logger.handlers)
