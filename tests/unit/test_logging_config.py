"""
Unit tests for utils.logging

This module provides tests for structured logging configuration,
including JSON formatting, console formatting, context logging, and
environment-based configuration.
"""

import json
import logging
import logging.handlers
import os
import sys
from unittest.mock import patch

from utils.logging import (
    ConsoleFormatter,
    ContextLogger,
    JSONFormatter,
    configure_from_env,
    get_logger,
    setup_logging,
    shutdown_logging,
)
from utils.logging.formatters import extract_context


def make_record(msg="Test message", level=logging.INFO, **extra):
    record = logging.LogRecord(
        name="test_logger",
        level=level,
        pathname="/path/to/test.py",
        lineno=42,
        msg=msg,
        args=(),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestJSONFormatter:
    """Test JSONFormatter class"""

    def test_init_with_defaults(self):
        """Test initialization with default parameters"""
        # Arrange & Act
        formatter = JSONFormatter()

        # Assert
        assert formatter.include_timestamp is True
        assert formatter.include_hostname is True
        assert formatter.app_name == "ocf-replication"
        assert formatter.hostname is not None

    def test_format_basic_log_record(self):
        """Test formatting a basic log record"""
        # Arrange
        formatter = JSONFormatter()

        # Act
        data = json.loads(formatter.format(make_record()))

        # Assert
        assert data["level"] == "INFO"
        assert data["logger"] == "test_logger"
        assert data["message"] == "Test message"
        assert data["app"] == "ocf-replication"
        assert "timestamp" in data
        assert data["source"] == {"file": "/path/to/test.py", "line": 42, "function": None}
        assert "context" not in data

    def test_format_without_timestamp_and_hostname(self):
        """Test optional fields can be disabled"""
        formatter = JSONFormatter(include_timestamp=False, include_hostname=False)

        data = json.loads(formatter.format(make_record()))

        assert "timestamp" not in data
        assert "hostname" not in data

    def test_format_with_extra_context(self):
        """Test extra fields are grouped under context"""
        formatter = JSONFormatter()
        record = make_record(contract_anchor="00cap", creates=3)

        data = json.loads(formatter.format(record))

        assert data["context"] == {"contract_anchor": "00cap", "creates": 3}

    def test_format_with_exception_info(self):
        """Test exception details are included"""
        formatter = JSONFormatter()
        try:
            raise ValueError("bad payload")
        except ValueError:
            record = logging.LogRecord(
                name="test_logger",
                level=logging.ERROR,
                pathname="/path/to/test.py",
                lineno=1,
                msg="Failed",
                args=(),
                exc_info=sys.exc_info(),
            )

        data = json.loads(formatter.format(record))

        assert data["exception"]["type"] == "ValueError"
        assert data["exception"]["message"] == "bad payload"
        assert isinstance(data["exception"]["traceback"], list)

    def test_non_serializable_context_is_stringified(self):
        """Test context values that JSON cannot encode do not break logging"""
        formatter = JSONFormatter()
        record = make_record(ids=frozenset({"a"}))

        data = json.loads(formatter.format(record))

        assert data["context"]["ids"] == "frozenset({'a'})"


class TestExtractContext:
    """Test extract_context"""

    def test_excludes_record_attributes(self):
        """Test standard LogRecord attributes are not context"""
        record = make_record(entity_type="stakeholder", _private="x")

        assert extract_context(record) == {"entity_type": "stakeholder"}


class TestConsoleFormatter:
    """Test ConsoleFormatter class"""

    def test_init_without_colors(self):
        """Test initialization with colors disabled"""
        formatter = ConsoleFormatter(use_colors=False)

        assert formatter.use_colors is False

    def test_format_without_colors(self):
        """Test plain formatting"""
        formatter = ConsoleFormatter(use_colors=False)

        result = formatter.format(make_record())

        assert "[INFO] test_logger: Test message" in result
        assert "\033[" not in result

    @patch('sys.stderr.isatty', return_value=True)
    def test_format_with_colors_restores_levelname(self, mock_isatty):
        """Test colored output does not leak into other handlers"""
        # Arrange
        formatter = ConsoleFormatter(use_colors=True)
        record = make_record(level=logging.WARNING)

        # Act
        result = formatter.format(record)

        # Assert
        assert "\033[33mWARNING\033[0m" in result
        assert record.levelname == "WARNING"

    def test_format_with_extra_context(self):
        """Test extra fields are appended"""
        formatter = ConsoleFormatter(use_colors=False)

        result = formatter.format(make_record(contract_anchor="00cap"))

        assert result.endswith("[contract_anchor=00cap]")


class TestSetupLogging:
    """Test setup_logging function"""

    def test_setup_logging_with_defaults(self):
        """Test setup with default parameters"""
        # Arrange & Act
        setup_logging()

        # Assert
        root_logger = logging.getLogger()
        assert root_logger.level == logging.INFO
        assert len(root_logger.handlers) == 1
        assert root_logger.handlers[0].stream is sys.stderr
        assert isinstance(root_logger.handlers[0].formatter, ConsoleFormatter)

    def test_setup_logging_with_invalid_level_defaults_to_info(self):
        """Test that invalid level defaults to INFO"""
        setup_logging(level="INVALID")

        assert logging.getLogger().level == logging.INFO

    def test_setup_logging_with_json_format(self):
        """Test JSON console output"""
        setup_logging(level="DEBUG", json_format=True)

        root_logger = logging.getLogger()
        assert root_logger.level == logging.DEBUG
        assert isinstance(root_logger.handlers[0].formatter, JSONFormatter)

    def test_setup_logging_with_file(self, tmp_path):
        """Test setup with a rotating log file in a new directory"""
        # Arrange
        log_file = tmp_path / "logs" / "replication.log"

        # Act
        setup_logging(log_file=str(log_file), console_output=False)
        logging.getLogger("replication.test").info("written")
        shutdown_logging()

        # Assert
        assert log_file.exists()
        assert "written" in log_file.read_text()

    def test_setup_logging_clears_existing_handlers(self):
        """Test repeated setup does not stack handlers"""
        setup_logging()
        setup_logging()

        assert len(logging.getLogger().handlers) == 1

    def test_setup_logging_quiets_exporters(self):
        """Test OpenTelemetry and gRPC loggers are raised to WARNING"""
        setup_logging(level="DEBUG")

        assert logging.getLogger("opentelemetry").level == logging.WARNING
        assert logging.getLogger("grpc").level == logging.WARNING

    def test_get_logger_returns_named_logger(self):
        """Test get_logger is a thin wrapper over logging.getLogger"""
        assert get_logger("replication.diff") is logging.getLogger("replication.diff")

    def test_shutdown_logging_removes_handlers(self):
        """Test shutdown closes all root handlers"""
        setup_logging()

        shutdown_logging()

        assert logging.getLogger().handlers == []


class TestContextLogger:
    """Test ContextLogger class"""

    @patch('logging.Logger.log')
    def test_info_adds_context(self, mock_log):
        """Test that info method adds context"""
        # Arrange
        logger = ContextLogger("test_logger", contract_anchor="00cap")

        # Act
        logger.info("Diff computed", creates=3)

        # Assert
        mock_log.assert_called_once()
        call_args = mock_log.call_args
        assert call_args[0][0] == logging.INFO
        assert call_args[0][1] == "Diff computed"
        assert call_args[1]["extra"] == {"contract_anchor": "00cap", "creates": 3}

    @patch('logging.Logger.log')
    def test_error_with_exc_info(self, mock_log):
        """Test exc_info is passed through"""
        logger = ContextLogger("test_logger")

        logger.error("Failed", exc_info=True)

        assert mock_log.call_args[1]["exc_info"] is True

    @patch('logging.Logger.log')
    def test_call_context_overrides_logger_context(self, mock_log):
        """Test per-call fields win over logger fields"""
        logger = ContextLogger("test_logger", stage="inventory")

        logger.warning("Stage changed", stage="diff")

        assert mock_log.call_args[1]["extra"]["stage"] == "diff"

    def test_bind_creates_child(self):
        """Test bind adds context without changing the parent"""
        parent = ContextLogger("test_logger", contract_anchor="00cap")

        child = parent.bind(entity_type="stakeholder")

        assert child.get_context() == {"contract_anchor": "00cap", "entity_type": "stakeholder"}
        assert parent.get_context() == {"contract_anchor": "00cap"}
        assert child.logger is parent.logger

    def test_get_context_returns_copy(self):
        """Test the returned context cannot modify the logger"""
        logger = ContextLogger("test_logger", a=1)

        logger.get_context()["a"] = 2

        assert logger.context == {"a": 1}


class TestConfigureFromEnv:
    """Test configure_from_env function"""

    @patch.dict(os.environ, {
        "LOG_LEVEL": "DEBUG",
        "LOG_FILE": "/tmp/replication.log",
        "LOG_JSON": "true",
        "LOG_CONSOLE": "false"
    })
    @patch('utils.logging.config.setup_logging')
    def test_configure_from_env_all_vars_set(self, mock_setup):
        """Test configuration from all environment variables"""
        # Arrange & Act
        configure_from_env()

        # Assert
        mock_setup.assert_called_once_with(
            level="DEBUG",
            log_file="/tmp/replication.log",
            console_output=False,
            json_format=True
        )

    @patch('utils.logging.config.setup_logging')
    def test_configure_from_env_with_defaults(self, mock_setup):
        """Test configuration with default values"""
        configure_from_env()

        mock_setup.assert_called_once_with(
            level="INFO",
            log_file=None,
            console_output=True,
            json_format=False
        )

    @patch.dict(os.environ, {"LOG_LEVEL": "ERROR", "LOG_JSON": "yes"})
    @patch('utils.logging.config.setup_logging')
    def test_arguments_override_environment(self, mock_setup):
        """Test explicit arguments win over environment variables"""
        configure_from_env(level="WARNING", json_format=False)

        kwargs = mock_setup.call_args[1]
        assert kwargs["level"] == "WARNING"
        assert kwargs["json_format"] is False
