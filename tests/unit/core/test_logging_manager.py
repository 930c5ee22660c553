"""
Tests for logging_manager module.

Tests the MissNoteLogger file output, the safe_logger function and
NullLogger class that provide null-safe logging, and the CLI error
helper.
"""
import click
import pytest
from unittest.mock import MagicMock

from missnote.core.exceptions import DuplicateError
from missnote.core.logging_manager import (
    MissNoteLogger,
    NullLogger,
    handle_cli_error,
    safe_logger,
)


class TestMissNoteLogger:
    """Tests for MissNoteLogger file output."""

    def test_creates_log_directory(self, tmp_path):
        """Logger should create its log directory."""
        log_dir = tmp_path / "logs" / "system"
        MissNoteLogger(log_dir, "unit")
        assert log_dir.is_dir()

    def test_log_operation_written_to_component_log(self, tmp_path):
        """Operations go to <component>.log with JSON details."""
        logger = MissNoteLogger(tmp_path, "unit_ops")
        logger.log_operation("backup_exported", {"subject": "数学"})

        content = (tmp_path / "unit_ops.log").read_text(encoding="utf-8")
        assert "OPERATION - backup_exported" in content
        assert "数学" in content

    def test_log_error_written_to_errors_log(self, tmp_path):
        """Errors go to errors.log with their context."""
        logger = MissNoteLogger(tmp_path, "unit_errors")
        logger.log_error(ValueError("broken"), {"operation": "restore"})

        content = (tmp_path / "errors.log").read_text(encoding="utf-8")
        assert "ValueError: broken" in content
        assert "operation=restore" in content

    def test_messages_with_and_without_details(self, tmp_path):
        """Level label prefixes each message; details are appended as JSON."""
        logger = MissNoteLogger(tmp_path, "unit_levels")
        logger.log_debug("plain")
        logger.log_info("counted", {"mistakes": 2})
        logger.log_warning("photo left", {"uri": "/p/写真.jpg"})

        content = (tmp_path / "unit_levels.log").read_text(encoding="utf-8")
        assert "DEBUG - plain\n" in content
        assert 'INFO - counted: {"mistakes": 2}' in content
        assert 'WARNING - photo left: {"uri": "/p/写真.jpg"}' in content

    def test_log_cli_error_format(self, tmp_path):
        """log_cli_error returns a one-line message naming the error type."""
        logger = MissNoteLogger(tmp_path, "unit_cli")
        message = logger.log_cli_error(DuplicateError("Subject '数学' already exists"))
        assert message == "❌ DuplicateError: Subject '数学' already exists"


class TestNullLogger:
    """Tests for NullLogger class."""

    def test_null_logger_methods_are_no_ops(self):
        """NullLogger logging methods should do nothing."""
        logger = NullLogger()
        logger.log_operation("test_op", {"key": "value"})
        logger.log_error(ValueError("test error"), {"context": "test"})
        logger.log_debug("debug message", {"key": "value"})
        logger.log_info("info message")
        logger.log_warning("warning message", {"key": "value"})

    def test_null_logger_log_cli_error_returns_formatted(self):
        """NullLogger.log_cli_error should return formatted error string."""
        result = NullLogger().log_cli_error(ValueError("test error"))
        assert result == "❌ ValueError: test error"


class TestSafeLogger:
    """Tests for safe_logger function."""

    def test_safe_logger_returns_logger_when_provided(self):
        """safe_logger should return the same logger when not None."""
        mock_logger = MagicMock(spec=MissNoteLogger)
        assert safe_logger(mock_logger) is mock_logger

    def test_safe_logger_returns_null_logger_when_none(self):
        """safe_logger should return NullLogger when logger is None."""
        assert isinstance(safe_logger(None), NullLogger)

    def test_safe_logger_null_logger_is_singleton(self):
        """safe_logger should return the same NullLogger instance."""
        assert safe_logger(None) is safe_logger(None)

    def test_forwards_calls_to_real_logger(self):
        """Calls through safe_logger reach the wrapped logger."""
        mock_logger = MagicMock(spec=MissNoteLogger)
        details = {"photo_id": 3}

        safe_logger(mock_logger).log_warning("Photo file could not be removed", details)
        mock_logger.log_warning.assert_called_once_with(
            "Photo file could not be removed", details
        )


class TestHandleCliError:
    """Tests for handle_cli_error."""

    def test_exits_with_code_and_message(self, capsys):
        """handle_cli_error prints to stderr and exits."""
        ctx = click.Context(click.Command("dummy"), obj={"verbose": False})

        with pytest.raises(SystemExit) as exc_info:
            handle_cli_error(ctx, DuplicateError("taken"), "add_subject", exit_code=2)

        assert exc_info.value.code == 2
        assert "❌ DuplicateError: taken" in capsys.readouterr().err

    def test_uses_logger_from_context(self):
        """The logger stored in ctx.obj records the error."""
        mock_logger = MagicMock(spec=MissNoteLogger)
        mock_logger.log_cli_error.return_value = "❌ ValueError: bad"
        ctx = click.Context(click.Command("dummy"), obj={"logger": mock_logger})

        with pytest.raises(SystemExit):
            handle_cli_error(ctx, ValueError("bad"), "search", {"q": "x"})

        _, context = mock_logger.log_cli_error.call_args[0][:2]
        assert context == {"operation": "search", "q": "x"}
