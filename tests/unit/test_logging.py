"""
Unit tests for logging setup and library-mode defaults.
"""

import logging

import pytest
import structlog

from novel_workspace import commit, log, repo_state
from novel_workspace.utils.logging import get_logger, log_function_call, setup_logging


@pytest.fixture
def restore_root_logger():
    """Put the root logger back the way the test found it."""
    root = logging.getLogger()
    handlers = root.handlers[:]
    level = root.level
    yield root
    root.handlers[:] = handlers
    root.setLevel(level)


class TestLibraryDefaults:
    """Engine calls made without setup_logging."""

    def test_structlog_routes_through_stdlib(self):
        assert structlog.is_configured()
        factory = structlog.get_config()["logger_factory"]
        assert isinstance(factory, structlog.stdlib.LoggerFactory)

    def test_operations_write_nothing_to_stdout(self, repo_root, write_file, clock, capsys):
        write_file("chapter.txt", "It was a dark and stormy night.\n")
        capsys.readouterr()

        commit(repo_root, "first")
        log(repo_root)
        repo_state(repo_root)

        assert capsys.readouterr().out == ""

    def test_info_events_reach_stdlib_handlers(self, caplog):
        logger = get_logger("novel-workspace.test")

        with caplog.at_level(logging.INFO):
            logger.info("blob_stored", size=3)

        assert any("blob_stored" in record.getMessage() for record in caplog.records)


class TestSetupLogging:
    """Explicit configuration."""

    def test_console_handler_uses_requested_level(self, restore_root_logger):
        result = setup_logging(log_level="ERROR")

        assert restore_root_logger.level == logging.ERROR
        assert result["config"]["log_level"] == "ERROR"
        assert result["log_dir"] is None

    def test_file_logging_writes_rotating_files(self, tmp_path, restore_root_logger):
        setup_logging(log_level="INFO", log_dir=tmp_path, enable_file=True)

        get_logger("novel-workspace.test").error("storage_error", operation="write")
        for handler in restore_root_logger.handlers:
            handler.flush()

        assert "storage_error" in (tmp_path / "novel-workspace.log").read_text()
        assert "storage_error" in (tmp_path / "novel-workspace-errors.log").read_text()


class TestLogFunctionCall:

    def test_returns_result_and_reraises(self):
        logger = get_logger("novel-workspace.test")

        @log_function_call(logger)
        def double(x):
            return x * 2

        @log_function_call(logger)
        def explode():
            raise ValueError("nope")

        assert double(4) == 8
        assert double.__name__ == "double"
        with pytest.raises(ValueError):
            explode()
