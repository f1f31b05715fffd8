"""Tests for logging configuration."""

import logging

import pytest
import structlog
from storefront.utils.logging import (
    add_context,
    clear_context,
    get_environment,
    get_log_level,
    setup_stdlib_logging,
)


@pytest.fixture()
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield root
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers = handlers
    root.setLevel(level)


class TestLogLevel:
    def test_test_environment_is_quiet(self, monkeypatch):
        monkeypatch.delenv("ENV", raising=False)
        monkeypatch.delenv("ENVIRONMENT", raising=False)
        monkeypatch.delenv("LOG_LEVEL", raising=False)
        monkeypatch.setenv("PROTEAN_ENV", "test")
        assert get_environment() == "test"
        assert get_log_level() == "WARNING"

    def test_production_logs_info(self, monkeypatch):
        monkeypatch.delenv("LOG_LEVEL", raising=False)
        monkeypatch.setenv("ENVIRONMENT", "Production")
        assert get_log_level() == "INFO"

    def test_explicit_level_wins(self, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "error")
        assert get_log_level() == "ERROR"


class TestStdlibLogging:
    def test_console_only_without_log_dir(self, monkeypatch, restore_root_logger):
        monkeypatch.delenv("LOG_DIR", raising=False)
        setup_stdlib_logging()
        assert len(restore_root_logger.handlers) == 1

    def test_rotating_files_with_log_dir(self, tmp_path, restore_root_logger):
        setup_stdlib_logging(tmp_path)
        assert len(restore_root_logger.handlers) == 3
        assert (tmp_path / "storefront.log").exists()
        assert (tmp_path / "storefront_error.log").exists()


class TestContext:
    def test_bind_and_clear(self):
        add_context(path="/cart")
        assert structlog.contextvars.get_contextvars()["path"] == "/cart"
        clear_context()
        assert structlog.contextvars.get_contextvars() == {}
