"""Tests for runtime configuration and logging setup."""

from __future__ import annotations

import logging
from pathlib import Path

import pytest

from mongotab.shared.app.runtime import DEFAULT_PAGE_SIZE, RuntimeConfig, default_config_dir
from mongotab.shared.core.log_setup import configure_logging


@pytest.fixture
def clean_env(monkeypatch):
    for name in (
        "MONGOTAB_CONFIG_DIR",
        "MONGOTAB_PAGE_SIZE",
        "MONGOTAB_DEBUG",
        "MONGOTAB_LOG_FILE",
        "MONGOTAB_SAVE_TIMEOUT_S",
        "MONGOTAB_MOCK",
        "XDG_CONFIG_HOME",
    ):
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


class TestRuntimeConfig:
    def test_defaults(self, clean_env):
        runtime = RuntimeConfig.from_env()

        assert runtime.page_size == DEFAULT_PAGE_SIZE
        assert runtime.config_dir is None
        assert runtime.debug_mode is False
        assert runtime.mock is False

    def test_environment_overrides(self, clean_env, tmp_path):
        clean_env.setenv("MONGOTAB_CONFIG_DIR", str(tmp_path))
        clean_env.setenv("MONGOTAB_PAGE_SIZE", "50")
        clean_env.setenv("MONGOTAB_DEBUG", "yes")
        clean_env.setenv("MONGOTAB_SAVE_TIMEOUT_S", "0.5")

        runtime = RuntimeConfig.from_env()

        assert runtime.resolved_config_dir == tmp_path
        assert runtime.page_size == 50
        assert runtime.debug_mode is True
        assert runtime.save_timeout_s == 0.5

    @pytest.mark.parametrize("value", ["zero", "0", "-4", ""])
    def test_bad_page_size_falls_back(self, clean_env, value):
        clean_env.setenv("MONGOTAB_PAGE_SIZE", value)

        assert RuntimeConfig.from_env().page_size == DEFAULT_PAGE_SIZE

    def test_config_dir_follows_xdg(self, clean_env, tmp_path):
        clean_env.setenv("XDG_CONFIG_HOME", str(tmp_path))

        assert default_config_dir() == tmp_path / "mongotab"


class TestLogging:
    """Records must never reach the terminal the TUI draws on."""

    @pytest.fixture(autouse=True)
    def _restore_handlers(self):
        logger = logging.getLogger("mongotab")
        handlers = list(logger.handlers)
        level = logger.level
        yield
        for handler in logger.handlers:
            if handler not in handlers:
                handler.close()
        logger.handlers = handlers
        logger.setLevel(level)

    def test_without_file_installs_null_handler(self):
        assert configure_logging(None) is None
        assert any(isinstance(h, logging.NullHandler) for h in logging.getLogger("mongotab").handlers)

    def test_file_handler_writes_records(self, tmp_path: Path):
        log_file = tmp_path / "logs" / "mongotab.log"

        handler = configure_logging(log_file, debug=True)
        logging.getLogger("mongotab.test").debug("hello from the test")
        handler.flush()

        assert "hello from the test" in log_file.read_text(encoding="utf-8")
