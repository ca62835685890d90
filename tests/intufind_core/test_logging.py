"""Unit tests for logging setup."""

import logging
import sys

import pytest
from loguru import logger

from intufind_core.config import Settings
from intufind_core.logging import InterceptHandler, setup_logging


@pytest.fixture
def restore_logging():
    root_handlers = logging.getLogger().handlers[:]
    root_level = logging.getLogger().level
    yield
    logger.remove()
    logger.add(sys.stderr)
    logging.getLogger().handlers = root_handlers
    logging.getLogger().setLevel(root_level)
    for name in ["httpx", "httpcore"]:
        logging.getLogger(name).handlers = []
        logging.getLogger(name).propagate = True


class TestSetupLogging:
    """Tests for loguru configuration."""

    def test_writes_to_sink(self, restore_logging):
        lines = []

        setup_logging(level="INFO", sink=lines.append)
        logger.info("hello")
        logger.debug("hidden")

        assert any("Logging initialized with Loguru (level=INFO)." in line for line in lines)
        assert any("hello" in line for line in lines)
        assert not any("hidden" in line for line in lines)

    def test_intercepts_http_library_logging(self, restore_logging):
        lines = []

        setup_logging(level="DEBUG", sink=lines.append)
        logging.getLogger("httpx").info("HTTP Request: GET http://api.test/x")

        assert isinstance(logging.getLogger("httpx").handlers[0], InterceptHandler)
        assert any("HTTP Request: GET http://api.test/x" in line for line in lines)

    def test_intercepts_root_logging(self, restore_logging):
        lines = []

        setup_logging(level="DEBUG", sink=lines.append)
        logging.getLogger("some.library").warning("careful")

        assert any("WARNING" in line and "careful" in line for line in lines)

    def test_level_defaults_to_settings(self, restore_logging, monkeypatch):
        lines = []
        monkeypatch.setattr(
            "intufind_core.logging.settings",
            Settings(LOG_LEVEL="WARNING", _env_file=None),
        )

        setup_logging(sink=lines.append)
        logger.info("quiet")
        logger.warning("loud")

        assert not any("quiet" in line for line in lines)
        assert any("loud" in line for line in lines)
