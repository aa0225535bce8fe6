"""
Tests for the logger factory
"""
import logging
import sys

import pytest

from profmatch.config.settings import Settings
from profmatch.src.utils.logger import get_logger, resolve_level


class TestResolveLevel:

    @pytest.mark.parametrize("env, expected", [("dev", logging.DEBUG), ("prod", logging.WARNING)])
    def test_env_default(self, env, expected):
        assert resolve_level(env) == expected

    def test_explicit_level_wins(self):
        assert resolve_level("dev", "ERROR") == logging.ERROR
        assert resolve_level("prod", "info") == logging.INFO


class TestLogLevelSetting:

    def test_blank_means_unset(self):
        assert Settings(GOOGLE_API_KEY="k", LOG_LEVEL=" ").LOG_LEVEL is None

    def test_case_insensitive(self):
        assert Settings(GOOGLE_API_KEY="k", LOG_LEVEL="warning").LOG_LEVEL == "WARNING"


class TestGetLogger:

    def test_handler_uses_configured_format(self):
        logger = get_logger("profmatch.tests.format")
        handler = logger.handlers[0]

        assert handler.stream is sys.stdout
        assert handler.formatter._fmt == "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
        assert logger.propagate is False

    def test_explicit_level(self):
        logger = get_logger("profmatch.tests.level", level=logging.ERROR)
        assert logger.level == logging.ERROR

    def test_no_duplicate_handlers(self):
        first = get_logger("profmatch.tests.repeat")
        second = get_logger("profmatch.tests.repeat")
        assert first is second
        assert len(second.handlers) == 1
