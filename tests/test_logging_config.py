"""Tests for logging_config.py."""

import logging

from logging_config import LOGGER_NAME, configure_logging


class TestConfigureLogging:
    """Tests for configure_logging function."""

    def test_default_level(self, monkeypatch):
        monkeypatch.delenv("TIMEFLOW_LOG_LEVEL", raising=False)
        logger = configure_logging()

        assert logger.name == LOGGER_NAME
        assert logger.level == logging.INFO
        assert len(logger.handlers) == 1

    def test_level_from_environment(self, monkeypatch):
        monkeypatch.setenv("TIMEFLOW_LOG_LEVEL", "debug")
        assert configure_logging().level == logging.DEBUG

    def test_argument_beats_environment(self, monkeypatch):
        monkeypatch.setenv("TIMEFLOW_LOG_LEVEL", "debug")
        assert configure_logging("warning").level == logging.WARNING

    def test_unknown_level_falls_back_to_info(self):
        assert configure_logging("chatty").level == logging.INFO

    def test_repeat_calls_keep_one_handler(self):
        configure_logging()
        configure_logging()
        assert len(logging.getLogger(LOGGER_NAME).handlers) == 1

    def test_module_loggers_are_children(self):
        import ledger

        assert ledger.logger.parent is logging.getLogger(LOGGER_NAME)
