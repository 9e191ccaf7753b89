"""
Unit tests for logging helpers.
"""
import logging

import pytest

from core.infrastructure.logging import LOG_FORMAT, configure_logging, get_logger


def test_get_logger_adds_single_handler():
    logger = get_logger("orchestration.test_logging")
    again = get_logger("orchestration.test_logging")

    assert logger is again
    assert len(logger.handlers) == 1
    assert logger.handlers[0].formatter._fmt == LOG_FORMAT


def test_configure_logging_sets_project_loggers():
    logger = get_logger("orchestration.test_configure")
    try:
        configure_logging("debug")
        assert logger.level == logging.DEBUG
    finally:
        configure_logging("INFO")


def test_configure_logging_rejects_unknown_level():
    with pytest.raises(ValueError):
        configure_logging("LOUD")
