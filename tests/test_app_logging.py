"""Tests for logging configuration."""

import logging

from calorie_hound.app_logging import configure_logging


def test_configure_logging_idempotent() -> None:
    logger = logging.getLogger("calorie_hound")
    logger.handlers.clear()

    configure_logging()
    first_count = len(logger.handlers)

    configure_logging()
    second_count = len(logger.handlers)

    assert first_count == 1
    assert second_count == 1


def test_configure_logging_uses_timestamped_format_and_level() -> None:
    logger = logging.getLogger("calorie_hound")
    logger.handlers.clear()

    configure_logging("debug")

    assert logger.level == logging.DEBUG
    assert logger.handlers[0].formatter is not None
    assert "%(asctime)s" in logger.handlers[0].formatter._fmt  # noqa: SLF001

    configure_logging()
    assert logger.level == logging.INFO
