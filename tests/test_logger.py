"""Tests for loguru setup."""

import logging

from loguru import logger

from schedking.core.logger import setup_structured_logging


def test_setup_console_only(tmp_path):
    """Console logging does not create a log file."""
    setup_structured_logging("INFO", json_format=False, logs_dir=tmp_path)

    assert list(tmp_path.iterdir()) == []


def test_setup_json_file(tmp_path):
    """JSON logging writes serialized records."""
    setup_structured_logging("INFO", json_format=True, logs_dir=tmp_path)
    logger.info("hello")
    logger.complete()

    log_file = tmp_path / "schedking.jsonl"
    assert log_file.exists()
    assert '"hello"' in log_file.read_text()


def test_stdlib_logging_is_intercepted(tmp_path):
    """Standard logging records reach loguru sinks."""
    setup_structured_logging("DEBUG", json_format=False, logs_dir=tmp_path)
    messages = []
    handler_id = logger.add(lambda message: messages.append(message.record["message"]))
    try:
        logging.getLogger("some.library").warning("from stdlib")
    finally:
        logger.remove(handler_id)

    assert "from stdlib" in messages
    assert logging.getLogger("aiohttp").level == logging.WARNING
