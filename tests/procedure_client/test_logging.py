"""Tests for loguru setup."""

import logging
import sys

import pytest
from loguru import logger

from procedure_client.logging import setup_logging


@pytest.fixture
def restore_loguru():
    yield
    logger.remove()
    logger.add(sys.stderr)


def test_routes_stdlib_logging_to_loguru(restore_loguru):
    """Should forward httpx's stdlib logger to loguru sinks."""
    setup_logging("DEBUG")
    messages = []
    logger.add(lambda message: messages.append(message.record["message"]), level="DEBUG")

    logging.getLogger("httpx").info("HTTP Request: GET http://router.test/q")

    assert messages == ["HTTP Request: GET http://router.test/q"]
