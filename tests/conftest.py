"""Shared pytest fixtures."""

import pytest
from loguru import logger


@pytest.fixture
def error_logs():
    """Collect ERROR-level loguru messages emitted during a test."""
    messages: list[str] = []
    handler_id = logger.add(lambda m: messages.append(m.record["message"]), level="ERROR")
    yield messages
    logger.remove(handler_id)
