"""
Shared fixtures

log_records captures loguru records so tests can assert on warnings.
"""

import pytest
from loguru import logger


@pytest.fixture
def log_records():
    """Collect (level, message) tuples for WARNING and above"""
    records = []
    handler_id = logger.add(
        lambda message: records.append((message.record["level"].name, message.record["message"])),
        level="WARNING",
    )
    yield records
    logger.remove(handler_id)
