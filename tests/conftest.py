from __future__ import annotations

import logging
from typing import Iterator

import pytest

from wiki_revision_reader.logging_setup import PACKAGE_LOGGER


@pytest.fixture(autouse=True)
def reset_package_logger() -> Iterator[None]:
    """Drop handlers added by CLI invocations so they don't outlive the test."""
    logger = logging.getLogger(PACKAGE_LOGGER)
    level = logger.level
    yield
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.setLevel(level)
