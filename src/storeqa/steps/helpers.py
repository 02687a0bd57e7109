"""Small utilities shared by step definitions."""

from __future__ import annotations

import logging
import random
import threading
import time
from collections.abc import Iterator
from contextlib import contextmanager

logger = logging.getLogger(__name__)

EMAIL_DOMAIN = "example.com"


def unique_email(prefix: str = "test.customer") -> str:
    """Build an address unlikely to collide across runs and worker threads."""
    timestamp = int(time.time() * 1000)
    thread_id = threading.get_ident()
    suffix = random.randint(1000, 9999)
    return f"{prefix}.{timestamp}.{thread_id}.{suffix}@{EMAIL_DOMAIN}"


def log_step(name: str, details: str = "") -> None:
    logger.info("TEST STEP: %s - %s", name, details)


@contextmanager
def timed(operation: str) -> Iterator[None]:
    """Log how long the block took, whether or not it raised."""
    logger.debug("Starting operation: %s", operation)
    start = time.perf_counter()
    try:
        yield
    finally:
        elapsed_ms = (time.perf_counter() - start) * 1000
        logger.info("Operation '%s' completed in %.0fms", operation, elapsed_ms)
