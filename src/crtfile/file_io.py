"""File open primitives with explicit permission control."""

from __future__ import annotations

import logging
import os
from contextlib import contextmanager
from typing import Iterator

logger = logging.getLogger(__name__)

CREATE_FLAGS = os.O_WRONLY | os.O_CREAT | os.O_EXCL
TRUNCATE_FLAGS = os.O_WRONLY | os.O_TRUNC


def create_exclusive(path: str, mode: int) -> None:
    """Create ``path`` with ``mode`` (filtered by the umask); fail if it exists."""
    fd = os.open(path, CREATE_FLAGS, mode)
    os.close(fd)


def truncate_existing(path: str) -> None:
    """Reset an existing file to zero length, keeping its permission bits."""
    fd = os.open(path, TRUNCATE_FLAGS)
    os.close(fd)


@contextmanager
def cleared_umask() -> Iterator[int]:
    """Set the process umask to 0 for the block, restoring it afterwards.

    Yields the previous umask.
    """
    previous = os.umask(0)
    logger.debug("umask cleared (was %s)", oct(previous))
    try:
        yield previous
    finally:
        os.umask(previous)
        logger.debug("umask restored to %s", oct(previous))
