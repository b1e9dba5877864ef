"""
Logging Configuration for the Globe Projection Engine.

All modules obtain their logger through `get_logger(__name__)` so that
output format and handlers stay consistent across the projection,
tessellation and graticule layers.

Logging Policy
--------------
The core never raises for geometric degeneracies. Instead, noteworthy
conditions are reported at DEBUG level so that a render pass can be
diagnosed without slowing down the normal path:

- latitude clamping against a projection's valid band
- tessellation hitting the node cap
- degenerate viewports producing empty results
- graticule (re)generation and cache invalidation

Failed validation checks are reported at WARNING level.
"""

import logging
import sys
from contextlib import contextmanager
from typing import Iterator


# Configure root logger for the package
def get_logger(name: str, level: int = logging.INFO) -> logging.Logger:
    """Get a logger configured for the globe projection engine.

    Parameters
    ----------
    name : str
        Logger name (typically __name__).
    level : int
        Logging level.

    Returns
    -------
    logging.Logger
        Configured logger instance.
    """
    logger = logging.getLogger(name)

    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        formatter = logging.Formatter(
            '%(asctime)s | %(name)s | %(levelname)s | %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    logger.setLevel(level)
    return logger


@contextmanager
def debug_logging(name: str) -> Iterator[logging.Logger]:
    """Temporarily lower a logger to DEBUG level.

    Useful when diagnosing a single render pass, e.g. to see where a
    line string was split at the horizon.

    Parameters
    ----------
    name : str
        Logger name, as passed to `get_logger`.

    Yields
    ------
    logging.Logger
        The logger, set to DEBUG for the duration of the block.
    """
    logger = logging.getLogger(name)
    previous = logger.level
    logger.setLevel(logging.DEBUG)
    try:
        yield logger
    finally:
        logger.setLevel(previous)
