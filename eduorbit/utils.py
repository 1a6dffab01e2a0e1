"""
Utility helpers for the EduOrbit graph engine.

Provides:
- Structured logging configuration with timestamps.
- Wall-clock timing of pipeline steps.
- RNG construction for reproducible layouts.
"""

import contextlib
import logging
import time
from typing import Generator, Optional

import numpy as np

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Logging setup
# ---------------------------------------------------------------------------


def setup_logging(
    level: int = logging.INFO,
    fmt: str = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
    datefmt: str = "%Y-%m-%dT%H:%M:%S%z",
) -> None:
    """Configure the root logger with timestamped structured output."""
    logging.basicConfig(level=level, format=fmt, datefmt=datefmt, force=True)


@contextlib.contextmanager
def timed(label: str) -> Generator[None, None, None]:
    """Context manager that logs elapsed wall-clock time for *label*."""
    t0 = time.monotonic()
    yield
    elapsed = time.monotonic() - t0
    logger.debug("%s completed in %.4fs.", label, elapsed)


# ---------------------------------------------------------------------------
# Determinism
# ---------------------------------------------------------------------------


def make_rng(seed: Optional[int] = None) -> np.random.Generator:
    """Return a numpy ``Generator``; unseeded when *seed* is ``None``."""
    return np.random.default_rng(seed)
