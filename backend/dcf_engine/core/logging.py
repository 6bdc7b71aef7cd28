"""
logging.py — Application-Wide Logging Configuration

Purpose:
- Configure a standardized logging format for the entire backend.
- Ensure consistency across API requests, scenario runs and sensitivity sweeps.

Notes:
- The projection engine logs at DEBUG only; it is called hundreds of times
  per sweep and must stay quiet at INFO.
- Sweeps wrap their runs in `engine_log_level` so per-run DEBUG lines do not
  drown out the sweep summary even when the root level is DEBUG.
- Uniform formatting: timestamp | level | module | message
"""

import logging
from contextlib import contextmanager
from typing import Iterator

# -----------------------------------------------------------------------------
# Log Format
# -----------------------------------------------------------------------------

LOG_FORMAT = (
    "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
)

# -----------------------------------------------------------------------------
# Root Logger Initialization
# -----------------------------------------------------------------------------

def configure_logging(level: str = "INFO") -> None:
    """
    Configure root logging settings.

    Parameters:
        level (str): "DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"

    Behavior:
    - Sets logging format globally.
    - Ensures logs stream to stdout (Uvicorn picks this up).
    - Should be called ONCE, typically in `main.py` at app startup.
    """

    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=LOG_FORMAT
    )

    logging.getLogger(__name__).info("Logging initialized with level %s", level)

# -----------------------------------------------------------------------------
# Logger Access Helper
# -----------------------------------------------------------------------------

def get_logger(name: str) -> logging.Logger:
    """
    Return a logger instance to be used in any module.

    In any module:
        from dcf_engine.core.logging import get_logger
        logger = get_logger(__name__)
        logger.info("something happened")
    """
    return logging.getLogger(name)

# -----------------------------------------------------------------------------
# Engine Loggers
# -----------------------------------------------------------------------------

# Loggers that emit one record per engine run
ENGINE_LOGGERS = (
    "dcf_engine.services.modeling.engine",
    "dcf_engine.services.modeling.sanitizer",
)


@contextmanager
def engine_log_level(level: int) -> Iterator[None]:
    """
    Temporarily set the per-run engine loggers to `level`.

    Usage:
        with engine_log_level(logging.INFO):
            for cell in grid:
                run_model(...)

    Previous levels are restored on exit, including on error.
    """
    loggers = [logging.getLogger(name) for name in ENGINE_LOGGERS]
    previous = [logger.level for logger in loggers]
    for logger in loggers:
        logger.setLevel(level)
    try:
        yield
    finally:
        for logger, old_level in zip(loggers, previous):
            logger.setLevel(old_level)
