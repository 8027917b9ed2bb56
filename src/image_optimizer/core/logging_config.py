"""Centralized logging configuration for the image optimizer.

Every component logs through a named logger (``handler``, ``backfill``,
``storage``, ``transform``, ``cli``). A logger gets its stdout handler and
initial level the first time it is requested; later lookups return it as is,
so a level switched at runtime (``--debug``) sticks.

Environment Variables:
    LOG_LEVEL: Initial level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    LOG_FORMAT: "structured" or "simple"
"""

import os
import sys
import logging
from typing import Optional

STRUCTURED_FORMAT = (
    "%(asctime)s | %(name)s | %(levelname)-8s | "
    "%(filename)s:%(lineno)d | %(funcName)s() | %(message)s"
)
SIMPLE_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def _resolve_level(level: Optional[str]) -> int:
    name = (level or os.getenv("LOG_LEVEL", "INFO")).upper()
    resolved = getattr(logging, name, logging.INFO)
    return resolved if isinstance(resolved, int) else logging.INFO


def _build_formatter(format_type: str) -> logging.Formatter:
    if os.getenv("LOG_FORMAT", format_type).lower() == "structured":
        return logging.Formatter(STRUCTURED_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")
    return logging.Formatter(SIMPLE_FORMAT)


def setup_logger(
    name: str = "image-optimizer",
    level: Optional[str] = None,
    format_type: str = "structured",
) -> logging.Logger:
    """
    Return the named logger, attaching a stdout handler on first use.

    Args:
        name: Logger name (defaults to "image-optimizer")
        level: Explicit level; always applied when given. Without it the
            LOG_LEVEL/INFO default is only applied on first configuration.
        format_type: Logging format ("structured" or "simple")
    """
    logger = logging.getLogger(name)

    # Warm Lambda containers reuse loggers across invocations
    first_use = not logger.handlers
    if first_use:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(_build_formatter(format_type))
        logger.addHandler(handler)
        logger.propagate = False

    if level or first_use:
        logger.setLevel(_resolve_level(level))
    return logger


def get_logger(name: str = "image-optimizer") -> logging.Logger:
    """Named logger with the shared handler; never changes an existing level."""
    return setup_logger(name)


def set_debug_logging(*names: str) -> None:
    """Switch the given loggers (and the root logger) to DEBUG."""
    for name in names:
        setup_logger(name, level="DEBUG")
    logging.getLogger().setLevel(logging.DEBUG)


logger = setup_logger()
