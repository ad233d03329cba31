"""Unified logging configuration for connectgen."""
from __future__ import annotations

import logging
import os
from pathlib import Path

from .settings import LOG_DIR as _DEFAULT_LOG_DIR

# Prevent duplicate handlers
_configured_loggers: set[str] = set()


def _log_dir() -> Path:
    path = Path(os.getenv("CONNECTGEN_LOG_DIR", _DEFAULT_LOG_DIR))
    path.mkdir(parents=True, exist_ok=True)
    return path


def setup_logger(name: str, filename: str) -> logging.Logger:
    """Setup a logger with file and console handlers.

    Args:
        name: Logger name (e.g., 'connectgen.run')
        filename: Log file name (e.g., 'run.log')

    Returns:
        Configured logger instance
    """
    if name in _configured_loggers:
        return logging.getLogger(name)

    logger = logging.getLogger(name)
    logger.setLevel(logging.INFO)
    logger.propagate = False  # Prevent duplicate logs

    # File handler
    fh = logging.FileHandler(_log_dir() / filename, encoding="utf-8")
    fh.setLevel(logging.INFO)
    fh.setFormatter(logging.Formatter(
        "%(asctime)s [%(name)s] [%(levelname)s] %(message)s"
    ))

    # Console handler
    sh = logging.StreamHandler()
    sh.setLevel(logging.INFO)
    sh.setFormatter(logging.Formatter(
        "%(asctime)s [%(name)s] %(message)s"
    ))

    logger.addHandler(fh)
    logger.addHandler(sh)

    _configured_loggers.add(name)
    return logger


def get_run_logger() -> logging.Logger:
    """Logger for batch runs (per-component outcomes)."""
    return setup_logger("connectgen.run", "run.log")
