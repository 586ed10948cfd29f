"""Logging configuration helpers for the quiz portal."""

from __future__ import annotations

import logging
from logging import Logger


def configure_logging(level: str = "INFO") -> Logger:
    """Configure basic logging for the portal and return its package logger."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
    )
    return logging.getLogger("quiz_portal")
