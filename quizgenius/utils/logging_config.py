"""Logging configuration helpers for QuizGenius."""

from __future__ import annotations

import logging
from logging import Logger
import os


def configure_logging(level: str | None = None) -> Logger:
    """Configure root logging once and return the application logger.

    The level defaults to ``QUIZGENIUS_LOG_LEVEL`` from the environment, then INFO.
    """
    level_name = (level or os.environ.get("QUIZGENIUS_LOG_LEVEL") or "INFO").upper()
    logging.basicConfig(
        level=getattr(logging, level_name, logging.INFO),
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
    )
    return logging.getLogger("quizgenius")
