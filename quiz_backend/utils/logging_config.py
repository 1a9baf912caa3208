"""Logging configuration helpers for the quiz backend."""

import logging
import sys


def configure_logging(level: str = "INFO") -> logging.Logger:
    """Configure root logging to stdout and return the package logger."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[
            logging.StreamHandler(sys.stdout)
        ]
    )
    return logging.getLogger("quiz_backend")
