"""
Logging utilities for applications and scripts embedding the token store.

Provides a consistent logging format and configuration.
"""

import logging
import sys
from typing import TextIO

from .config import DEFAULT_LOG_FORMAT


def configure_logging(
    level: str = "INFO",
    fmt: str = DEFAULT_LOG_FORMAT,
    stream: TextIO | None = None,
) -> None:
    """Configure root logging; records go to stdout unless ``stream`` is given."""
    logging.basicConfig(
        level=level.upper(),
        format=fmt,
        stream=stream or sys.stdout,
    )


__all__ = ["configure_logging"]
