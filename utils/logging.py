"""Logging helpers for TrackerWatch."""

from __future__ import annotations

import logging


def get_logger(name: str) -> logging.Logger:
    """
    Get a named logger.

    Loggers live under the 'trackerwatch' hierarchy so the application log
    level set by config.configure_logging() applies to all of them.
    """
    if name != 'trackerwatch' and not name.startswith('trackerwatch.'):
        name = f'trackerwatch.{name}'
    return logging.getLogger(name)


# Pre-configured loggers
app_logger = get_logger('trackerwatch')
