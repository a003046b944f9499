"""Configuration settings for the TrackerWatch application."""

from __future__ import annotations

import logging
import os
import sys

# Application version
VERSION = "1.0.0"


def _get_env(key: str, default: str) -> str:
    """Get environment variable with default."""
    return os.environ.get(f'TRACKERWATCH_{key}', default)


def _get_env_int(key: str, default: int) -> int:
    """Get environment variable as integer with default."""
    try:
        return int(os.environ.get(f'TRACKERWATCH_{key}', str(default)))
    except ValueError:
        return default


def _get_env_float(key: str, default: float) -> float:
    """Get environment variable as float with default."""
    try:
        return float(os.environ.get(f'TRACKERWATCH_{key}', str(default)))
    except ValueError:
        return default


def _get_env_bool(key: str, default: bool) -> bool:
    """Get environment variable as boolean with default."""
    val = os.environ.get(f'TRACKERWATCH_{key}', '').lower()
    if val in ('true', '1', 'yes', 'on'):
        return True
    if val in ('false', '0', 'no', 'off'):
        return False
    return default


# Logging configuration
_log_level_str = _get_env('LOG_LEVEL', 'INFO').upper()
LOG_LEVEL = getattr(logging, _log_level_str, logging.INFO)
LOG_FORMAT = _get_env('LOG_FORMAT', '%(asctime)s - %(name)s - %(levelname)s - %(message)s')

# Server settings
HOST = _get_env('HOST', '127.0.0.1')
PORT = _get_env_int('PORT', 5050)
DEBUG = _get_env_bool('DEBUG', False)

# Scan settings
SCAN_DURATION = _get_env_float('SCAN_DURATION', 30.0)
REGISTRY_CAPACITY = _get_env_int('REGISTRY_CAPACITY', 50)
POLL_INTERVAL = _get_env_float('POLL_INTERVAL', 1.0)

# Persistence thresholds
PERSISTENT_COUNT = _get_env_int('PERSISTENT_COUNT', 3)
PERSISTENT_DURATION_MS = _get_env_int('PERSISTENT_DURATION_MS', 300000)

# Radio settings
BT_ADAPTER = _get_env('BT_ADAPTER', '')
RADIO_START_TIMEOUT = _get_env_float('RADIO_START_TIMEOUT', 10.0)


def configure_logging() -> None:
    """Configure application logging."""
    logging.basicConfig(
        level=LOG_LEVEL,
        format=LOG_FORMAT,
        stream=sys.stderr
    )
    logging.getLogger('trackerwatch').setLevel(LOG_LEVEL)
    # Keep bleak/werkzeug chatter at the application level
    logging.getLogger('werkzeug').setLevel(LOG_LEVEL)
    logging.getLogger('bleak').setLevel(max(LOG_LEVEL, logging.INFO))
