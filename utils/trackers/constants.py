"""
Constants for BLE tracker detection.

Company identifiers are Bluetooth SIG assigned numbers. Apple payload types
are the first byte after the company identifier in the manufacturer data.
"""

from __future__ import annotations

# =============================================================================
# COMPANY IDENTIFIERS
# =============================================================================

APPLE_COMPANY_ID = 0x004C
TILE_COMPANY_ID = 0x0097
SAMSUNG_COMPANY_ID = 0x0075
CHIPOLO_COMPANY_ID = 0x0349

# Company identifier occupies the first two bytes, little-endian
COMPANY_ID_LENGTH = 2

# =============================================================================
# APPLE PAYLOAD TYPES
# =============================================================================

# Index of the Apple type byte within the raw manufacturer data
APPLE_TYPE_INDEX = 2

APPLE_TYPE_FINDMY = 0x12          # Find My network / AirTag
APPLE_TYPE_OFFLINE_FINDING = 0x07  # Offline finding (separated accessory)
APPLE_TYPE_IBEACON = 0x01          # Phones, tablets, laptops

# =============================================================================
# SCAN DEFAULTS
# =============================================================================

DEFAULT_SCAN_DURATION_SECONDS = 30
DEFAULT_REGISTRY_CAPACITY = 50

# Distinct refused addresses remembered per session; dropped_count saturates here
MAX_DROPPED_ADDRESSES = 1000

# Seen this many times within one session = potential stalking
DEFAULT_PERSISTENT_COUNT = 3

# Observed across this many milliseconds = potential stalking (5 minutes)
DEFAULT_PERSISTENT_DURATION_MS = 300000

# Coarse polling interval for duration / cancellation checks
DEFAULT_POLL_INTERVAL_SECONDS = 1.0

# =============================================================================
# SCAN STATUS
# =============================================================================

SCAN_STATUS_COMPLETE = 'complete'
SCAN_STATUS_CANCELLED = 'cancelled'
SCAN_STATUS_RADIO_INIT_FAILED = 'radio_init_failed'

# Name placeholder used by presentation when a tracker never advertised one
UNKNOWN_NAME = 'Unknown'
