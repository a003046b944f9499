"""
Advertisement classifier for BLE tracker detection.

Identifies Apple AirTag / Find My accessories, Tile trackers, Samsung
SmartTags and Chipolo trackers from the manufacturer data of a single
advertisement. Classification is a pure lookup:

1. Read the company identifier (first two bytes, little-endian)
2. Look up the company identifier in the vendor table
3. For Apple, refine using the payload type byte

Every input maps to a classification. Payloads too short to carry a
company identifier or an Apple type byte are simply UNKNOWN and never
tracker candidates.
"""

from __future__ import annotations

from typing import Optional

from .constants import (
    APPLE_COMPANY_ID,
    APPLE_TYPE_FINDMY,
    APPLE_TYPE_IBEACON,
    APPLE_TYPE_INDEX,
    APPLE_TYPE_OFFLINE_FINDING,
    CHIPOLO_COMPANY_ID,
    COMPANY_ID_LENGTH,
    SAMSUNG_COMPANY_ID,
    TILE_COMPANY_ID,
)
from .models import AdvertisementEvent, DeviceClassification, DeviceType


# =============================================================================
# CLASSIFICATION TABLES
# =============================================================================

NOT_A_TRACKER = DeviceClassification(DeviceType.UNKNOWN, False)

# Vendors whose every advertisement is a tracker
VENDOR_CLASSIFICATIONS: dict[int, DeviceClassification] = {
    TILE_COMPANY_ID: DeviceClassification(DeviceType.TILE, True),
    SAMSUNG_COMPANY_ID: DeviceClassification(DeviceType.SAMSUNG_SMARTTAG, True),
    CHIPOLO_COMPANY_ID: DeviceClassification(DeviceType.CHIPOLO, True),
}

# Apple shares one company ID across phones, watches, AirPods and AirTags,
# so the payload type byte decides
APPLE_CLASSIFICATIONS: dict[int, DeviceClassification] = {
    APPLE_TYPE_FINDMY: DeviceClassification(DeviceType.APPLE_FINDMY, True),
    APPLE_TYPE_OFFLINE_FINDING: DeviceClassification(DeviceType.APPLE_FINDMY, True),
    APPLE_TYPE_IBEACON: DeviceClassification(DeviceType.APPLE_DEVICE, False),
}


def read_company_id(manufacturer_data: Optional[bytes]) -> Optional[int]:
    """
    Extract the company identifier from raw manufacturer data.

    Returns:
        The 16-bit company ID, or None if the payload is too short.
    """
    if not manufacturer_data or len(manufacturer_data) < COMPANY_ID_LENGTH:
        return None
    return manufacturer_data[0] | (manufacturer_data[1] << 8)


def classify(company_id: Optional[int], manufacturer_data: Optional[bytes]) -> DeviceClassification:
    """
    Classify an advertisement from its company ID and raw manufacturer data.

    Args:
        company_id: Company identifier read from the payload (None if unreadable).
        manufacturer_data: Raw manufacturer data including the company ID bytes.

    Returns:
        DeviceClassification with the device type and tracker-candidate flag.
    """
    data = manufacturer_data or b''
    if company_id is None or len(data) < COMPANY_ID_LENGTH:
        return NOT_A_TRACKER

    if company_id == APPLE_COMPANY_ID:
        if len(data) <= APPLE_TYPE_INDEX:
            return NOT_A_TRACKER
        return APPLE_CLASSIFICATIONS.get(data[APPLE_TYPE_INDEX], NOT_A_TRACKER)

    return VENDOR_CLASSIFICATIONS.get(company_id, NOT_A_TRACKER)


def classify_payload(manufacturer_data: Optional[bytes]) -> DeviceClassification:
    """Classify raw manufacturer data, reading the company ID from it."""
    return classify(read_company_id(manufacturer_data), manufacturer_data)


def classify_event(event: AdvertisementEvent) -> DeviceClassification:
    """Classify a radio advertisement event."""
    return classify_payload(event.manufacturer_data)
