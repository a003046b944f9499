"""
BLE tracker detection package for TrackerWatch.

Classifies advertisements from AirTag / Find My, Tile, Samsung SmartTag and
Chipolo trackers, correlates them per address during a scan session, and
flags trackers that appear to be travelling with the observer.
"""

from .classifier import classify, classify_event, classify_payload, read_company_id
from .constants import (
    APPLE_COMPANY_ID,
    TILE_COMPANY_ID,
    SAMSUNG_COMPANY_ID,
    CHIPOLO_COMPANY_ID,
    SCAN_STATUS_COMPLETE,
    SCAN_STATUS_CANCELLED,
    SCAN_STATUS_RADIO_INIT_FAILED,
)
from .models import (
    AdvertisementEvent,
    DeviceClassification,
    DeviceType,
    ScanResult,
    ScanState,
    ScanStatus,
    TrackedDevice,
)
from .persistence import PersistenceAnalyzer, analyze
from .radio import BleakRadio, RadioInitError, event_from_advertisement
from .registry import DeviceRegistry
from .scanner import TrackerScanner, get_tracker_scanner, reset_tracker_scanner
from .session import ScanConfig, ScanSession

__all__ = [
    # Classification
    'classify',
    'classify_event',
    'classify_payload',
    'read_company_id',

    # Models
    'AdvertisementEvent',
    'DeviceClassification',
    'DeviceType',
    'TrackedDevice',
    'ScanResult',
    'ScanState',
    'ScanStatus',

    # Registry and analysis
    'DeviceRegistry',
    'PersistenceAnalyzer',
    'analyze',

    # Session
    'ScanConfig',
    'ScanSession',

    # Radio
    'BleakRadio',
    'RadioInitError',
    'event_from_advertisement',

    # Background scanner
    'TrackerScanner',
    'get_tracker_scanner',
    'reset_tracker_scanner',

    # Constants
    'APPLE_COMPANY_ID',
    'TILE_COMPANY_ID',
    'SAMSUNG_COMPANY_ID',
    'CHIPOLO_COMPANY_ID',
    'SCAN_STATUS_COMPLETE',
    'SCAN_STATUS_CANCELLED',
    'SCAN_STATUS_RADIO_INIT_FAILED',
]
