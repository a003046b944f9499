"""
Data models for BLE tracker detection.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional

from .constants import (
    SCAN_STATUS_COMPLETE,
    UNKNOWN_NAME,
)


class DeviceType(str, Enum):
    """Device types recognised from manufacturer data."""
    APPLE_FINDMY = 'apple_findmy'
    TILE = 'tile'
    SAMSUNG_SMARTTAG = 'samsung_smarttag'
    CHIPOLO = 'chipolo'
    APPLE_DEVICE = 'apple_device'
    UNKNOWN = 'unknown'

    @property
    def label(self) -> str:
        return DEVICE_TYPE_LABELS[self]


DEVICE_TYPE_LABELS = {
    DeviceType.APPLE_FINDMY: 'Apple AirTag/FindMy',
    DeviceType.TILE: 'Tile Tracker',
    DeviceType.SAMSUNG_SMARTTAG: 'Samsung SmartTag',
    DeviceType.CHIPOLO: 'Chipolo Tracker',
    DeviceType.APPLE_DEVICE: 'Apple Device',
    DeviceType.UNKNOWN: 'Unknown',
}


class ScanState(str, Enum):
    """Scan session lifecycle states."""
    IDLE = 'idle'
    SCANNING = 'scanning'
    ANALYZING = 'analyzing'
    REPORTING = 'reporting'


@dataclass(frozen=True)
class AdvertisementEvent:
    """A single advertisement as delivered by the radio."""

    address: str
    rssi: int
    manufacturer_data: bytes = b''
    display_name: Optional[str] = None


@dataclass(frozen=True)
class DeviceClassification:
    """Outcome of classifying one advertisement payload."""

    device_type: DeviceType = DeviceType.UNKNOWN
    is_tracker_candidate: bool = False


@dataclass
class TrackedDevice:
    """A tracker seen during the current scan session."""

    address: str
    device_type: DeviceType
    last_rssi: int
    first_seen_at: int  # milliseconds
    last_seen_at: int   # milliseconds
    display_name: str = ''
    observation_count: int = 1
    is_persistent: bool = False

    @property
    def span_ms(self) -> int:
        """Time between first and last observation."""
        return self.last_seen_at - self.first_seen_at

    @property
    def label(self) -> str:
        """Type label, with the advertised name appended when known."""
        label = self.device_type.label
        if self.display_name and self.display_name != UNKNOWN_NAME:
            label += f' ({self.display_name})'
        return label

    def to_record(self) -> dict:
        """Summary record for result listings."""
        return {
            'label': self.label,
            'type': self.device_type.value,
            'address': self.address,
            'rssi': self.last_rssi,
            'observation_count': self.observation_count,
            'is_persistent': self.is_persistent,
        }

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        record = self.to_record()
        record.update({
            'type_label': self.device_type.label,
            'name': self.display_name or UNKNOWN_NAME,
            'first_seen_at': self.first_seen_at,
            'last_seen_at': self.last_seen_at,
            'span_ms': self.span_ms,
        })
        return record


@dataclass(frozen=True)
class ScanResult:
    """Read-only outcome of one scan session."""

    status: str = SCAN_STATUS_COMPLETE
    devices: tuple[TrackedDevice, ...] = ()
    has_persistent_threat: bool = False
    error: Optional[str] = None
    started_at: Optional[datetime] = None
    duration_ms: int = 0
    dropped_count: int = 0

    @property
    def device_count(self) -> int:
        return len(self.devices)

    def get_device(self, address: str) -> Optional[TrackedDevice]:
        address = address.upper()
        for device in self.devices:
            if device.address.upper() == address:
                return device
        return None

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            'status': self.status,
            'error': self.error,
            'started_at': self.started_at.isoformat() if self.started_at else None,
            'duration_ms': self.duration_ms,
            'device_count': self.device_count,
            'dropped_count': self.dropped_count,
            'has_persistent_threat': self.has_persistent_threat,
            'devices': [d.to_record() for d in self.devices],
        }


@dataclass
class ScanStatus:
    """Current state of the scan session."""

    state: ScanState = ScanState.IDLE
    device_count: int = 0
    dropped_count: int = 0
    elapsed_seconds: Optional[float] = None
    duration_seconds: Optional[float] = None
    last_status: Optional[str] = None
    error: Optional[str] = None

    @property
    def is_scanning(self) -> bool:
        return self.state == ScanState.SCANNING

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            'state': self.state.value,
            'is_scanning': self.is_scanning,
            'device_count': self.device_count,
            'dropped_count': self.dropped_count,
            'elapsed_seconds': round(self.elapsed_seconds, 1) if self.elapsed_seconds is not None else None,
            'duration_seconds': self.duration_seconds,
            'last_status': self.last_status,
            'error': self.error,
        }
