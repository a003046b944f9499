"""
Device registry for one tracker scan session.

Folds classified advertisements into one TrackedDevice per address, bounded
by a fixed capacity.
"""

from __future__ import annotations

import threading
from dataclasses import replace
from typing import Optional

from .constants import DEFAULT_REGISTRY_CAPACITY, MAX_DROPPED_ADDRESSES
from .models import DeviceClassification, TrackedDevice


class DeviceRegistry:
    """
    Bounded, address-keyed table of trackers seen during a scan session.

    Capacity policy: once the table holds `capacity` distinct addresses,
    advertisements from addresses not already tracked are dropped for the
    rest of the session. Existing entries keep updating. Only tracker
    candidates are ever stored.

    Refused addresses are remembered up to `dropped_limit` so rotating
    addresses cannot grow the table without bound.
    """

    def __init__(
        self,
        capacity: int = DEFAULT_REGISTRY_CAPACITY,
        dropped_limit: int = MAX_DROPPED_ADDRESSES,
    ):
        self._capacity = capacity
        self._dropped_limit = dropped_limit
        self._devices: dict[str, TrackedDevice] = {}
        self._dropped: set[str] = set()
        self._lock = threading.Lock()

    def upsert(
        self,
        address: str,
        display_name: Optional[str],
        classification: DeviceClassification,
        rssi: int,
        now: int,
    ) -> Optional[TrackedDevice]:
        """
        Record one advertisement for an address.

        Args:
            address: Device address, the registry key.
            display_name: Advertised name, possibly empty.
            classification: Result of classifying the advertisement.
            rssi: Signal strength in dBm.
            now: Observation time in milliseconds.

        Returns:
            The updated or inserted entry, or None if the advertisement was ignored.
        """
        with self._lock:
            device = self._devices.get(address)

            if device is not None:
                device.last_seen_at = now
                device.observation_count += 1
                device.last_rssi = rssi
                # First non-empty name wins
                if not device.display_name and display_name:
                    device.display_name = display_name
                return device

            if not classification.is_tracker_candidate:
                return None

            if len(self._devices) >= self._capacity:
                if len(self._dropped) < self._dropped_limit:
                    self._dropped.add(address)
                return None

            device = TrackedDevice(
                address=address,
                device_type=classification.device_type,
                last_rssi=rssi,
                first_seen_at=now,
                last_seen_at=now,
                display_name=display_name or '',
            )
            self._devices[address] = device
            return device

    def get(self, address: str) -> Optional[TrackedDevice]:
        """Get a copy of the entry for an address."""
        with self._lock:
            device = self._devices.get(address)
            return replace(device) if device is not None else None

    def snapshot(self) -> tuple[TrackedDevice, ...]:
        """Copies of all entries, in insertion order."""
        with self._lock:
            return tuple(replace(device) for device in self._devices.values())

    def clear(self) -> None:
        """Remove all entries."""
        with self._lock:
            self._devices.clear()
            self._dropped.clear()

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def is_full(self) -> bool:
        with self._lock:
            return len(self._devices) >= self._capacity

    @property
    def dropped_count(self) -> int:
        """Distinct tracker addresses refused because the table was full (at most dropped_limit)."""
        with self._lock:
            return len(self._dropped)

    def __len__(self) -> int:
        with self._lock:
            return len(self._devices)
