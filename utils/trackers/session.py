"""
Tracker scan session.

Runs one bounded observation window:

    IDLE -> SCANNING -> ANALYZING -> REPORTING -> IDLE

The radio pushes AdvertisementEvent values into `ingest()`. When the window
closes (duration elapsed or `stop()` requested), the registry snapshot is
analyzed once and a read-only ScanResult is produced.
"""

from __future__ import annotations

import threading
import time
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional

from utils.logging import get_logger

from .classifier import classify_event
from .constants import (
    DEFAULT_PERSISTENT_COUNT,
    DEFAULT_PERSISTENT_DURATION_MS,
    DEFAULT_POLL_INTERVAL_SECONDS,
    DEFAULT_REGISTRY_CAPACITY,
    DEFAULT_SCAN_DURATION_SECONDS,
    SCAN_STATUS_CANCELLED,
    SCAN_STATUS_COMPLETE,
    SCAN_STATUS_RADIO_INIT_FAILED,
)
from .models import (
    AdvertisementEvent,
    ScanResult,
    ScanState,
    ScanStatus,
    TrackedDevice,
)
from .persistence import PersistenceAnalyzer
from .radio import RadioInitError
from .registry import DeviceRegistry

logger = get_logger('trackerwatch.trackers.session')


def monotonic_ms() -> int:
    """Milliseconds from a monotonic clock."""
    return int(time.monotonic() * 1000)


@dataclass(frozen=True)
class ScanConfig:
    """Tunable scan parameters."""

    scan_duration_seconds: float = DEFAULT_SCAN_DURATION_SECONDS
    registry_capacity: int = DEFAULT_REGISTRY_CAPACITY
    persistent_count_threshold: int = DEFAULT_PERSISTENT_COUNT
    persistent_duration_ms: int = DEFAULT_PERSISTENT_DURATION_MS
    poll_interval_seconds: float = DEFAULT_POLL_INTERVAL_SECONDS

    @classmethod
    def from_config(cls, **overrides) -> ScanConfig:
        """Build from the application's environment-driven settings."""
        import config

        values = {
            'scan_duration_seconds': config.SCAN_DURATION,
            'registry_capacity': config.REGISTRY_CAPACITY,
            'persistent_count_threshold': config.PERSISTENT_COUNT,
            'persistent_duration_ms': config.PERSISTENT_DURATION_MS,
            'poll_interval_seconds': config.POLL_INTERVAL,
        }
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)


class ScanSession:
    """
    One tracker scan session.

    A session owns its registry; starting a new window discards everything
    collected by the previous one.

    The radio is any object with `open(sink)` and `close()`. `open` must
    raise RadioInitError if the hardware cannot be brought up; `sink` is
    called once per advertisement, sequentially.
    """

    def __init__(
        self,
        config: Optional[ScanConfig] = None,
        clock: Callable[[], int] = monotonic_ms,
    ):
        self.config = config or ScanConfig()
        self._clock = clock
        self._registry = DeviceRegistry(self.config.registry_capacity)
        self._analyzer = PersistenceAnalyzer(
            count_threshold=self.config.persistent_count_threshold,
            duration_threshold=self.config.persistent_duration_ms,
        )
        self._lock = threading.Lock()
        self._state = ScanState.IDLE
        self._radio = None
        self._cancelled = False
        self._opening = False
        self._started_ms: Optional[int] = None
        self._started_at: Optional[datetime] = None
        self._result: Optional[ScanResult] = None
        self._full_logged = False

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    def start(self, radio=None, now: Optional[int] = None) -> bool:
        """
        Begin a new scan window.

        Args:
            radio: Radio collaborator to open, or None if events are pushed
                by the caller directly.
            now: Start time in milliseconds (defaults to the session clock).

        Returns:
            True if scanning started, False if the radio failed to initialize.
            In that case `result` holds an empty radio_init_failed result.
        """
        with self._lock:
            if self._state in (ScanState.SCANNING, ScanState.ANALYZING):
                raise RuntimeError(f'Cannot start scan while {self._state.value}')

            self._state = ScanState.IDLE
            self._registry.clear()
            self._cancelled = False
            self._opening = True
            self._full_logged = False
            self._result = None
            self._started_at = datetime.now()

        if radio is not None:
            try:
                radio.open(self.ingest)
            except RadioInitError as e:
                logger.error(f"Radio initialization failed: {e}")
                with self._lock:
                    self._opening = False
                    self._result = ScanResult(
                        status=SCAN_STATUS_RADIO_INIT_FAILED,
                        error=str(e),
                        started_at=self._started_at,
                    )
                return False

        with self._lock:
            self._opening = False
            self._radio = radio
            self._started_ms = self._clock() if now is None else now
            self._state = ScanState.SCANNING

        logger.info(f"Tracker scan started (duration={self.config.scan_duration_seconds}s)")
        return True

    def stop(self) -> None:
        """
        Request cancellation; observed at the next tick.

        A request made while the radio is still opening is kept and ends the
        window at the first tick.
        """
        with self._lock:
            if (self._state == ScanState.SCANNING or self._opening) and not self._cancelled:
                self._cancelled = True
                logger.info("Tracker scan cancellation requested")

    def tick(self, now: Optional[int] = None) -> bool:
        """
        Check whether the scan window is still open.

        Returns:
            True while scanning should continue.
        """
        with self._lock:
            if self._state != ScanState.SCANNING:
                return False
            if self._cancelled:
                return False
            now = self._clock() if now is None else now
            return now - self._started_ms < self.config.scan_duration_seconds * 1000

    def finish(self, now: Optional[int] = None) -> ScanResult:
        """
        Close the scan window, analyze the registry and build the result.

        Moves SCANNING -> ANALYZING -> REPORTING.
        """
        with self._lock:
            if self._state != ScanState.SCANNING:
                if self._result is not None:
                    return self._result
                raise RuntimeError(f'Cannot finish scan while {self._state.value}')
            self._state = ScanState.ANALYZING
            radio = self._radio
            self._radio = None
            cancelled = self._cancelled
            now = self._clock() if now is None else now
            duration_ms = now - self._started_ms

        if radio is not None:
            self._close_radio(radio)

        devices = self._analyzer.analyze(self._registry.snapshot())
        result = ScanResult(
            status=SCAN_STATUS_CANCELLED if cancelled else SCAN_STATUS_COMPLETE,
            devices=tuple(devices),
            has_persistent_threat=any(d.is_persistent for d in devices),
            started_at=self._started_at,
            duration_ms=duration_ms,
            dropped_count=self._registry.dropped_count,
        )

        with self._lock:
            self._result = result
            self._state = ScanState.REPORTING

        logger.info(
            f"Tracker scan {result.status}: {result.device_count} tracker(s), "
            f"persistent threat={result.has_persistent_threat}"
        )
        return result

    def complete(self) -> None:
        """Hand off the result and return to IDLE."""
        with self._lock:
            if self._state == ScanState.REPORTING:
                self._state = ScanState.IDLE

    def run(
        self,
        radio=None,
        wait: Callable[[float], object] = time.sleep,
    ) -> ScanResult:
        """
        Run a complete scan window, polling for duration and cancellation.

        Args:
            radio: Radio collaborator delivering advertisements.
            wait: Called with the poll interval between ticks.

        Returns:
            The ScanResult of the session.
        """
        if not self.start(radio):
            return self._result

        while self.tick():
            wait(self.config.poll_interval_seconds)

        result = self.finish()
        self.complete()
        return result

    # -------------------------------------------------------------------------
    # Ingestion
    # -------------------------------------------------------------------------

    def ingest(self, event: AdvertisementEvent, now: Optional[int] = None) -> Optional[TrackedDevice]:
        """
        Fold one advertisement into the registry.

        Ignored unless the session is scanning. Only tracker-candidate
        advertisements are folded in; new addresses beyond capacity are
        dropped.
        """
        if self._state != ScanState.SCANNING:
            return None

        classification = classify_event(event)
        if not classification.is_tracker_candidate:
            return None

        now = self._clock() if now is None else now
        device = self._registry.upsert(
            address=event.address,
            display_name=event.display_name,
            classification=classification,
            rssi=event.rssi,
            now=now,
        )

        if device is None and not self._full_logged:
            self._full_logged = True
            logger.warning(
                f"Tracker registry full ({self._registry.capacity}), "
                f"ignoring new devices for the rest of this scan"
            )
        elif device is not None:
            logger.debug(f"{device.device_type.label} {device.address} seen {device.observation_count}x")

        return device

    def _close_radio(self, radio) -> None:
        try:
            radio.close()
        except Exception as e:
            logger.warning(f"Error closing radio: {e}")

    # -------------------------------------------------------------------------
    # Status
    # -------------------------------------------------------------------------

    @property
    def state(self) -> ScanState:
        return self._state

    @property
    def result(self) -> Optional[ScanResult]:
        return self._result

    @property
    def registry(self) -> DeviceRegistry:
        return self._registry

    def get_status(self, now: Optional[int] = None) -> ScanStatus:
        """Get the current session status."""
        with self._lock:
            elapsed = None
            if self._state == ScanState.SCANNING and self._started_ms is not None:
                now = self._clock() if now is None else now
                elapsed = (now - self._started_ms) / 1000
            elif self._result is not None:
                elapsed = self._result.duration_ms / 1000
            return ScanStatus(
                state=self._state,
                device_count=len(self._registry),
                dropped_count=self._registry.dropped_count,
                elapsed_seconds=elapsed,
                duration_seconds=self.config.scan_duration_seconds,
                last_status=self._result.status if self._result else None,
                error=self._result.error if self._result else None,
            )
