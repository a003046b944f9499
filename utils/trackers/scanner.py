"""
Background tracker scanner.

Runs scan sessions on a worker thread so the web API can start, poll and
cancel scans without blocking a request.
"""

from __future__ import annotations

import threading
from dataclasses import replace
from typing import Callable, Optional

from utils.logging import get_logger

from .models import ScanResult, ScanState, ScanStatus
from .radio import BleakRadio
from .session import ScanConfig, ScanSession

logger = get_logger('trackerwatch.trackers.scanner')

# Global scanner instance
_scanner_instance: Optional['TrackerScanner'] = None
_scanner_lock = threading.Lock()


def default_radio_factory() -> BleakRadio:
    """Build the bleak radio from application settings."""
    import config

    return BleakRadio(
        adapter=config.BT_ADAPTER or None,
        start_timeout=config.RADIO_START_TIMEOUT,
    )


class TrackerScanner:
    """
    Drives ScanSession windows on a background thread.

    Only one scan runs at a time. The last result stays available until the
    next scan starts.
    """

    def __init__(
        self,
        config: Optional[ScanConfig] = None,
        radio_factory: Callable[[], object] = default_radio_factory,
    ):
        self._config = config or ScanConfig()
        self._radio_factory = radio_factory
        self._lock = threading.Lock()
        self._session: Optional[ScanSession] = None
        self._thread: Optional[threading.Thread] = None
        self._wake = threading.Event()
        self._starting = False
        self._stop_requested = False

    @property
    def config(self) -> ScanConfig:
        return self._config

    @property
    def is_scanning(self) -> bool:
        """True from the moment a scan is requested until its result is ready."""
        if self._starting:
            return True
        thread = self._thread
        return thread is not None and thread.is_alive()

    def start_scan(self, duration_s: Optional[float] = None) -> bool:
        """
        Start a scan window.

        The radio is opened on the calling thread; the scanner counts as
        scanning while it opens, so concurrent callers see `is_scanning`.

        Args:
            duration_s: Scan duration in seconds (defaults to the configured value).

        Returns:
            True if scanning started. False if a scan is already running or
            the radio failed to initialize (see get_status()).
        """
        with self._lock:
            if self.is_scanning:
                logger.warning("Tracker scan already running")
                return False

            config = self._config
            if duration_s is not None:
                config = replace(config, scan_duration_seconds=duration_s)

            session = ScanSession(config)
            self._session = session
            self._starting = True
            self._stop_requested = False
            self._wake.clear()

        try:
            started = session.start(self._radio_factory())
        except Exception:
            with self._lock:
                self._starting = False
            raise

        with self._lock:
            if started:
                if self._stop_requested:
                    session.stop()
                self._thread = threading.Thread(
                    target=self._run,
                    args=(session,),
                    name='trackerwatch-scan',
                    daemon=True,
                )
                self._thread.start()
            self._starting = False
        return started

    def stop_scan(self, timeout: float = 10.0) -> None:
        """Cancel the running scan and wait for its result."""
        with self._lock:
            session = self._session
            thread = self._thread
            if session is None:
                return
            if self._starting:
                self._stop_requested = True

        session.stop()
        self._wake.set()
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout=timeout)

    def _run(self, session: ScanSession) -> None:
        try:
            while session.tick():
                self._wake.wait(session.config.poll_interval_seconds)
            session.finish()
            session.complete()
        except Exception:
            logger.exception("Tracker scan failed")

    def get_status(self) -> ScanStatus:
        """Get the current scan status."""
        session = self._session
        if session is None:
            return ScanStatus(state=ScanState.IDLE, duration_seconds=self._config.scan_duration_seconds)
        return session.get_status()

    def get_result(self) -> Optional[ScanResult]:
        """Get the result of the last finished scan, if any."""
        session = self._session
        return session.result if session is not None else None


def get_tracker_scanner() -> TrackerScanner:
    """
    Get or create the global tracker scanner instance.

    Returns:
        TrackerScanner instance.
    """
    global _scanner_instance

    with _scanner_lock:
        if _scanner_instance is None:
            _scanner_instance = TrackerScanner(ScanConfig.from_config())
        return _scanner_instance


def reset_tracker_scanner() -> None:
    """Reset the global scanner instance."""
    global _scanner_instance

    with _scanner_lock:
        if _scanner_instance:
            _scanner_instance.stop_scan()
        _scanner_instance = None
