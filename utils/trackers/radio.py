"""
BLE radio for tracker scanning.

Wraps bleak's BleakScanner behind a small push interface: `open(sink)`
starts scanning and calls `sink(event)` for every advertisement, `close()`
stops it. bleak runs on a private asyncio loop in a daemon thread so the
scan session can be driven from ordinary synchronous code.
"""

from __future__ import annotations

import asyncio
import threading
from typing import Callable, Optional

from bleak import BleakScanner
from bleak.backends.device import BLEDevice
from bleak.backends.scanner import AdvertisementData

from utils.logging import get_logger

from .models import AdvertisementEvent

logger = get_logger('trackerwatch.trackers.radio')

DEFAULT_START_TIMEOUT = 10.0
DEFAULT_STOP_TIMEOUT = 5.0


class RadioInitError(Exception):
    """The Bluetooth radio could not be brought up."""


def event_from_advertisement(device: BLEDevice, adv_data: AdvertisementData) -> AdvertisementEvent:
    """
    Convert a bleak detection callback into an AdvertisementEvent.

    bleak strips the company identifier from manufacturer data and keys
    the payload by it, so the raw little-endian prefix is rebuilt here.
    Only the first manufacturer data record is used.
    """
    manufacturer_data = b''
    if adv_data.manufacturer_data:
        company_id, data = next(iter(adv_data.manufacturer_data.items()))
        manufacturer_data = (company_id & 0xFFFF).to_bytes(2, 'little') + bytes(data)

    return AdvertisementEvent(
        address=device.address.upper(),
        rssi=adv_data.rssi,
        manufacturer_data=manufacturer_data,
        display_name=adv_data.local_name or device.name or None,
    )


class BleakRadio:
    """
    Passive/active BLE advertisement source backed by bleak.

    Advertisements are delivered one at a time from the bleak loop thread.
    """

    def __init__(
        self,
        adapter: Optional[str] = None,
        scanning_mode: str = 'active',
        start_timeout: float = DEFAULT_START_TIMEOUT,
    ):
        self.adapter = adapter
        self.scanning_mode = scanning_mode
        self.start_timeout = start_timeout

        self._sink: Optional[Callable[[AdvertisementEvent], object]] = None
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._thread: Optional[threading.Thread] = None
        self._scanner: Optional[BleakScanner] = None

    @property
    def is_open(self) -> bool:
        return self._scanner is not None

    def open(self, sink: Callable[[AdvertisementEvent], object]) -> None:
        """
        Start scanning and deliver advertisements to `sink`.

        Raises:
            RadioInitError: If the adapter is missing or the scan cannot start.
        """
        if self.is_open:
            raise RadioInitError('Radio already open')

        self._sink = sink
        self._loop = asyncio.new_event_loop()
        self._thread = threading.Thread(
            target=self._loop.run_forever,
            name='trackerwatch-radio',
            daemon=True,
        )
        self._thread.start()

        future = asyncio.run_coroutine_threadsafe(self._start_scanner(), self._loop)
        try:
            self._scanner = future.result(timeout=self.start_timeout)
        except Exception as e:
            future.cancel()
            self._shutdown_loop()
            raise RadioInitError(f'Failed to start BLE scan: {e}') from e

        logger.info(f"BLE scan started (mode={self.scanning_mode}, adapter={self.adapter or 'default'})")

    def close(self) -> None:
        """Stop scanning and shut down the radio loop."""
        scanner = self._scanner
        self._scanner = None

        if scanner is not None and self._loop is not None:
            future = asyncio.run_coroutine_threadsafe(scanner.stop(), self._loop)
            try:
                future.result(timeout=DEFAULT_STOP_TIMEOUT)
            except Exception as e:
                logger.warning(f"Error stopping BLE scan: {e}")

        self._shutdown_loop()
        self._sink = None
        logger.info("BLE scan stopped")

    async def _start_scanner(self) -> BleakScanner:
        kwargs = {
            'detection_callback': self._on_advertisement,
            'scanning_mode': self.scanning_mode,
        }
        if self.adapter:
            kwargs['adapter'] = self.adapter

        scanner = BleakScanner(**kwargs)
        await scanner.start()
        return scanner

    def _on_advertisement(self, device: BLEDevice, adv_data: AdvertisementData) -> None:
        """Detection callback, runs on the bleak loop thread."""
        sink = self._sink
        if sink is None:
            return
        try:
            sink(event_from_advertisement(device, adv_data))
        except Exception:
            logger.exception(f"Error handling advertisement from {device.address}")

    def _shutdown_loop(self) -> None:
        loop, thread = self._loop, self._thread
        self._loop = None
        self._thread = None

        if loop is None:
            return
        loop.call_soon_threadsafe(loop.stop)
        if thread is not None:
            thread.join(timeout=DEFAULT_STOP_TIMEOUT)
        if not loop.is_running():
            loop.close()
