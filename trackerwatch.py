#!/usr/bin/env python3
"""
TrackerWatch - BLE tracker (stalking) detection.

Scans for Apple AirTag / Find My, Tile, Samsung SmartTag and Chipolo
trackers and warns when one appears to be travelling with you.

Usage:
    python trackerwatch.py                  # run the web API
    python trackerwatch.py --scan           # one scan, report to the terminal
"""

from __future__ import annotations

import sys

from flask import Flask, Response, jsonify

import config
from utils.logging import app_logger as logger
from utils.trackers import (
    SCAN_STATUS_RADIO_INIT_FAILED,
    PersistenceAnalyzer,
    ScanConfig,
    ScanResult,
    ScanSession,
    ScanState,
)


def create_app() -> Flask:
    """Create the Flask application with all blueprints registered."""
    app = Flask(__name__)

    from routes import register_blueprints
    register_blueprints(app)

    @app.route('/health')
    def health() -> Response:
        return jsonify({'status': 'ok', 'version': config.VERSION})

    return app


def format_report(result: ScanResult, analyzer: PersistenceAnalyzer) -> str:
    """Render a scan result as a terminal report."""
    lines = ['Tracker Detection', '']

    if result.status == SCAN_STATUS_RADIO_INIT_FAILED:
        lines.append(f'Bluetooth radio unavailable: {result.error}')
        return '\n'.join(lines)

    if not result.devices:
        lines.extend([
            'No trackers detected!',
            '',
            'You appear to be safe from BLE tracking devices.',
        ])
        return '\n'.join(lines)

    lines.append(f'Found {result.device_count} tracker(s):')
    lines.append('')

    if result.has_persistent_threat:
        lines.extend(['!! STALKING ALERT !!', 'Persistent tracker detected!', ''])

    for device in result.devices:
        marker = '!' if device.is_persistent else '-'
        lines.append(f'{marker} {device.label}')
        lines.append(f'    Address: {device.address}')
        lines.append(f'    Signal:  {device.last_rssi} dBm')
        lines.append(f'    Seen:    {device.observation_count} times')
        assessment = analyzer.get_assessment(device)
        lines.append(f'    {assessment["message"]}')

    if result.dropped_count:
        lines.append('')
        lines.append(f'{result.dropped_count} additional tracker(s) ignored (table full)')

    return '\n'.join(lines)


def run_scan(duration: float | None = None) -> int:
    """Run a single scan in the foreground and print the report."""
    from utils.trackers.scanner import default_radio_factory

    scan_config = ScanConfig.from_config(scan_duration_seconds=duration)
    session = ScanSession(scan_config)
    analyzer = PersistenceAnalyzer(
        count_threshold=scan_config.persistent_count_threshold,
        duration_threshold=scan_config.persistent_duration_ms,
    )

    print(f'Scanning for BLE trackers for {scan_config.scan_duration_seconds:.0f} seconds...')
    try:
        result = session.run(default_radio_factory())
    except KeyboardInterrupt:
        if session.state != ScanState.SCANNING:
            raise
        session.stop()
        result = session.finish()
        session.complete()

    print(format_report(result, analyzer))

    if result.status == SCAN_STATUS_RADIO_INIT_FAILED:
        return 2
    return 1 if result.has_persistent_threat else 0


def main() -> None:
    """Main entry point."""
    import argparse

    parser = argparse.ArgumentParser(
        description='TrackerWatch - BLE tracker detection',
    )
    parser.add_argument(
        '-p', '--port',
        type=int,
        default=config.PORT,
        help=f'Port to run server on (default: {config.PORT})'
    )
    parser.add_argument(
        '-H', '--host',
        default=config.HOST,
        help=f'Host to bind to (default: {config.HOST})'
    )
    parser.add_argument(
        '-d', '--debug',
        action='store_true',
        default=config.DEBUG,
        help='Enable debug mode'
    )
    parser.add_argument(
        '--scan',
        action='store_true',
        help='Run one scan in the terminal instead of starting the server'
    )
    parser.add_argument(
        '--duration',
        type=float,
        default=None,
        help=f'Scan duration in seconds (default: {config.SCAN_DURATION:.0f})'
    )

    args = parser.parse_args()
    config.configure_logging()

    if args.scan:
        sys.exit(run_scan(args.duration))

    app = create_app()
    logger.info(f"TrackerWatch {config.VERSION} listening on http://{args.host}:{args.port}")
    app.run(host=args.host, port=args.port, debug=args.debug, threaded=True)


if __name__ == '__main__':
    main()
