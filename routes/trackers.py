"""
Tracker detection API.

Provides REST endpoints to run a tracker scan window and read its results.
"""

from __future__ import annotations

from flask import Blueprint, Response, jsonify, request

from utils.logging import get_logger
from utils.trackers import (
    PersistenceAnalyzer,
    SCAN_STATUS_RADIO_INIT_FAILED,
    get_tracker_scanner,
)

logger = get_logger('trackerwatch.api.trackers')

# Blueprint
trackers_bp = Blueprint('trackers', __name__, url_prefix='/api/trackers')

MAX_SCAN_DURATION = 3600


# =============================================================================
# API ENDPOINTS
# =============================================================================


@trackers_bp.route('/scan/start', methods=['POST'])
def start_scan() -> Response:
    """
    Start a tracker scan window.

    Request JSON:
        - duration_s: Scan duration in seconds (optional)

    Returns:
        JSON with scan status.
    """
    data = request.get_json(silent=True) or {}
    if not isinstance(data, dict):
        return jsonify({'status': 'error', 'message': 'Request body must be a JSON object'}), 400
    duration_s = data.get('duration_s')

    if duration_s is not None:
        try:
            duration_s = float(duration_s)
        except (TypeError, ValueError):
            return jsonify({'status': 'error', 'message': 'duration_s must be a number'}), 400
        if not 0 < duration_s <= MAX_SCAN_DURATION:
            return jsonify({
                'status': 'error',
                'message': f'duration_s must be between 0 and {MAX_SCAN_DURATION}',
            }), 400

    scanner = get_tracker_scanner()

    if scanner.is_scanning:
        return jsonify({
            'status': 'already_scanning',
            'scan_status': scanner.get_status().to_dict(),
        })

    logger.info(f"Tracker scan requested (duration_s={duration_s})")
    if scanner.start_scan(duration_s=duration_s):
        return jsonify({
            'status': 'started',
            'scan_status': scanner.get_status().to_dict(),
        })

    # Lost the race to a concurrent start request
    if scanner.is_scanning:
        return jsonify({
            'status': 'already_scanning',
            'scan_status': scanner.get_status().to_dict(),
        })

    status = scanner.get_status()
    if status.last_status == SCAN_STATUS_RADIO_INIT_FAILED:
        logger.warning(f"Tracker scan not started: {status.error}")
        # Reported to the caller, not treated as a server fault
        return jsonify({
            'status': SCAN_STATUS_RADIO_INIT_FAILED,
            'message': status.error or 'Bluetooth radio unavailable',
            'result': scanner.get_result().to_dict(),
        })

    return jsonify({
        'status': 'error',
        'message': status.error or 'Failed to start scan',
    }), 500


@trackers_bp.route('/scan/stop', methods=['POST'])
def stop_scan() -> Response:
    """
    Stop the running scan; results collected so far are analyzed.

    Returns:
        JSON with status.
    """
    scanner = get_tracker_scanner()
    scanner.stop_scan()
    return jsonify({'status': 'stopped'})


@trackers_bp.route('/scan/status', methods=['GET'])
def get_scan_status() -> Response:
    """
    Get current scan status.

    Returns:
        JSON with state, elapsed time and tracker count.
    """
    scanner = get_tracker_scanner()
    return jsonify(scanner.get_status().to_dict())


@trackers_bp.route('/results', methods=['GET'])
def get_results() -> Response:
    """
    Get the result of the last finished scan.

    Query parameters:
        - persistent_only: Only list persistent trackers ('true'/'false')

    Returns:
        JSON with tracker records and the persistent threat flag.
    """
    scanner = get_tracker_scanner()
    result = scanner.get_result()

    if result is None:
        return jsonify({'status': 'error', 'message': 'No scan results available'}), 404

    data = result.to_dict()
    if request.args.get('persistent_only', 'false').lower() == 'true':
        data['devices'] = [d for d in data['devices'] if d['is_persistent']]
    return jsonify(data)


@trackers_bp.route('/results/<address>', methods=['GET'])
def get_tracker_detail(address: str) -> Response:
    """
    Get details for one tracker from the last scan.

    Path parameters:
        - address: Tracker address

    Returns:
        JSON with tracker details and persistence assessment.
    """
    scanner = get_tracker_scanner()
    result = scanner.get_result()
    device = result.get_device(address) if result is not None else None

    if device is None:
        return jsonify({'status': 'error', 'message': 'Tracker not found'}), 404

    analyzer = PersistenceAnalyzer(
        count_threshold=scanner.config.persistent_count_threshold,
        duration_threshold=scanner.config.persistent_duration_ms,
    )
    data = device.to_dict()
    data['assessment'] = analyzer.get_assessment(device)
    return jsonify(data)
