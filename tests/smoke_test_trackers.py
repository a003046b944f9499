#!/usr/bin/env python3
"""
Smoke Test for the Tracker Detection API

Run this script against a running TrackerWatch server to verify:
1. Scan control endpoints respond
2. A short scan completes (or reports a radio failure cleanly)
3. Result JSON schemas are as expected

Usage:
    python tests/smoke_test_trackers.py [--host HOST] [--port PORT] [--duration SECONDS]

Requirements:
    - TrackerWatch server must be running
    - requests library: pip install requests
"""

import argparse
import sys
import time

try:
    import requests
except ImportError:
    print("Error: requests library required. Install with: pip install requests")
    sys.exit(1)


# =============================================================================
# TEST CONFIGURATION
# =============================================================================

DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 5050
DEFAULT_DURATION = 5


# =============================================================================
# SCHEMA VALIDATORS
# =============================================================================

def validate_record_schema(record: dict, context: str = "") -> list[str]:
    """Validate that a tracker record has the expected fields."""
    errors = []
    required_fields = ['label', 'type', 'address', 'rssi', 'observation_count', 'is_persistent']

    for field in required_fields:
        if field not in record:
            errors.append(f"{context}Missing required field: {field}")

    if 'is_persistent' in record and not isinstance(record['is_persistent'], bool):
        errors.append(f"{context}is_persistent should be bool, got {type(record['is_persistent'])}")
    if 'observation_count' in record and record['observation_count'] < 1:
        errors.append(f"{context}observation_count should be >= 1")

    return errors


def validate_result_schema(result: dict) -> list[str]:
    """Validate scan result response schema."""
    errors = []

    for field in ('status', 'devices', 'has_persistent_threat', 'device_count'):
        if field not in result:
            errors.append(f"Missing result field: {field}")

    for i, record in enumerate(result.get('devices', [])):
        errors.extend(validate_record_schema(record, f"Device {i}: "))

    if result.get('devices') is not None:
        expected = any(r.get('is_persistent') for r in result['devices'])
        if result.get('has_persistent_threat') != expected:
            errors.append("has_persistent_threat does not match device flags")

    return errors


# =============================================================================
# TEST CASES
# =============================================================================

class SmokeTests:
    """Smoke test runner."""

    def __init__(self, base_url: str, duration: float):
        self.base_url = base_url
        self.duration = duration
        self.passed = 0
        self.failed = 0
        self.errors = []

    def _check(self, name: str, condition: bool, error_msg: str = ""):
        """Record a test result."""
        if condition:
            print(f"  [PASS] {name}")
            self.passed += 1
        else:
            print(f"  [FAIL] {name}: {error_msg}")
            self.failed += 1
            self.errors.append(f"{name}: {error_msg}")

    def test_scan_status_endpoint(self):
        """Test GET /api/trackers/scan/status"""
        print("\n=== Test: Scan Status Endpoint ===")
        try:
            resp = requests.get(f"{self.base_url}/api/trackers/scan/status", timeout=5)
            self._check("Status code 200", resp.status_code == 200, f"Got {resp.status_code}")

            data = resp.json()
            self._check("Has 'state' field", 'state' in data)
            self._check("Has 'is_scanning' field", 'is_scanning' in data)

        except requests.RequestException as e:
            self._check("Request succeeded", False, str(e))

    def test_scan_cycle(self):
        """Test a short scan from start to results"""
        print("\n=== Test: Scan Cycle ===")
        try:
            resp = requests.post(
                f"{self.base_url}/api/trackers/scan/start",
                json={'duration_s': self.duration},
                timeout=15,
            )
            self._check("Start: Status 200", resp.status_code == 200, f"Got {resp.status_code}")

            data = resp.json()
            if data.get('status') == 'radio_init_failed':
                self._check("Radio failure reported with empty result",
                            data.get('result', {}).get('devices') == [])
                return

            self._check("Scan started", data.get('status') in ('started', 'already_scanning'),
                        f"Got {data.get('status')}")

            deadline = time.time() + self.duration + 10
            while time.time() < deadline:
                status = requests.get(f"{self.base_url}/api/trackers/scan/status", timeout=5).json()
                if not status.get('is_scanning'):
                    break
                time.sleep(1)
            self._check("Scan finished", not status.get('is_scanning'))

            resp = requests.get(f"{self.base_url}/api/trackers/results", timeout=5)
            self._check("Results: Status 200", resp.status_code == 200, f"Got {resp.status_code}")

            errors = validate_result_schema(resp.json())
            self._check("Result schema valid", len(errors) == 0, "; ".join(errors))

        except requests.RequestException as e:
            self._check("Request succeeded", False, str(e))

    def test_stop_endpoint(self):
        """Test POST /api/trackers/scan/stop"""
        print("\n=== Test: Stop Endpoint ===")
        try:
            resp = requests.post(f"{self.base_url}/api/trackers/scan/stop", timeout=15)
            self._check("Status code 200", resp.status_code == 200, f"Got {resp.status_code}")
            self._check("Stopped", resp.json().get('status') == 'stopped')

        except requests.RequestException as e:
            self._check("Request succeeded", False, str(e))

    def test_detail_not_found(self):
        """Test GET /api/trackers/results/<address> for an unknown address"""
        print("\n=== Test: Detail Endpoint ===")
        try:
            resp = requests.get(f"{self.base_url}/api/trackers/results/00:00:00:00:00:00", timeout=5)
            self._check("Unknown tracker: Status 404", resp.status_code == 404, f"Got {resp.status_code}")

        except requests.RequestException as e:
            self._check("Request succeeded", False, str(e))

    def run_all(self):
        """Run all smoke tests."""
        print(f"\n{'='*60}")
        print("TRACKER API SMOKE TESTS")
        print(f"Target: {self.base_url}")
        print(f"{'='*60}")

        self.test_scan_status_endpoint()
        self.test_scan_cycle()
        self.test_stop_endpoint()
        self.test_detail_not_found()

        print(f"\n{'='*60}")
        print(f"RESULTS: {self.passed} passed, {self.failed} failed")
        print(f"{'='*60}")

        if self.errors:
            print("\nFailed tests:")
            for error in self.errors:
                print(f"  - {error}")

        return self.failed == 0


# =============================================================================
# MAIN
# =============================================================================

def main():
    parser = argparse.ArgumentParser(description="Tracker API smoke tests")
    parser.add_argument("--host", default=DEFAULT_HOST, help="Server host")
    parser.add_argument("--port", type=int, default=DEFAULT_PORT, help="Server port")
    parser.add_argument("--duration", type=float, default=DEFAULT_DURATION, help="Scan duration")
    args = parser.parse_args()

    base_url = f"http://{args.host}:{args.port}"

    # Check server is reachable
    print(f"Checking server at {base_url}...")
    try:
        resp = requests.get(f"{base_url}/health", timeout=5)
        print(f"Server responded: {resp.status_code}")
    except requests.RequestException as e:
        print(f"ERROR: Cannot reach server at {base_url}")
        print(f"Details: {e}")
        print("\nMake sure TrackerWatch is running:")
        print("  python trackerwatch.py")
        sys.exit(1)

    tests = SmokeTests(base_url, args.duration)
    success = tests.run_all()

    sys.exit(0 if success else 1)


if __name__ == "__main__":
    main()
