"""Tests for environment-driven configuration."""

import importlib
import logging

import pytest

import config
from utils.trackers.session import ScanConfig


@pytest.fixture
def reload_config(monkeypatch):
    """Reload config after setting env vars; restore defaults afterwards."""
    yield lambda: importlib.reload(config)
    monkeypatch.undo()
    importlib.reload(config)


class TestEnvHelpers:
    """Tests for the _get_env* helpers."""

    def test_int_override(self, monkeypatch):
        monkeypatch.setenv('TRACKERWATCH_REGISTRY_CAPACITY', '7')
        assert config._get_env_int('REGISTRY_CAPACITY', 50) == 7

    def test_invalid_int_falls_back(self, monkeypatch):
        monkeypatch.setenv('TRACKERWATCH_PORT', 'abc')
        assert config._get_env_int('PORT', 5050) == 5050

    def test_invalid_float_falls_back(self, monkeypatch):
        monkeypatch.setenv('TRACKERWATCH_POLL_INTERVAL', 'fast')
        assert config._get_env_float('POLL_INTERVAL', 1.0) == 1.0

    @pytest.mark.parametrize('value,expected', [
        ('yes', True),
        ('ON', True),
        ('0', False),
        ('maybe', False),
    ])
    def test_bool(self, monkeypatch, value, expected):
        monkeypatch.setenv('TRACKERWATCH_DEBUG', value)
        assert config._get_env_bool('DEBUG', False) is expected


class TestModuleSettings:
    """Tests for settings read at import time."""

    def test_invalid_values_use_defaults(self, monkeypatch, reload_config):
        monkeypatch.setenv('TRACKERWATCH_PORT', 'abc')
        monkeypatch.setenv('TRACKERWATCH_SCAN_DURATION', 'long')
        monkeypatch.setenv('TRACKERWATCH_LOG_LEVEL', 'chatty')
        reload_config()

        assert config.PORT == 5050
        assert config.SCAN_DURATION == 30.0
        assert config.LOG_LEVEL == logging.INFO

    def test_scan_config_from_env(self, monkeypatch, reload_config):
        monkeypatch.setenv('TRACKERWATCH_SCAN_DURATION', '12.5')
        monkeypatch.setenv('TRACKERWATCH_PERSISTENT_COUNT', '5')
        reload_config()

        scan_config = ScanConfig.from_config(registry_capacity=9)

        assert scan_config.scan_duration_seconds == 12.5
        assert scan_config.persistent_count_threshold == 5
        assert scan_config.registry_capacity == 9
