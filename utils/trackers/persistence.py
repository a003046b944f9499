"""
Persistence analysis for tracked devices.

Decides, once a scan window has closed, which trackers were travelling with
the observer rather than passing by.
"""

from __future__ import annotations

from dataclasses import replace
from typing import Iterable

from .constants import (
    DEFAULT_PERSISTENT_COUNT,
    DEFAULT_PERSISTENT_DURATION_MS,
)
from .models import TrackedDevice


class PersistenceAnalyzer:
    """
    Flags trackers whose observation pattern indicates co-travel.

    A tracker is persistent if either:
    - it was observed at least `count_threshold` times, or
    - its observations span at least `duration_threshold` milliseconds.

    Either condition alone is enough: many sightings in a short burst and
    intermittent sightings across a long span both indicate co-travel.
    """

    def __init__(
        self,
        count_threshold: int = DEFAULT_PERSISTENT_COUNT,
        duration_threshold: int = DEFAULT_PERSISTENT_DURATION_MS,
    ):
        self.count_threshold = count_threshold
        self.duration_threshold = duration_threshold

    def is_persistent(self, device: TrackedDevice) -> bool:
        return bool(self.reasons(device))

    def analyze(self, snapshot: Iterable[TrackedDevice]) -> list[TrackedDevice]:
        """
        Annotate a registry snapshot with persistence flags.

        Returns new entries; counts and timestamps are left untouched so
        re-running over the same snapshot yields the same flags.
        """
        return [
            replace(device, is_persistent=self.is_persistent(device))
            for device in snapshot
        ]

    def reasons(self, device: TrackedDevice) -> list[str]:
        """Human-readable reasons a device is considered persistent."""
        reasons = []
        if device.observation_count >= self.count_threshold:
            reasons.append(
                f'Seen {device.observation_count} times '
                f'(threshold {self.count_threshold})'
            )
        if device.span_ms >= self.duration_threshold:
            reasons.append(
                f'Observed over {device.span_ms / 60000:.1f} min '
                f'(threshold {self.duration_threshold / 60000:.1f} min)'
            )
        return reasons

    def get_assessment(self, device: TrackedDevice) -> dict:
        """
        Get the detail-view assessment for a device.

        Returns:
            Dictionary with the persistence flag, reasons and advice text.
        """
        reasons = self.reasons(device)
        if reasons:
            message = (
                'PERSISTENT TRACKER: this device has been following you. '
                'Check for hidden trackers in bags, car and clothing.'
            )
        else:
            message = 'Likely passing by (normal)'
        return {
            'is_persistent': bool(reasons),
            'reasons': reasons,
            'message': message,
        }


def analyze(
    snapshot: Iterable[TrackedDevice],
    count_threshold: int = DEFAULT_PERSISTENT_COUNT,
    duration_threshold: int = DEFAULT_PERSISTENT_DURATION_MS,
) -> list[TrackedDevice]:
    """
    Convenience function to annotate a snapshot with persistence flags.

    See PersistenceAnalyzer for the rule.
    """
    return PersistenceAnalyzer(count_threshold, duration_threshold).analyze(snapshot)
