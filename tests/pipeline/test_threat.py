"""Tests for running threat totals."""

import pytest

from kiroku.pipeline.threat import compute_threat_groups
from kiroku.simlog.events import DamageDealt, SimLog


def _make_logs(*entries):
    """entries: (timestamp, threat) pairs."""
    return [
        DamageDealt(log_index=i, timestamp=t, threat=threat)
        for i, (t, threat) in enumerate(entries)
    ]


class TestComputeThreatGroups:

    def test_running_total(self):
        logs = _make_logs((1.0, 100.0), (2.0, 50.0))

        first, second = compute_threat_groups(logs)

        assert (first.threat_before, first.threat_after) == (0.0, 100.0)
        assert (second.threat_before, second.threat_after) == (100.0, 150.0)
        assert second.threat == 50.0

    def test_simultaneous_threat_grouped(self):
        logs = _make_logs((1.0, 10.0), (1.0, 5.5))

        [group] = compute_threat_groups(logs)

        assert group.threat_after == pytest.approx(15.5)
        assert group.logs == tuple(logs)

    def test_zero_threat_logs_ignored(self):
        logs = [
            SimLog(log_index=0, timestamp=1.0),
            DamageDealt(log_index=1, timestamp=2.0, threat=20.0),
            SimLog(log_index=2, timestamp=3.0),
        ]

        [group] = compute_threat_groups(logs)

        assert group.log_index == 1

    def test_negative_threat_lowers_total(self):
        logs = _make_logs((1.0, 100.0), (2.0, -40.0))

        _, second = compute_threat_groups(logs)

        assert second.threat_after == pytest.approx(60.0)

    def test_empty(self):
        assert compute_threat_groups([]) == []
