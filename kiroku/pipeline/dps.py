"""Trailing-window DPS over damage events."""

from collections import deque
from collections.abc import Sequence

from kiroku.simlog.constants import DPS_WINDOW
from kiroku.simlog.events import DamageDealt, DpsLog
from kiroku.simlog.grouping import group_duplicate_timestamps


def compute_dps_logs(
    damage_logs: Sequence[DamageDealt],
    window: float = DPS_WINDOW,
) -> list[DpsLog]:
    """One DpsLog per simultaneous-timestamp group of damage.

    dps is the damage landing in (t - window, t] divided by window. Entries
    at or before t - window are evicted before each sample.
    """
    if window <= 0:
        raise ValueError("window must be > 0")

    in_window: deque[DamageDealt] = deque()
    total = 0.0
    results: list[DpsLog] = []

    for group in group_duplicate_timestamps(damage_logs):
        first = group[0]
        for dd in group:
            in_window.append(dd)
            total += dd.amount

        cutoff = first.timestamp - window
        while in_window and in_window[0].timestamp <= cutoff:
            total -= in_window.popleft().amount
        if not in_window:
            total = 0.0  # Drop float residue once the window empties

        results.append(DpsLog(
            log_index=first.log_index,
            timestamp=first.timestamp,
            source=first.source,
            spell_school=first.spell_school,
            dps=total / window,
            damage_logs=tuple(group),
        ))

    return results
