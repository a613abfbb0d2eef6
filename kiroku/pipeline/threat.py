"""Running threat totals over simultaneous-timestamp groups."""

from collections.abc import Sequence

from kiroku.simlog.events import SimLog, ThreatLogGroup
from kiroku.simlog.grouping import group_duplicate_timestamps


def compute_threat_groups(logs: Sequence[SimLog]) -> list[ThreatLogGroup]:
    """Cumulative threat before/after each group of threat-generating logs."""
    threat_logs = [log for log in logs if log.threat != 0]

    current = 0.0
    results: list[ThreatLogGroup] = []
    for group in group_duplicate_timestamps(threat_logs):
        delta = sum(log.threat for log in group)
        results.append(ThreatLogGroup(
            log_index=group[0].log_index,
            timestamp=group[0].timestamp,
            source=group[0].source,
            target=group[0].target,
            spell_school=group[0].spell_school,
            threat=delta,
            threat_before=current,
            threat_after=current + delta,
            logs=tuple(group),
        ))
        current += delta

    return results
