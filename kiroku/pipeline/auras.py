"""Aura uptime reconstruction from gain/fade/refresh and stack-change events."""

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field

from kiroku.simlog.action_id import same_action
from kiroku.simlog.entity import Entity
from kiroku.simlog.events import (
    AuraEvent,
    AuraStacksChange,
    AuraUptimeLog,
    SimLog,
)

logger = logging.getLogger(__name__)


@dataclass
class _OpenGain:
    gained: AuraEvent
    stacks: list[AuraStacksChange] = field(default_factory=list)

    def close(self, faded_at: float) -> AuraUptimeLog:
        return AuraUptimeLog(
            **self.gained.header(),
            gained_at=self.gained.timestamp,
            faded_at=faded_at,
            stacks_change=tuple(self.stacks),
        )


def _oldest_match(open_gains: list[_OpenGain], log: SimLog) -> int:
    for i, entry in enumerate(open_gains):
        if same_action(entry.gained.action_id, log.action_id):
            return i
    return -1


def _action_name(log: SimLog) -> str:
    return log.action_id.display_name if log.action_id else "<unresolved>"


def compute_aura_uptimes(
    logs: Sequence[SimLog],
    entity: Entity,
    encounter_duration: float,
) -> list[AuraUptimeLog]:
    """Pair aura gains with their fades for auras on one entity.

    Open gains are matched oldest-first (exact or tag-insensitive action
    match), so independent instances of the same aura close in the order
    they opened. A refresh closes the current interval and opens a new one.
    Auras still open at the end of the log fade at encounter_duration.

    Args:
        logs: Full parsed event sequence.
        entity: Only events whose source equals this entity are considered.
        encounter_duration: Encounter length in seconds.

    Returns:
        AuraUptimeLogs sorted by gained_at (ties keep log order).
    """
    open_gains: list[_OpenGain] = []
    uptimes: list[AuraUptimeLog] = []

    for log in logs:
        if log.source is None or log.source != entity:
            continue

        if isinstance(log, AuraStacksChange):
            if log.new_stacks <= 0:
                continue
            idx = _oldest_match(open_gains, log)
            if idx == -1:
                logger.warning(
                    "Unmatched aura stacks change at %.2f: %s",
                    log.timestamp, _action_name(log),
                )
                continue
            open_gains[idx].stacks.append(log)
            continue

        if not isinstance(log, AuraEvent):
            continue

        if log.is_gained:
            open_gains.append(_OpenGain(gained=log))
            continue

        idx = _oldest_match(open_gains, log)
        if idx == -1:
            logger.warning(
                "Unmatched aura %s at %.2f: %s",
                "refresh" if log.is_refreshed else "fade",
                log.timestamp, _action_name(log),
            )
            continue

        uptimes.append(open_gains.pop(idx).close(log.timestamp))
        if log.is_refreshed:
            open_gains.append(_OpenGain(gained=log))

    # Auras active at the end never fade in the log.
    uptimes.extend(entry.close(encounter_duration) for entry in open_gains)

    uptimes.sort(key=lambda u: u.gained_at)
    return uptimes


def active_auras_by_event(
    logs: Sequence[SimLog],
    uptimes: Sequence[AuraUptimeLog],
) -> list[list[AuraUptimeLog]]:
    """For each log, the auras active at its timestamp, sorted by name.

    An aura is active at t when gained_at <= t < faded_at. Both inputs must
    be ordered by timestamp, as parse_all() and compute_aura_uptimes()
    return them.
    """
    result: list[list[AuraUptimeLog]] = []
    current: list[AuraUptimeLog] = []
    next_idx = 0

    for log in logs:
        while next_idx < len(uptimes) and uptimes[next_idx].gained_at <= log.timestamp:
            current.append(uptimes[next_idx])
            next_idx += 1
        current = [aura for aura in current if aura.faded_at > log.timestamp]
        result.append(sorted(current, key=_action_name))

    return result
