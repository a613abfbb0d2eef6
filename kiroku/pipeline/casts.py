"""Cast reconstruction: pair cast begin/complete events and attribute damage."""

import logging
from collections import defaultdict
from collections.abc import Collection, Sequence

from kiroku.simlog.action_id import ActionId
from kiroku.simlog.constants import SPLIT_TAG_SPELL_IDS
from kiroku.simlog.events import (
    CastBegan,
    CastCompleted,
    CastLog,
    DamageDealt,
    SimLog,
)

logger = logging.getLogger(__name__)


def bucket_key(action_id: ActionId, split_tag_spell_ids: Collection[int]) -> str:
    """Key grouping the events of one ability.

    Spells in split_tag_spell_ids can finish as a different tag than they
    began, so they bucket on the tag-less identifier.
    """
    if action_id.spell_id in split_tag_spell_ids:
        return action_id.to_string_ignoring_tag()
    return str(action_id)


def _build_cast_log(
    began: CastBegan,
    completed: CastCompleted | None,
    damage: list[DamageDealt],
) -> CastLog:
    header = began.header()
    if completed is not None:
        # The completion carries the final variant of the spell.
        header["action_id"] = completed.action_id or began.action_id
        if completed.spell_school is not None:
            header["spell_school"] = completed.spell_school
        header["threat"] = completed.threat or began.threat

    cast_time = began.cast_time
    effective_time = began.effective_time
    travel_time = 0.0
    if completed is not None:
        cast_time = completed.timestamp - began.timestamp
        effective_time = completed.timestamp - began.timestamp
        if (
            len(damage) == 1
            and not damage[0].tick
            and damage[0].timestamp > completed.timestamp
        ):
            travel_time = damage[0].timestamp - completed.timestamp

    return CastLog(
        **header,
        cast_began=began,
        cast_completed=completed,
        damage_dealt=tuple(damage),
        cast_time=cast_time,
        effective_time=effective_time,
        travel_time=travel_time,
    )


def compute_cast_logs(
    logs: Sequence[SimLog],
    *,
    split_tag_spell_ids: Collection[int] = SPLIT_TAG_SPELL_IDS,
) -> list[CastLog]:
    """Reconstruct casts from the full event sequence.

    Within one ability bucket the i-th CastBegan pairs with the i-th
    CastCompleted. A trailing CastBegan without a completion is a cast cut
    off by the end of the encounter. Damage is attributed with one forward
    cursor per bucket: each cast takes the damage landing before the next
    completion, the last cast takes everything left.

    Returns:
        CastLogs sorted by timestamp (ties keep bucket order).
    """
    began_by_bucket: dict[str, list[CastBegan]] = defaultdict(list)
    completed_by_bucket: dict[str, list[CastCompleted]] = defaultdict(list)
    damage_by_bucket: dict[str, list[DamageDealt]] = defaultdict(list)

    skipped = 0
    for log in logs:
        if not isinstance(log, (CastBegan, CastCompleted, DamageDealt)):
            continue
        if log.action_id is None:
            skipped += 1
            continue
        key = bucket_key(log.action_id, split_tag_spell_ids)
        if isinstance(log, CastBegan):
            began_by_bucket[key].append(log)
        elif isinstance(log, CastCompleted):
            completed_by_bucket[key].append(log)
        else:
            damage_by_bucket[key].append(log)

    if skipped:
        logger.debug("Skipped %d cast/damage events without an action id", skipped)

    cast_logs: list[CastLog] = []
    for key, casts_began in began_by_bucket.items():
        casts_completed = completed_by_bucket.get(key, [])
        damage_dealt = damage_by_bucket.get(key, [])

        dd_idx = 0
        for cb_idx, began in enumerate(casts_began):
            completed = None
            next_completed = None
            if cb_idx < len(casts_completed):
                completed = casts_completed[cb_idx]
                if cb_idx + 1 < len(casts_completed):
                    next_completed = casts_completed[cb_idx + 1]

            attributed: list[DamageDealt] = []
            while dd_idx < len(damage_dealt) and (
                next_completed is None
                or damage_dealt[dd_idx].timestamp < next_completed.timestamp
            ):
                attributed.append(damage_dealt[dd_idx])
                dd_idx += 1

            cast_logs.append(_build_cast_log(began, completed, attributed))

    cast_logs.sort(key=lambda c: c.timestamp)
    return cast_logs
