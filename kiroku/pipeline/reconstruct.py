"""Run every reconstructor over one parsed log."""

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field

from kiroku.config import Settings, get_settings
from kiroku.pipeline.auras import compute_aura_uptimes
from kiroku.pipeline.casts import compute_cast_logs
from kiroku.pipeline.dps import compute_dps_logs
from kiroku.pipeline.resources import group_resource_changes
from kiroku.pipeline.threat import compute_threat_groups
from kiroku.simlog.constants import ResourceType
from kiroku.simlog.entity import Entity
from kiroku.simlog.events import (
    AuraUptimeLog,
    CastLog,
    DamageDealt,
    DpsLog,
    ResourceChangedLogGroup,
    SimLog,
    ThreatLogGroup,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ReconstructedLog:
    events: list[SimLog]
    encounter_duration: float
    entity: Entity | None = None
    auras: dict[Entity, list[AuraUptimeLog]] = field(default_factory=dict)
    casts: list[CastLog] = field(default_factory=list)
    dps: list[DpsLog] = field(default_factory=list)
    resources: dict[ResourceType, list[ResourceChangedLogGroup]] = field(
        default_factory=dict,
    )
    threat: list[ThreatLogGroup] = field(default_factory=list)


def _from_entity(log: SimLog, entity: Entity) -> bool:
    """Log produced by entity or one of its pets."""
    if log.source is None:
        return False
    return log.source == entity or log.source.is_owned_by(entity)


def _aura_owners(events: Sequence[SimLog]) -> list[Entity]:
    owners: dict[Entity, None] = {}
    for log in events:
        if log.source is not None and not log.source.is_target:
            owners.setdefault(log.source, None)
    return list(owners)


def reconstruct(
    events: Sequence[SimLog],
    encounter_duration: float,
    *,
    entity: Entity | None = None,
    settings: Settings | None = None,
) -> ReconstructedLog:
    """Build all derived sequences for a parsed log.

    Args:
        events: Output of parse_all().
        encounter_duration: Encounter length in seconds; closes open auras.
        entity: Restrict casts, DPS, resources and threat to this entity
            and its pets, and auras to this entity. None covers every
            non-target participant.
        settings: Defaults to get_settings().
    """
    settings = settings or get_settings()
    events = list(events)

    if entity is None:
        scoped = [log for log in events if log.source is None or not log.source.is_target]
        owners = _aura_owners(events)
    else:
        scoped = [log for log in events if _from_entity(log, entity)]
        owners = [entity]

    damage = [
        log for log in scoped
        if isinstance(log, DamageDealt) and log.is_damage
    ]

    result = ReconstructedLog(
        events=events,
        encounter_duration=encounter_duration,
        entity=entity,
        auras={
            owner: compute_aura_uptimes(events, owner, encounter_duration)
            for owner in owners
        },
        casts=compute_cast_logs(
            scoped, split_tag_spell_ids=frozenset(settings.parser.split_tag_spell_ids),
        ),
        dps=compute_dps_logs(damage, window=settings.parser.dps_window),
        resources=group_resource_changes(scoped),
        threat=compute_threat_groups(scoped),
    )

    logger.info(
        "Reconstructed %d events: %d auras across %d entities, %d casts, "
        "%d dps samples, %d threat groups",
        len(events), sum(len(a) for a in result.auras.values()), len(result.auras),
        len(result.casts), len(result.dps), len(result.threat),
    )
    return result
