"""Condense a reconstructed log into a serializable LogSummary."""

from collections import Counter, defaultdict

from kiroku.models import (
    AuraUptimeSummary,
    CastSummary,
    LogSummary,
    ResourceSummary,
)
from kiroku.pipeline.reconstruct import ReconstructedLog
from kiroku.simlog.constants import resource_display_name
from kiroku.simlog.events import AuraUptimeLog, CastLog, SimLog


def _event_kind(log: SimLog) -> str:
    return "Generic" if type(log) is SimLog else type(log).__name__


def _merged_uptime(uptimes: list[AuraUptimeLog], duration: float) -> float:
    """Seconds covered by at least one interval, clipped to [0, duration]."""
    intervals = sorted(
        (max(0.0, u.gained_at), min(duration, u.faded_at)) for u in uptimes
    )
    covered = 0.0
    cur_start = cur_end = None
    for start, end in intervals:
        if end <= start:
            continue
        if cur_end is None or start > cur_end:
            if cur_end is not None:
                covered += cur_end - cur_start
            cur_start, cur_end = start, end
        else:
            cur_end = max(cur_end, end)
    if cur_end is not None:
        covered += cur_end - cur_start
    return covered


def _summarize_casts(casts: list[CastLog]) -> list[CastSummary]:
    by_ability: dict[str, list[CastLog]] = defaultdict(list)
    for cast in casts:
        by_ability[str(cast.action_id)].append(cast)

    results: list[CastSummary] = []
    for key, ability_casts in by_ability.items():
        travel_times = [c.travel_time for c in ability_casts if c.travel_time > 0]
        results.append(CastSummary(
            ability=ability_casts[0].action_id.display_name,
            action_id=key,
            casts=len(ability_casts),
            completed=sum(1 for c in ability_casts if c.cast_completed is not None),
            avg_cast_time=round(
                sum(c.cast_time for c in ability_casts) / len(ability_casts), 3,
            ),
            total_damage=round(sum(c.total_damage for c in ability_casts), 2),
            avg_travel_time=(
                round(sum(travel_times) / len(travel_times), 3)
                if travel_times else None
            ),
        ))

    results.sort(key=lambda s: s.total_damage, reverse=True)
    return results


def _summarize_auras(
    auras: dict, duration: float,
) -> list[AuraUptimeSummary]:
    results: list[AuraUptimeSummary] = []
    for entity, uptimes in auras.items():
        by_action: dict[str, list[AuraUptimeLog]] = defaultdict(list)
        for uptime in uptimes:
            if uptime.action_id is not None:
                by_action[uptime.action_id.to_string_ignoring_tag()].append(uptime)

        for key, aura_uptimes in by_action.items():
            covered = _merged_uptime(aura_uptimes, duration)
            results.append(AuraUptimeSummary(
                entity=str(entity),
                aura=aura_uptimes[0].action_id.display_name,
                action_id=key,
                applications=len(aura_uptimes),
                uptime=round(covered, 2),
                uptime_pct=round(covered / duration * 100, 1) if duration > 0 else 0.0,
                max_stacks=max(
                    (s.new_stacks for u in aura_uptimes for s in u.stacks_change),
                    default=0,
                ),
            ))

    results.sort(key=lambda s: (s.entity, -s.uptime_pct, s.aura))
    return results


def build_log_summary(reconstructed: ReconstructedLog) -> LogSummary:
    """Build the summary for a reconstructed log.

    Damage and DPS figures cover the entity the log was reconstructed for
    (or every non-target participant).
    """
    duration = reconstructed.encounter_duration
    total_damage = sum(
        dd.amount for sample in reconstructed.dps for dd in sample.damage_logs
    )

    resources: list[ResourceSummary] = []
    for resource_type, groups in reconstructed.resources.items():
        values = [groups[0].value_before] + [g.value_after for g in groups]
        resources.append(ResourceSummary(
            resource=resource_display_name(
                resource_type, groups[0].logs[0].secondary_resource_type,
            ),
            groups=len(groups),
            start_value=groups[0].value_before,
            end_value=groups[-1].value_after,
            min_value=min(values),
            max_value=max(values),
        ))

    return LogSummary(
        entity=str(reconstructed.entity) if reconstructed.entity else None,
        encounter_duration=duration,
        total_lines=len(reconstructed.events),
        event_counts=dict(Counter(_event_kind(e) for e in reconstructed.events)),
        total_damage=round(total_damage, 2),
        avg_dps=round(total_damage / duration, 2) if duration > 0 else 0.0,
        peak_dps=round(max((d.dps for d in reconstructed.dps), default=0.0), 2),
        total_threat=round(
            reconstructed.threat[-1].threat_after if reconstructed.threat else 0.0, 2,
        ),
        casts=_summarize_casts(reconstructed.casts),
        auras=_summarize_auras(reconstructed.auras, duration),
        resources=resources,
    )
