"""Line classifier: turns raw sim log text into typed events.

Each line is matched against one pattern per event kind, in a fixed priority
order; the first match wins and anything unmatched becomes a generic SimLog.
The ability/aura label on a matched line is resolved through an
ActionResolver, which may suspend. parse_all() runs every line concurrently
and joins results positionally, so output order always equals line order.
"""

import asyncio
import logging
import re
from collections.abc import Callable
from typing import Any

from kiroku.simlog.constants import ResourceType, resource_type_from_name
from kiroku.simlog.entity import EntityParseError, parse_entities
from kiroku.simlog.events import (
    AuraEvent,
    AuraStacksChange,
    CastBegan,
    CastCompleted,
    DamageDealt,
    Event,
    Generic,
    MajorCooldownUsed,
    ResourceChanged,
    SimLog,
    StatChange,
)
from kiroku.simlog.resolver import ActionResolver, LogStringResolver

logger = logging.getLogger(__name__)

DEFAULT_CONCURRENCY = 64  # In-flight label resolutions per parse_all()

_SPELL_SCHOOL_RE = re.compile(r" \(SpellSchool: (-?[0-9]+)\)")
_THREAT_RE = re.compile(r" \(Threat: (-?[0-9]+\.[0-9]+)\)")
_TIMESTAMP_RE = re.compile(r"\[(-?[0-9]+\.[0-9]+)\]\w*(.*)")

# The label may hold whole {...} groups but never ends inside one, so stat
# names like "Block" in a stat blob are not outcomes.
_DAMAGE_RE = re.compile(
    r"\] (?P<label>(?:[^{}]|\{[^{}]*\})*?) (?P<tick>tick )?"
    r"(?P<outcome>Miss|Hit|CriticalBlock|Crit|Crush|GlanceBlock|Glance|Dodge|Parry|Block)\b"
    r"(?: \((?P<resist>\d+)% Resist\))?"
    r"(?: for (?P<amount>\d+\.\d+) (?P<kind>damage|healing|shielding))?"
)
_RESOURCE_RE = re.compile(
    r"(?P<verb>Gained|Spent) (?P<amount>\d+\.?\d*) (?P<resource>\S.+?\S) "
    r"from (?P<label>.*?) \((?P<before>\d+\.?\d*) --> (?P<after>\d+\.?\d*)\)"
    r"(?: of (?P<total>\d+\.?\d*) total)?"
)
_AURA_RE = re.compile(r"Aura (?P<event>gained|faded|refreshed): (?P<label>.+)")
_STACKS_RE = re.compile(r"(?P<label>.*) stacks: (?P<old>[0-9]+) --> (?P<new>[0-9]+)")
_COOLDOWN_RE = re.compile(r"Major cooldown used: (?P<label>.*)")
_CAST_BEGAN_RE = re.compile(
    r"Casting (?P<label>.*) \(Cost = (?P<cost>\d+\.?\d*), "
    r"Cast Time = (?P<cast>\d+\.?\d*)(?P<cast_unit>m?s), "
    r"Effective Time = (?P<effective>\d+\.?\d*)(?P<effective_unit>m?s)\)"
)
_CAST_COMPLETED_RE = re.compile(r"Completed cast (?P<label>.*)")
_STAT_RE = re.compile(r"(?P<verb>Gained|Lost) (?P<stats>\{.*\}) from (?:fading )?(?P<label>.*)")

_DAMAGE_OUTCOMES_CRIT = frozenset({"Crit", "CriticalBlock"})
_DAMAGE_OUTCOMES_GLANCE = frozenset({"Glance", "GlanceBlock"})
_DAMAGE_OUTCOMES_BLOCK = frozenset({"Block", "CriticalBlock", "GlanceBlock"})


def _seconds(value: str, unit: str) -> float:
    return float(value) / 1000 if unit == "ms" else float(value)


def _damage_dealt(m: re.Match) -> dict[str, Any]:
    outcome = m["outcome"]
    resist = int(m["resist"]) if m["resist"] else 0
    return {
        "amount": float(m["amount"]) if m["amount"] else 0.0,
        "kind": m["kind"] or "damage",
        "miss": outcome == "Miss",
        "crit": outcome in _DAMAGE_OUTCOMES_CRIT,
        "crush": outcome == "Crush",
        "glance": outcome in _DAMAGE_OUTCOMES_GLANCE,
        "dodge": outcome == "Dodge",
        "parry": outcome == "Parry",
        "block": outcome in _DAMAGE_OUTCOMES_BLOCK,
        "tick": m["tick"] is not None,
        "partial_resist": resist if resist in (10, 20, 30) else 0,
    }


def _resource_changed(m: re.Match) -> dict[str, Any]:
    resource_type, secondary_type = resource_type_from_name(m["resource"])
    if resource_type == ResourceType.NONE:
        logger.warning("Unknown resource type %r", m["resource"])
    return {
        "resource_type": resource_type,
        "secondary_resource_type": secondary_type,
        "value_before": float(m["before"]),
        "value_after": float(m["after"]),
        "is_spend": m["verb"] == "Spent",
        "total": float(m["total"]) if m["total"] is not None else 0.0,
    }


def _aura_event(m: re.Match) -> dict[str, Any]:
    return {
        "is_gained": m["event"] == "gained",
        "is_faded": m["event"] == "faded",
        "is_refreshed": m["event"] == "refreshed",
    }


def _aura_stacks_change(m: re.Match) -> dict[str, Any]:
    return {"old_stacks": int(m["old"]), "new_stacks": int(m["new"])}


def _cast_began(m: re.Match) -> dict[str, Any]:
    return {
        "mana_cost": float(m["cost"]),
        "cast_time": _seconds(m["cast"], m["cast_unit"]),
        "effective_time": _seconds(m["effective"], m["effective_unit"]),
    }


def _stat_change(m: re.Match) -> dict[str, Any]:
    return {"is_gain": m["verb"] == "Gained", "stats": m["stats"]}


def _no_fields(m: re.Match) -> dict[str, Any]:
    return {}


# Most to least common; the first pattern that matches decides the kind.
CLASSIFIERS: tuple[tuple[re.Pattern, type[SimLog], Callable[[re.Match], dict]], ...] = (
    (_DAMAGE_RE, DamageDealt, _damage_dealt),
    (_RESOURCE_RE, ResourceChanged, _resource_changed),
    (_AURA_RE, AuraEvent, _aura_event),
    (_STACKS_RE, AuraStacksChange, _aura_stacks_change),
    (_COOLDOWN_RE, MajorCooldownUsed, _no_fields),
    (_CAST_BEGAN_RE, CastBegan, _cast_began),
    (_CAST_COMPLETED_RE, CastCompleted, _no_fields),
    (_STAT_RE, StatChange, _stat_change),
)


def _scan_header(line: str, line_index: int) -> tuple[dict[str, Any], str, str | None]:
    """Extract header fields shared by every kind of line.

    Returns:
        (header kwargs, line with any threat suffix removed, text after the
        timestamp or None when the line has no timestamp).
    """
    header: dict[str, Any] = {"raw": line, "log_index": line_index}

    school_match = _SPELL_SCHOOL_RE.search(line)
    if school_match:
        header["spell_school"] = int(school_match.group(1))

    threat_match = _THREAT_RE.search(line)
    if threat_match:
        header["threat"] = float(threat_match.group(1))
        line = line[:threat_match.start()]

    ts_match = _TIMESTAMP_RE.search(line)
    if not ts_match:
        return header, line, None

    header["timestamp"] = float(ts_match.group(1))
    return header, line, ts_match.group(2)


async def parse_line(
    line: str,
    line_index: int,
    resolver: ActionResolver,
) -> Event:
    """Classify a single log line.

    Lines without a leading [timestamp] (blank lines, banners) become a
    generic SimLog with timestamp 0. A resolver failure leaves action_id
    unset instead of failing the line.

    Raises:
        EntityParseError: the line carries a malformed entity label.
    """
    header, line, remainder = _scan_header(line, line_index)
    if remainder is None:
        return Generic(**header)

    entities = parse_entities(remainder)
    source = entities[0] if entities else None
    header["source"] = source
    header["target"] = entities[1] if len(entities) > 1 else None

    for pattern, event_cls, fields in CLASSIFIERS:
        match = pattern.search(line)
        if match is None:
            continue

        label = match["label"]
        try:
            header["action_id"] = await resolver.resolve(
                label, source.index if source else None,
            )
        except Exception as exc:
            logger.warning(
                "Could not resolve action %r on line %d: %s",
                label, line_index, exc,
            )
        return event_cls(**header, **fields(match))

    return Generic(**header)


async def parse_all(
    text: str,
    resolver: ActionResolver | None = None,
    *,
    concurrency: int = DEFAULT_CONCURRENCY,
) -> list[Event]:
    """Parse a full log, one event per newline-separated line.

    Lines are classified concurrently but results are joined by position:
    events[i].log_index == i for every i, however resolution interleaves.
    A line with a malformed entity label is logged and kept as a generic
    SimLog so the rest of the log still parses.
    """
    if concurrency < 1:
        raise ValueError("concurrency must be >= 1")

    resolver = resolver or LogStringResolver()
    semaphore = asyncio.Semaphore(concurrency)

    async def _parse_guarded(line: str, line_index: int) -> Event:
        async with semaphore:
            try:
                return await parse_line(line, line_index, resolver)
            except EntityParseError:
                logger.exception("Malformed entity label on line %d", line_index)
                header, _, _ = _scan_header(line, line_index)
                return Generic(**header)

    lines = text.split("\n")
    events = await asyncio.gather(
        *(_parse_guarded(line, i) for i, line in enumerate(lines))
    )

    logger.info("Parsed %d log lines", len(events))
    return list(events)
