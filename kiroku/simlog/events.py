"""Typed sim log events.

Every parsed line becomes exactly one event. SimLog carries the header shared
by all lines and doubles as the fallback for lines no pattern recognizes.
Derived records (uptimes, casts, DPS samples, groups) are SimLogs too, so
every output sequence is addressable by log_index and ordered by timestamp.
"""

from collections.abc import Iterable
from dataclasses import dataclass
from typing import TypeVar

from kiroku.simlog.action_id import ActionId
from kiroku.simlog.constants import (
    SPELL_SCHOOL_NAMES,
    ResourceType,
    SecondaryResourceType,
    resource_display_name,
)
from kiroku.simlog.entity import Entity
from kiroku.utils import format_timestamp


@dataclass(frozen=True, kw_only=True)
class SimLog:
    raw: str = ""

    # Position of this line in the full log. Use this, never timestamp, to
    # order events: timestamps are scraped from text and lose precision.
    log_index: int

    # Seconds from encounter start.
    timestamp: float = 0.0

    source: Entity | None = None
    target: Entity | None = None
    action_id: ActionId | None = None
    spell_school: int | None = None
    threat: float = 0.0

    @property
    def formatted_timestamp(self) -> str:
        return format_timestamp(self.timestamp)

    @property
    def spell_school_name(self) -> str | None:
        if self.spell_school is None:
            return None
        return SPELL_SCHOOL_NAMES.get(self.spell_school)

    def header(self) -> dict:
        """Header fields as keyword arguments for building another log."""
        return {
            "raw": self.raw,
            "log_index": self.log_index,
            "timestamp": self.timestamp,
            "source": self.source,
            "target": self.target,
            "action_id": self.action_id,
            "spell_school": self.spell_school,
            "threat": self.threat,
        }


Generic = SimLog


@dataclass(frozen=True, kw_only=True)
class DamageDealt(SimLog):
    amount: float = 0.0
    kind: str = "damage"  # "damage", "healing" or "shielding"
    miss: bool = False
    crit: bool = False
    crush: bool = False
    glance: bool = False
    dodge: bool = False
    parry: bool = False
    block: bool = False
    tick: bool = False
    partial_resist: int = 0  # 0, 10, 20 or 30 percent

    @property
    def hit(self) -> bool:
        return not self.miss and not self.crit

    @property
    def is_damage(self) -> bool:
        return self.kind == "damage"

    @property
    def is_healing(self) -> bool:
        return self.kind == "healing"

    @property
    def is_shielding(self) -> bool:
        return self.kind == "shielding"

    @property
    def outcome(self) -> str:
        if self.miss:
            return "Miss"
        if self.dodge:
            return "Dodge"
        if self.parry:
            return "Parry"
        if self.block:
            if self.crit:
                return "Critical Block"
            if self.glance:
                return "Blocked Glance"
            return "Block"
        if self.glance:
            return "Glance"
        if self.crit:
            return "Crit"
        if self.crush:
            return "Crush"
        if self.tick:
            return "Tick"
        return "Hit"


@dataclass(frozen=True, kw_only=True)
class ResourceChanged(SimLog):
    resource_type: ResourceType
    secondary_resource_type: SecondaryResourceType | None = None
    value_before: float = 0.0
    value_after: float = 0.0
    is_spend: bool = False
    total: float = 0.0

    @property
    def resource_name(self) -> str:
        return resource_display_name(self.resource_type, self.secondary_resource_type)

    @property
    def delta(self) -> float:
        return self.value_after - self.value_before

    def result_string(self) -> str:
        delta = self.delta
        return f"{delta:.1f}" if delta < 0 else f"+{delta:.1f}"


@dataclass(frozen=True, kw_only=True)
class AuraEvent(SimLog):
    is_gained: bool = False
    is_faded: bool = False
    is_refreshed: bool = False


@dataclass(frozen=True, kw_only=True)
class AuraStacksChange(SimLog):
    old_stacks: int = 0
    new_stacks: int = 0


@dataclass(frozen=True, kw_only=True)
class MajorCooldownUsed(SimLog):
    pass


@dataclass(frozen=True, kw_only=True)
class CastBegan(SimLog):
    mana_cost: float = 0.0
    cast_time: float = 0.0  # seconds
    effective_time: float = 0.0  # seconds


@dataclass(frozen=True, kw_only=True)
class CastCompleted(SimLog):
    pass


@dataclass(frozen=True, kw_only=True)
class StatChange(SimLog):
    is_gain: bool = True
    stats: str = ""  # Raw "{Stat: value, ...}" text


Event = (
    DamageDealt
    | ResourceChanged
    | AuraEvent
    | AuraStacksChange
    | MajorCooldownUsed
    | CastBegan
    | CastCompleted
    | StatChange
    | SimLog
)


# ===== Derived records =====

@dataclass(frozen=True, kw_only=True)
class AuraUptimeLog(SimLog):
    gained_at: float
    faded_at: float
    stacks_change: tuple[AuraStacksChange, ...] = ()


@dataclass(frozen=True, kw_only=True)
class CastLog(SimLog):
    cast_began: CastBegan
    cast_completed: CastCompleted | None = None
    # Damage from this cast's completion up to the next completion.
    damage_dealt: tuple[DamageDealt, ...] = ()
    cast_time: float = 0.0
    effective_time: float = 0.0
    travel_time: float = 0.0

    @property
    def total_damage(self) -> float:
        return sum(dd.amount for dd in self.damage_dealt)


@dataclass(frozen=True, kw_only=True)
class DpsLog(SimLog):
    dps: float = 0.0
    # Damage events landing at this timestamp.
    damage_logs: tuple[DamageDealt, ...] = ()


@dataclass(frozen=True, kw_only=True)
class ResourceChangedLogGroup(SimLog):
    resource_type: ResourceType
    value_before: float = 0.0
    value_after: float = 0.0
    max_value: float = 0.0
    logs: tuple[ResourceChanged, ...] = ()


@dataclass(frozen=True, kw_only=True)
class ThreatLogGroup(SimLog):
    threat_before: float = 0.0
    threat_after: float = 0.0
    logs: tuple[SimLog, ...] = ()


T = TypeVar("T", bound=SimLog)


def filter_events(events: Iterable[SimLog], kind: type[T]) -> list[T]:
    """Select events of one variant (subclasses included)."""
    return [e for e in events if isinstance(e, kind)]
