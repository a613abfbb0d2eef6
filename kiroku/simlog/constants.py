"""Resource, secondary resource and spell school names used in sim logs."""

from enum import IntEnum

DPS_WINDOW = 15.0  # Seconds of trailing damage averaged into each DpsLog

# Abilities that can complete as a different tagged variant than they began.
# 30451: Arcane Blast (rank drops with stacks mid-cast)
# 127632: Cascade (bounces re-tag the spell)
SPLIT_TAG_SPELL_IDS: frozenset[int] = frozenset({30451, 127632})


class ResourceType(IntEnum):
    NONE = 0
    HEALTH = 1
    MANA = 2
    ENERGY = 3
    RAGE = 4
    COMBO_POINTS = 5
    FOCUS = 6
    RUNIC_POWER = 7
    BLOOD_RUNE = 8
    FROST_RUNE = 9
    UNHOLY_RUNE = 10
    DEATH_RUNE = 11
    SOLAR_ENERGY = 12
    LUNAR_ENERGY = 13
    GENERIC_RESOURCE = 14


class SecondaryResourceType(IntEnum):
    NONE = 0
    HOLY_POWER = 1
    CHI = 2
    SHADOW_ORBS = 3
    SOUL_SHARDS = 4
    BURNING_EMBERS = 5
    DEMONIC_FURY = 6


RESOURCE_NAMES: dict[ResourceType, str] = {
    ResourceType.NONE: "None",
    ResourceType.HEALTH: "Health",
    ResourceType.MANA: "Mana",
    ResourceType.ENERGY: "Energy",
    ResourceType.RAGE: "Rage",
    ResourceType.COMBO_POINTS: "Combo Points",
    ResourceType.FOCUS: "Focus",
    ResourceType.RUNIC_POWER: "Runic Power",
    ResourceType.BLOOD_RUNE: "Blood Rune",
    ResourceType.FROST_RUNE: "Frost Rune",
    ResourceType.UNHOLY_RUNE: "Unholy Rune",
    ResourceType.DEATH_RUNE: "Death Rune",
    ResourceType.SOLAR_ENERGY: "Solar Energy",
    ResourceType.LUNAR_ENERGY: "Lunar Energy",
    ResourceType.GENERIC_RESOURCE: "Generic Resource",
}

SECONDARY_RESOURCE_NAMES: dict[SecondaryResourceType, str] = {
    SecondaryResourceType.HOLY_POWER: "Holy Power",
    SecondaryResourceType.CHI: "Chi",
    SecondaryResourceType.SHADOW_ORBS: "Shadow Orbs",
    SecondaryResourceType.SOUL_SHARDS: "Soul Shards",
    SecondaryResourceType.BURNING_EMBERS: "Burning Embers",
    SecondaryResourceType.DEMONIC_FURY: "Demonic Fury",
}

_RESOURCE_BY_NAME: dict[str, ResourceType] = {
    name.lower(): rt for rt, name in RESOURCE_NAMES.items()
}
_SECONDARY_BY_NAME: dict[str, SecondaryResourceType] = {
    name.lower(): srt for srt, name in SECONDARY_RESOURCE_NAMES.items()
}

SPELL_SCHOOL_NAMES: dict[int, str] = {
    0: "Physical",
    1: "Arcane",
    2: "Fire",
    3: "Frost",
    4: "Holy",
    5: "Nature",
    6: "Shadow",
}


def resource_type_from_name(
    name: str,
) -> tuple[ResourceType, SecondaryResourceType | None]:
    """Map a resource label from log text to its (primary, secondary) type.

    Secondary resources (Holy Power, Chi, ...) are reported by the sim as
    the generic resource with a secondary type. Unknown labels map to
    ResourceType.NONE.
    """
    key = name.strip().lower()
    if key in _RESOURCE_BY_NAME:
        return _RESOURCE_BY_NAME[key], None
    if key in _SECONDARY_BY_NAME:
        return ResourceType.GENERIC_RESOURCE, _SECONDARY_BY_NAME[key]
    return ResourceType.NONE, None


def resource_display_name(
    resource_type: ResourceType,
    secondary_type: SecondaryResourceType | None = None,
) -> str:
    if secondary_type is not None:
        return SECONDARY_RESOURCE_NAMES.get(secondary_type, "Unknown")
    return RESOURCE_NAMES.get(resource_type, "Unknown")
