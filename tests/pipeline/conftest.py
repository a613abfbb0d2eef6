import pytest

from kiroku.config import Settings
from kiroku.simlog.action_id import ActionId
from kiroku.simlog.constants import ResourceType
from kiroku.simlog.entity import Entity
from kiroku.simlog.events import (
    AuraEvent,
    CastBegan,
    CastCompleted,
    DamageDealt,
    ResourceChanged,
    SimLog,
)

ALICE = Entity(name="Alice", index=0)
BOB = Entity(name="Bob", index=1)
WOLF = Entity(name="Wolf", owner_name="Alice", index=0, is_pet=True)
TARGET = Entity(name="Target 1", index=0, is_target=True)

FIREBALL = ActionId(spell_id=133, name="Fireball")
FROSTBOLT = ActionId(spell_id=116, name="Frostbolt")
CLAW = ActionId(spell_id=16827, name="Claw")
MELEE = ActionId(other_id=1, name="Melee")
HEAL = ActionId(spell_id=2050, name="Lesser Heal")
BUFF = ActionId(spell_id=1459, name="Arcane Intellect")

ENCOUNTER_DURATION = 20.0


@pytest.fixture
def settings():
    return Settings(_env_file=None)


@pytest.fixture
def sample_events():
    """Alice casts a Fireball, her wolf and Bob add damage, the target
    swings back, Alice heals, spends mana and drops her buff."""
    return [
        CastBegan(log_index=0, timestamp=0.0, source=ALICE, action_id=FIREBALL,
                  cast_time=2.0, effective_time=2.0),
        AuraEvent(log_index=1, timestamp=1.0, source=ALICE, action_id=BUFF,
                  is_gained=True),
        CastCompleted(log_index=2, timestamp=2.0, source=ALICE, action_id=FIREBALL),
        AuraEvent(log_index=3, timestamp=2.0, source=BOB, action_id=BUFF,
                  is_gained=True),
        DamageDealt(log_index=4, timestamp=3.0, source=ALICE, target=TARGET,
                    action_id=FIREBALL, amount=300.0, threat=330.0),
        DamageDealt(log_index=5, timestamp=3.0, source=WOLF, target=TARGET,
                    action_id=CLAW, amount=60.0),
        DamageDealt(log_index=6, timestamp=4.0, source=BOB, target=TARGET,
                    action_id=FROSTBOLT, amount=90.0),
        DamageDealt(log_index=7, timestamp=5.0, source=TARGET, target=ALICE,
                    action_id=MELEE, amount=500.0),
        DamageDealt(log_index=8, timestamp=6.0, source=ALICE, target=ALICE,
                    action_id=HEAL, amount=200.0, kind="healing"),
        ResourceChanged(log_index=9, timestamp=7.0, source=ALICE,
                        resource_type=ResourceType.MANA, value_before=1000.0,
                        value_after=880.0, is_spend=True, total=1000.0),
        AuraEvent(log_index=10, timestamp=8.0, source=ALICE, action_id=BUFF,
                  is_faded=True),
        SimLog(log_index=11, timestamp=9.0, raw="[9.00] Encounter phase change"),
    ]
