import pytest

from kiroku.simlog.entity import Entity, EntityParseError, parse_entities


class TestParseEntities:

    def test_target(self):
        [entity] = parse_entities("[Target 3]")
        assert entity.is_target is True
        assert entity.is_pet is False
        assert entity.index == 2
        assert entity.name == "Target 3"

    def test_pet(self):
        [entity] = parse_entities("[Bob (#2) - Wolf]")
        assert entity.is_pet is True
        assert entity.is_target is False
        assert entity.owner_name == "Bob"
        assert entity.name == "Wolf"
        assert entity.index == 1

    def test_player(self):
        [entity] = parse_entities("[Alice (#1)]")
        assert entity == Entity(name="Alice", index=0)
        assert entity.owner_name == ""

    def test_player_name_with_spaces(self):
        [entity] = parse_entities("[Frost Mage (#4)]")
        assert entity.name == "Frost Mage"
        assert entity.index == 3

    def test_pet_name_with_punctuation(self):
        [entity] = parse_entities("[Bob (#1) - Mirror Image: 2]")
        assert entity.name == "Mirror Image: 2"
        assert entity.is_pet

    def test_order_is_left_to_right(self):
        entities = parse_entities(
            " [Alice (#1)] {SpellID: 133} Hit [Target 1] for 10.00 damage."
        )
        assert [str(e) for e in entities] == ["Alice (#1)", "Target 1"]

    def test_no_labels(self):
        assert parse_entities(" Aura gained: {SpellID: 1}") == []

    def test_ignores_non_entity_brackets(self):
        assert parse_entities("[12.50] nothing here") == []

    def test_malformed_label_raises(self):
        with pytest.raises(EntityParseError):
            parse_entities("[Al!ce (#1)]")

    def test_malformed_target_raises(self):
        with pytest.raises(EntityParseError):
            parse_entities("[Target one]")

    def test_parse_error_is_value_error(self):
        assert issubclass(EntityParseError, ValueError)


class TestEntity:

    def test_equality_ignores_owner_name(self):
        a = Entity(name="Wolf", owner_name="Bob", index=0, is_pet=True)
        b = Entity(name="Wolf", owner_name="Other", index=0, is_pet=True)
        assert a == b
        assert hash(a) == hash(b)

    def test_equality_compares_kind_and_index(self):
        player = Entity(name="Bob", index=0)
        assert player != Entity(name="Bob", index=1)
        assert player != Entity(name="Bob", index=0, is_pet=True)
        assert player != Entity(name="Bob", index=0, is_target=True)

    def test_str_round_trips_label(self):
        for label in ("Target 1", "Bob (#2)", "Bob (#2) - Wolf"):
            [entity] = parse_entities(f"[{label}]")
            assert str(entity) == label

    def test_is_owned_by(self):
        owner = Entity(name="Bob", index=1)
        pet = Entity(name="Wolf", owner_name="Bob", index=1, is_pet=True)
        other_pet = Entity(name="Wolf", owner_name="Bob", index=2, is_pet=True)
        assert pet.is_owned_by(owner)
        assert not other_pet.is_owned_by(owner)
        assert not owner.is_owned_by(owner)

    def test_frozen(self):
        entity = Entity(name="Bob", index=0)
        with pytest.raises(AttributeError):
            entity.index = 3
