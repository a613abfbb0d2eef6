"""Participant references parsed from bracketed sim log labels."""

import re
from dataclasses import dataclass, field

# One alternative per label form: target, pet, player.
_ENTITY_RE = re.compile(
    r"\[(?:"
    r"Target (?P<target>\d+)"
    r"|(?P<owner>[a-zA-Z0-9]+) \(#(?P<owner_index>\d+)\) - (?P<pet>[a-zA-Z0-9\s:,]+)"
    r"|(?P<player>[a-zA-Z0-9\s]+) \(#(?P<player_index>\d+)\)"
    r")\]"
)

# Brackets that claim to be an entity label. Anything here that the full
# pattern rejects is a malformed label.
_ENTITY_CANDIDATE_RE = re.compile(r"\[(?:Target\b[^\[\]]*|[^\[\]]*\(#[^\[\]]*)\]")


class EntityParseError(ValueError):
    """Raised when a bracketed entity label matches none of the known forms."""


@dataclass(frozen=True)
class Entity:
    name: str
    owner_name: str = field(default="", compare=False)  # Blank unless a pet

    # Target index, player index, or owner index depending on the entity kind.
    index: int = 0

    is_target: bool = False
    is_pet: bool = False

    def __str__(self) -> str:
        if self.is_target:
            return f"Target {self.index + 1}"
        if self.is_pet:
            return f"{self.owner_name} (#{self.index + 1}) - {self.name}"
        return f"{self.name} (#{self.index + 1})"

    def is_owned_by(self, owner: "Entity") -> bool:
        """True if this is a pet of the given player."""
        return (
            self.is_pet
            and not owner.is_pet
            and not owner.is_target
            and self.owner_name == owner.name
            and self.index == owner.index
        )


def _entity_from_match(match: re.Match) -> Entity:
    if match.group("target") is not None:
        return Entity(
            name=f"Target {match.group('target')}",
            index=int(match.group("target")) - 1,
            is_target=True,
        )
    if match.group("pet") is not None:
        return Entity(
            name=match.group("pet"),
            owner_name=match.group("owner"),
            index=int(match.group("owner_index")) - 1,
            is_pet=True,
        )
    if match.group("player") is not None:
        return Entity(
            name=match.group("player"),
            index=int(match.group("player_index")) - 1,
        )
    raise EntityParseError(f"Invalid entity match: {match.group(0)!r}")


def parse_entities(text: str) -> list[Entity]:
    """Parse every entity label in text, in left-to-right order.

    Recognized labels:
        [Target 1]             a target
        [Name (#1)]            a player
        [Owner (#1) - Pet]     a pet

    Indices in the text are 1-based; Entity.index is 0-based.

    Raises:
        EntityParseError: a bracket looks like an entity label but fits none
            of the forms above.
    """
    entities: list[Entity] = []
    for candidate in _ENTITY_CANDIDATE_RE.finditer(text):
        match = _ENTITY_RE.fullmatch(candidate.group(0))
        if match is None:
            raise EntityParseError(
                f"Malformed entity label {candidate.group(0)!r} in {text!r}"
            )
        entities.append(_entity_from_match(match))
    return entities
