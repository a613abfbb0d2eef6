"""Action identifiers: the spell, item or other action behind a log line."""

import re
from dataclasses import dataclass, field

_ACTION_ID_RE = re.compile(
    r"\{(?P<kind>SpellID|ItemID|OtherID): (?P<id>-?\d+)(?:, Tag: (?P<tag>-?\d+))?\}"
)


class ActionIdParseError(ValueError):
    """Raised when a log label carries no recognizable action identifier."""


@dataclass(frozen=True)
class ActionId:
    """Opaque, comparable reference to an ability, aura, or item.

    Exactly one of spell_id/item_id/other_id is nonzero. The tag refines
    the action (rank, variant, bounce) and is ignored by
    equals_ignoring_tag(). The display name does not take part in equality.
    """

    spell_id: int = 0
    item_id: int = 0
    other_id: int = 0
    tag: int = 0
    name: str = field(default="", compare=False)

    @classmethod
    def from_log_string(cls, label: str) -> "ActionId":
        match = _ACTION_ID_RE.search(label)
        if match is None:
            raise ActionIdParseError(f"No action id in log label: {label!r}")

        kind = match.group("kind")
        action_id = int(match.group("id"))
        tag = int(match.group("tag")) if match.group("tag") else 0
        return cls(
            spell_id=action_id if kind == "SpellID" else 0,
            item_id=action_id if kind == "ItemID" else 0,
            other_id=action_id if kind == "OtherID" else 0,
            tag=tag,
        )

    @property
    def default_name(self) -> str:
        if self.spell_id:
            return f"Spell-{self.spell_id}"
        if self.item_id:
            return f"Item-{self.item_id}"
        return f"Other-{self.other_id}"

    @property
    def display_name(self) -> str:
        return self.name or self.default_name

    def equals_ignoring_tag(self, other: "ActionId") -> bool:
        return (
            self.spell_id == other.spell_id
            and self.item_id == other.item_id
            and self.other_id == other.other_id
        )

    def to_string_ignoring_tag(self) -> str:
        if self.spell_id:
            return f"spell-{self.spell_id}"
        if self.item_id:
            return f"item-{self.item_id}"
        return f"other-{self.other_id}"

    def __str__(self) -> str:
        base = self.to_string_ignoring_tag()
        return f"{base}-{self.tag}" if self.tag else base


def same_action(a: ActionId | None, b: ActionId | None) -> bool:
    """Exact or tag-insensitive match. Missing identifiers never match."""
    if a is None or b is None:
        return False
    return a == b or a.equals_ignoring_tag(b)
