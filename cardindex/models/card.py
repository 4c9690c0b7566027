"""
Card domain models.

RawCardRecord is the catalog entry exactly as ingested: a plain dict with
camelCase keys that the import pipeline mutates in place. Printing and
CanonicalCard are the normalized shapes written to the card store.
"""

from dataclasses import dataclass, field
from typing import Any

RawCardRecord = dict[str, Any]

# Catalog key -> Printing attribute
PRINTING_KEYS: dict[str, str] = {
    "id": "id",
    "artist": "artist",
    "cardSetName": "card_set_name",
    "cardSetId": "card_set_id",
    "flavor": "flavor",
    "rarity": "rarity",
    "releasedAt": "released_at",
    "setNumber": "set_number",
}


@dataclass(frozen=True, slots=True)
class Printing:
    """
    Edition-specific attributes of a card.

    A detached copy taken from a raw record. Never holds shared card
    fields such as name, type or rules text.

    Attributes:
        id: Catalog id of this printing
        artist: Credited artist
        card_set_name: Full name of the set (e.g., "Theros")
        card_set_id: Set abbreviation after reconciliation (e.g., "THS")
        flavor: Flavor text
        rarity: Rarity of this printing
        released_at: Release date string as supplied by the catalog
        set_number: Collector number within the set
    """

    id: Any = None
    artist: str | None = None
    card_set_name: str | None = None
    card_set_id: str | None = None
    flavor: str | None = None
    rarity: str | None = None
    released_at: str | None = None
    set_number: Any = None

    @classmethod
    def from_record(cls, record: RawCardRecord) -> "Printing":
        """Copy the printing attributes of a catalog record; missing ones become None."""
        return cls(**{attr: record.get(key) for key, attr in PRINTING_KEYS.items()})

    def to_record(self) -> dict[str, Any]:
        """Printing attributes under their catalog keys."""
        return {key: getattr(self, attr) for key, attr in PRINTING_KEYS.items()}


@dataclass(slots=True)
class CanonicalCard:
    """
    Deduplicated card aggregating every printing of one card name.

    The name is the identity key. Tags are a flat bag of search tokens and
    are never deduplicated. Printings are append-only.
    """

    name: str
    type: str
    description: str
    lcase_name: str
    lcase_type: str
    lcase_description: str
    random: float
    mana_cost: str | None = None
    colors: list[str] = field(default_factory=list)
    tags: list[str] = field(default_factory=list)
    abilities: list[str] = field(default_factory=list)
    printings: list[Printing] = field(default_factory=list)
    extra: dict[str, Any] = field(default_factory=dict)
