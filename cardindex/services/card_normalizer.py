"""
Card normalization.

Turns the first catalog record seen for a card name into a CanonicalCard:
lowercase search mirrors, a random sampling value, search tags, ability
keywords and the first printing.

Tags are a flat bag of tokens and are deliberately not deduplicated; a
token that appears twice (e.g. the set name and a word of the card name)
is kept twice.
"""

import logging
import random
import re
from typing import Any

from cardindex.models.card import CanonicalCard, RawCardRecord
from cardindex.models.failure import ImportFailureKind
from cardindex.services.import_tables import ImportTables
from cardindex.services.printing import delete_printing_information, get_printing
from cardindex.services.set_resolver import SetResolver

logger = logging.getLogger(__name__)

_NON_WORD = re.compile(r"[^\w\s]")
_TRAILING_NON_WORD = re.compile(r"[^\w]+$")
_POSSESSIVE = "'s"

# Record keys that map onto CanonicalCard fields rather than into `extra`
_CARD_FIELDS = frozenset(
    {
        "name",
        "type",
        "description",
        "manaCost",
        "colors",
        "lcaseName",
        "lcaseType",
        "lcaseDescription",
        "random",
        "tags",
        "abilities",
        "printings",
        "_id",
    }
)


def name_tokens(lcase_name: str) -> list[str]:
    """
    Split a lowercase card name into search tokens.

    Each whitespace-separated word is stripped of punctuation. A word ending
    in a possessive "'s" also contributes the word without it, so "serra"
    finds "Serra's Sanctum". An apostrophe inside the word is not a
    possessive: "o'shea's" yields "osheas" and "oshea".
    """
    tokens: list[str] = []
    for part in lcase_name.split():
        token = _NON_WORD.sub("", part)
        tokens.append(token)

        trimmed = _TRAILING_NON_WORD.sub("", part)
        if trimmed.endswith(_POSSESSIVE):
            without_possessive = _NON_WORD.sub("", trimmed[: -len(_POSSESSIVE)])
            if without_possessive and without_possessive != token:
                tokens.append(without_possessive)
    return tokens


def find_abilities(lcase_description: str, abilities: tuple[str, ...]) -> list[str]:
    """Get every ability keyword contained in the description, lowercased."""
    found: list[str] = []
    for ability in abilities:
        keyword = ability.lower()
        if keyword in lcase_description:
            found.append(keyword)
    return found


class CardNormalizer:
    """
    Builds canonical cards from raw catalog records.

    Runs once per distinct card name; later records with the same name only
    contribute a printing.
    """

    def __init__(self, tables: ImportTables, set_resolver: SetResolver | None = None) -> None:
        self._abilities = tables.abilities
        self._set_replacements = tables.set_replacements
        self._set_resolver = set_resolver or SetResolver(tables)
        self.validation_warnings = 0

    def _validate(self, record: RawCardRecord) -> None:
        # An empty description is valid (vanilla creatures, basic lands)
        if not record.get("name") or not record.get("type") or record.get("description") is None:
            self.validation_warnings += 1
            logger.warning(
                "Card is missing a name, type or description: %r",
                record,
                extra={"import_failure_kind": ImportFailureKind.VALIDATION_WARNING},
            )

    def format_card(self, record: RawCardRecord) -> CanonicalCard:
        """
        Normalize a raw record into a CanonicalCard.

        The record is modified in place: its set id is resolved and its
        printing attributes are removed once copied into the first printing.
        A record missing its name, type or description is logged and still
        normalized, with the missing fields treated as empty.
        """
        self._validate(record)

        name = record.get("name") or ""
        card_type = record.get("type") or ""
        description = record.get("description") or ""
        lcase_name = name.lower()

        set_id = self._set_resolver.resolve_set_id(record)
        tags: list[str] = [set_id.lower(), (record.get("cardSetName") or "").lower()]

        printing = get_printing(record, self._set_replacements)
        delete_printing_information(record)

        tags.append(name)
        tags.append(lcase_name)
        tags.extend(name_tokens(lcase_name))

        lcase_description = description.lower()
        abilities = find_abilities(lcase_description, self._abilities)
        tags.extend(abilities)

        mana_cost = record.get("manaCost")
        if mana_cost:
            tags.append(mana_cost.lower())

        colors: list[str] = list(record.get("colors") or [])
        tags.extend(color.lower() for color in colors)

        extra: dict[str, Any] = {
            key: value for key, value in record.items() if key not in _CARD_FIELDS
        }

        return CanonicalCard(
            name=name,
            type=card_type,
            description=description,
            lcase_name=lcase_name,
            lcase_type=card_type.lower(),
            lcase_description=lcase_description,
            random=random.random(),
            mana_cost=mana_cost or None,
            colors=colors,
            tags=tags,
            abilities=abilities,
            printings=[printing],
            extra=extra,
        )
