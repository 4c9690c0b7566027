"""
Printing extraction.

Splits a raw catalog record into the attributes that belong to one printing
of a card and the attributes shared by every printing.
"""

import dataclasses
from collections.abc import Mapping

from cardindex.models.card import PRINTING_KEYS, Printing, RawCardRecord

PRINTING_ATTRIBUTES: tuple[str, ...] = tuple(PRINTING_KEYS)


def get_printing(record: RawCardRecord, set_replacements: Mapping[str, str]) -> Printing:
    """
    Copy the printing attributes of a record into a detached Printing.

    Missing attributes become None. The set abbreviation is reconciled
    through set_replacements: a catalog abbreviation found in the table is
    replaced by the mapped value.
    """
    printing = Printing.from_record(record)

    if printing.card_set_id in set_replacements:
        printing = dataclasses.replace(
            printing, card_set_id=set_replacements[printing.card_set_id]
        )
    return printing


def delete_printing_information(record: RawCardRecord) -> None:
    """Remove every printing attribute from the record, in place."""
    for attribute in PRINTING_ATTRIBUTES:
        record.pop(attribute, None)
