from dataclasses import dataclass


@dataclass(slots=True)
class ImportSummary:
    """
    Counters for one import run.

    Attributes:
        total_records: Catalog records processed
        cards_created: Distinct card names inserted
        printings_appended: Printings added to an already existing card
        sets_created: Sets written to the store
        unknown_sets: Records whose set could not be resolved
        validation_warnings: Cards written despite a missing name, type or description
    """

    total_records: int = 0
    cards_created: int = 0
    printings_appended: int = 0
    sets_created: int = 0
    unknown_sets: int = 0
    validation_warnings: int = 0
