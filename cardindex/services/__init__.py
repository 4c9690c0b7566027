from cardindex.services.card_importer import CardImporter, CardImportTask
from cardindex.services.card_normalizer import CardNormalizer, find_abilities, name_tokens
from cardindex.services.catalog import download_catalog, load_catalog
from cardindex.services.import_tables import ImportTables, get_import_tables, load_import_tables
from cardindex.services.keyed_lock import KeyedLock
from cardindex.services.printing import (
    PRINTING_ATTRIBUTES,
    delete_printing_information,
    get_printing,
)
from cardindex.services.set_resolver import SetResolver, parse_released_at

__all__ = [
    "PRINTING_ATTRIBUTES",
    "CardImportTask",
    "CardImporter",
    "CardNormalizer",
    "ImportTables",
    "KeyedLock",
    "SetResolver",
    "delete_printing_information",
    "download_catalog",
    "find_abilities",
    "get_import_tables",
    "get_printing",
    "load_catalog",
    "load_import_tables",
    "name_tokens",
    "parse_released_at",
]
