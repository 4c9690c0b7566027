from cardindex.db.database import async_session_factory, init_db, reset_store
from cardindex.db.operations import (
    append_printing,
    card_exists,
    card_to_model,
    get_card,
    get_set,
    insert_raw_card,
    insert_set_if_absent,
    list_cards,
    list_raw_cards,
    list_sets,
    printing_to_model,
    upsert_card,
)

__all__ = [
    "append_printing",
    "async_session_factory",
    "card_exists",
    "card_to_model",
    "get_card",
    "get_set",
    "init_db",
    "insert_raw_card",
    "insert_set_if_absent",
    "list_cards",
    "list_raw_cards",
    "list_sets",
    "printing_to_model",
    "reset_store",
    "upsert_card",
]
