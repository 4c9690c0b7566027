"""
Card store operations.

The store exposes three primitives per collection: find-one, upsert and
(for printings) an atomic append. Inserts that may race use the dialect's
conflict clause so that concurrent writers converge on one row.
"""

import copy
from typing import Any

from sqlalchemy import Table, select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from cardindex.models.card import CanonicalCard, Printing, RawCardRecord
from cardindex.models.db import CardDB, CardSetDB, PrintingDB, RawCardDB


def _insert(session: AsyncSession, table: Table) -> Any:
    """Return a dialect-specific INSERT that supports ON CONFLICT."""
    dialect = session.bind.dialect.name if session.bind is not None else None
    if dialect == "postgresql":
        return postgresql.insert(table)
    if dialect == "sqlite":
        return sqlite.insert(table)
    msg = f"Unsupported database dialect for upserts: {dialect}"
    raise ValueError(msg)


# --- Set Operations ---


async def get_set(session: AsyncSession, abbreviation: str) -> CardSetDB | None:
    """
    Get a set by abbreviation.

    Returns None if the set has not been stored.
    """
    result = await session.execute(select(CardSetDB).where(CardSetDB.abbreviation == abbreviation))
    return result.scalar_one_or_none()


async def insert_set_if_absent(
    session: AsyncSession,
    abbreviation: str,
    name: str | None,
    released_at: int | None,
) -> bool:
    """
    Insert a set unless one with the same abbreviation already exists.

    Returns True if a row was written.
    """
    stmt = (
        _insert(session, CardSetDB.__table__)
        .values(abbreviation=abbreviation, name=name, released_at=released_at)
        .on_conflict_do_nothing(index_elements=["abbreviation"])
    )
    result = await session.execute(stmt)
    # rowcount is available on INSERT results; type stubs incomplete for async
    return int(result.rowcount) > 0  # type: ignore[attr-defined]


async def list_sets(session: AsyncSession) -> list[CardSetDB]:
    """Get all sets ordered by abbreviation."""
    result = await session.execute(select(CardSetDB).order_by(CardSetDB.abbreviation))
    return list(result.scalars().all())


# --- Raw Card Operations ---


async def insert_raw_card(session: AsyncSession, record: RawCardRecord) -> RawCardDB:
    """
    Store a verbatim copy of a catalog record.

    The payload is a deep copy so later in-place normalization of the
    record does not leak into the mirror.
    """
    raw = RawCardDB(name=record.get("name"), payload=copy.deepcopy(record))
    session.add(raw)
    await session.flush()
    return raw


async def list_raw_cards(session: AsyncSession) -> list[RawCardDB]:
    """Get the raw mirror in insertion order."""
    result = await session.execute(select(RawCardDB).order_by(RawCardDB.id))
    return list(result.scalars().all())


# --- Card Operations ---


async def get_card(session: AsyncSession, name: str) -> CardDB | None:
    """
    Get a canonical card by exact name, with its printings.

    Returns None if no card with this name exists.
    """
    result = await session.execute(
        select(CardDB).where(CardDB.name == name).options(selectinload(CardDB.printings))
    )
    return result.scalar_one_or_none()


async def card_exists(session: AsyncSession, name: str) -> bool:
    """Check for a canonical card by exact name without loading it."""
    result = await session.execute(select(CardDB.id).where(CardDB.name == name))
    return result.first() is not None


async def list_cards(session: AsyncSession) -> list[CardDB]:
    """Get all canonical cards with printings, ordered by name."""
    result = await session.execute(
        select(CardDB).order_by(CardDB.name).options(selectinload(CardDB.printings))
    )
    return list(result.scalars().all())


async def upsert_card(session: AsyncSession, card: CanonicalCard) -> None:
    """
    Insert or update a canonical card keyed by name, then append its printings.

    Concurrent upserts of the same name converge on one row; each caller's
    printings are appended, never overwritten.
    """
    values = {
        "type": card.type,
        "description": card.description,
        "lcase_name": card.lcase_name,
        "lcase_type": card.lcase_type,
        "lcase_description": card.lcase_description,
        "mana_cost": card.mana_cost,
        "colors": card.colors,
        "tags": card.tags,
        "abilities": card.abilities,
        "random": card.random,
        "extra": card.extra,
    }
    stmt = _insert(session, CardDB.__table__).values(name=card.name, **values)
    stmt = stmt.on_conflict_do_update(index_elements=["name"], set_=values)
    await session.execute(stmt)

    for printing in card.printings:
        await append_printing(session, card.name, printing)


async def append_printing(session: AsyncSession, card_name: str, printing: Printing) -> PrintingDB:
    """
    Append a printing to a card.

    A single-row INSERT, so concurrent appends to the same card never
    lose each other.
    """
    db_printing = PrintingDB(
        card_name=card_name,
        catalog_id=printing.id,
        artist=printing.artist,
        card_set_name=printing.card_set_name,
        card_set_id=printing.card_set_id,
        flavor=printing.flavor,
        rarity=printing.rarity,
        released_at=printing.released_at,
        set_number=printing.set_number,
    )
    session.add(db_printing)
    await session.flush()
    return db_printing


def printing_to_model(db_printing: PrintingDB) -> Printing:
    """Convert a database printing to a domain model."""
    return Printing(
        id=db_printing.catalog_id,
        artist=db_printing.artist,
        card_set_name=db_printing.card_set_name,
        card_set_id=db_printing.card_set_id,
        flavor=db_printing.flavor,
        rarity=db_printing.rarity,
        released_at=db_printing.released_at,
        set_number=db_printing.set_number,
    )


def card_to_model(db_card: CardDB) -> CanonicalCard:
    """Convert a database card (loaded with printings) to a domain model."""
    return CanonicalCard(
        name=db_card.name,
        type=db_card.type,
        description=db_card.description,
        lcase_name=db_card.lcase_name,
        lcase_type=db_card.lcase_type,
        lcase_description=db_card.lcase_description,
        random=db_card.random,
        mana_cost=db_card.mana_cost,
        colors=list(db_card.colors),
        tags=list(db_card.tags),
        abilities=list(db_card.abilities),
        printings=[printing_to_model(p) for p in db_card.printings],
        extra=dict(db_card.extra),
    )
