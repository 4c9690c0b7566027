"""
SQLAlchemy ORM models for the card store.

The store holds three collections: the raw catalog mirror, the canonical
cards (with their printings in a child table) and the sets.
"""

from datetime import datetime
from typing import Any

from sqlalchemy import (
    JSON,
    BigInteger,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
    func,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


class Base(DeclarativeBase):
    """Base class for all ORM models."""

    pass


class RawCardDB(Base):
    """
    Verbatim copy of one catalog record.

    Append-only; duplicates are expected since every catalog printing gets a row.
    """

    __tablename__ = "raw_cards"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    payload: Mapped[dict[str, Any]] = mapped_column(JSON)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())

    def __repr__(self) -> str:
        return f"<RawCardDB(id={self.id}, name={self.name})>"


class CardSetDB(Base):
    """
    A card set, identified by its abbreviation.

    Release dates are stored as epoch milliseconds.
    """

    __tablename__ = "card_sets"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    abbreviation: Mapped[str] = mapped_column(String(32), unique=True, index=True)
    name: Mapped[str | None] = mapped_column(String(255), index=True, nullable=True)
    released_at: Mapped[int | None] = mapped_column(BigInteger, nullable=True)

    def __repr__(self) -> str:
        return f"<CardSetDB(abbreviation={self.abbreviation}, name={self.name})>"


class CardDB(Base):
    """
    Canonical card: one row per distinct card name.

    Search fields (lowercase mirrors, tags, abilities) are derived once,
    from the first printing of the name seen by the import.
    """

    __tablename__ = "cards"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), unique=True, index=True)
    type: Mapped[str] = mapped_column(String(255))
    description: Mapped[str] = mapped_column(Text)

    lcase_name: Mapped[str] = mapped_column(String(255), index=True)
    lcase_type: Mapped[str] = mapped_column(String(255))
    lcase_description: Mapped[str] = mapped_column(Text)

    mana_cost: Mapped[str | None] = mapped_column(String(64), nullable=True)
    colors: Mapped[list[str]] = mapped_column(JSON, default=list)
    tags: Mapped[list[str]] = mapped_column(JSON, default=list)
    abilities: Mapped[list[str]] = mapped_column(JSON, default=list)

    # Sampling value for picking a random card
    random: Mapped[float] = mapped_column(Float, index=True)

    # Catalog attributes with no dedicated column (power, toughness, ...)
    extra: Mapped[dict[str, Any]] = mapped_column(JSON, default=dict)

    printings: Mapped[list["PrintingDB"]] = relationship(
        back_populates="card",
        cascade="all, delete-orphan",
        order_by="PrintingDB.id",
    )

    def __repr__(self) -> str:
        return f"<CardDB(name={self.name})>"


class PrintingDB(Base):
    """
    One printing of a canonical card.

    Rows are only ever appended; insertion order is the printing order.
    """

    __tablename__ = "card_printings"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    card_name: Mapped[str] = mapped_column(
        String(255), ForeignKey("cards.name", ondelete="CASCADE"), index=True
    )

    # Catalog ids and collector numbers may be numbers or strings
    catalog_id: Mapped[Any] = mapped_column(JSON, nullable=True)
    set_number: Mapped[Any] = mapped_column(JSON, nullable=True)

    artist: Mapped[str | None] = mapped_column(String(255), nullable=True)
    card_set_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    card_set_id: Mapped[str | None] = mapped_column(String(32), nullable=True)
    flavor: Mapped[str | None] = mapped_column(Text, nullable=True)
    rarity: Mapped[str | None] = mapped_column(String(50), nullable=True)
    released_at: Mapped[str | None] = mapped_column(String(32), nullable=True)

    card: Mapped["CardDB"] = relationship(back_populates="printings")

    def __repr__(self) -> str:
        return f"<PrintingDB(card={self.card_name}, set={self.card_set_id})>"
