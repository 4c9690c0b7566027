from pathlib import Path

import pytest
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from cardindex.models.card import RawCardRecord
from cardindex.models.db import Base
from cardindex.services.import_tables import ImportTables


@pytest.fixture
def tables() -> ImportTables:
    """Small keyword tables for testing."""
    return ImportTables(
        set_names={
            "Theros": "THS",
            "Limited Edition Alpha": "LEA",
            "Commander 2014": "C14",
        },
        abilities=("Flying", "First strike", "Lifelink", "Trample"),
        set_replacements={"LEA": "1E", "PO2": "P2"},
    )


@pytest.fixture
def elvish_mystic() -> RawCardRecord:
    """A catalog record with every field populated."""
    return {
        "id": 373741,
        "name": "Elvish Mystic",
        "type": "Creature",
        "description": "",
        "cardSetName": "Theros",
        "cardSetId": "THS",
        "manaCost": "G",
        "colors": ["Green"],
        "rarity": "Common",
        "artist": "Wesley Burt",
        "flavor": "Life grows everywhere.",
        "setNumber": 169,
        "releasedAt": "2013-09-27",
    }


@pytest.fixture
async def async_engine(tmp_path: Path) -> AsyncEngine:
    """
    Create a file-backed SQLite engine for testing.

    A file rather than :memory: so that concurrent sessions see one database.
    """
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'cards.db'}", echo=False)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
def session_factory(async_engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(async_engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def session(session_factory: async_sessionmaker[AsyncSession]) -> AsyncSession:
    """Provide a database session for tests."""
    async with session_factory() as session:
        yield session
