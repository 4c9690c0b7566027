"""
Database engine and session management.

Provides the async SQLAlchemy engine and session factory used by the import
jobs, plus the start-of-run reset of the card store.
"""

from sqlalchemy import delete
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from cardindex.config import settings
from cardindex.models.db import Base, CardDB, CardSetDB, PrintingDB, RawCardDB

# Create async engine
engine = create_async_engine(
    settings.database_url,
    echo=settings.debug,
    pool_pre_ping=True,
)

# Session factory
async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


async def init_db(bind: AsyncEngine | None = None) -> None:
    """
    Initialize database tables.

    Creates all tables and indexes defined in the ORM models.
    Existing tables are left untouched.
    """
    async with (bind or engine).begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def reset_store(bind: AsyncEngine | None = None) -> None:
    """
    Ensure the card store tables exist and empty them.

    Called once at the start of every import run; every run fully
    replaces the data of the previous one.
    """
    await init_db(bind)
    async with (bind or engine).begin() as conn:
        # Children before parents
        for model in (PrintingDB, CardDB, CardSetDB, RawCardDB):
            await conn.execute(delete(model))

