"""
Per-record import workflow.

For every catalog record: resolve and persist its set, mirror the raw
record, then either create the canonical card (first time the name is
seen) or append the record's printing to the existing card.

Two records with the same name are always printings of one card. Workflows
for the same name are serialized behind a per-name lock; the store's
upsert-by-name and single-row printing appends keep concurrent writers
consistent beyond that.
"""

import logging
from dataclasses import dataclass

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from cardindex.config import UNKNOWN_SET_ID
from cardindex.db.operations import append_printing, card_exists, insert_raw_card, upsert_card
from cardindex.models.card import RawCardRecord
from cardindex.models.failure import CardImportError, LookupFailure, WriteFailure
from cardindex.models.import_result import ImportSummary
from cardindex.services.card_normalizer import CardNormalizer
from cardindex.services.import_tables import ImportTables
from cardindex.services.keyed_lock import KeyedLock
from cardindex.services.printing import get_printing
from cardindex.services.set_resolver import SetResolver

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class CardImportTask:
    """
    One catalog record scheduled for import.

    Each task owns its record; the pipeline hands every task its own copy.
    """

    index: int
    record: RawCardRecord


class CardImporter:
    """
    Runs the import workflow for individual records.

    Shared by all concurrent workflows of one run; collects the run's
    counters in `summary`.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        tables: ImportTables,
    ) -> None:
        self._session_factory = session_factory
        self._set_replacements = tables.set_replacements
        self._card_locks = KeyedLock()
        self.set_resolver = SetResolver(tables)
        self.normalizer = CardNormalizer(tables, set_resolver=self.set_resolver)
        self.summary = ImportSummary()

    async def import_record(self, task: CardImportTask) -> None:
        """
        Import one catalog record.

        Raises:
            LookupFailure: If a store read fails
            WriteFailure: If a store write fails
        """
        record = task.record
        async with self._session_factory() as session:
            try:
                await self._import_set(session, record)
                await self._insert_raw(session, record)
                created = await self.upsert_card_record(session, record)
            except CardImportError as e:
                logger.error("Failed to import card %r: %s", record.get("name"), e.message)
                raise

        if created:
            self.summary.cards_created += 1
        else:
            self.summary.printings_appended += 1
        self.summary.validation_warnings = self.normalizer.validation_warnings

    async def _import_set(self, session: AsyncSession, record: RawCardRecord) -> None:
        set_id = self.set_resolver.resolve_set_id(record)
        if set_id == UNKNOWN_SET_ID:
            self.summary.unknown_sets += 1

        released_at = self.set_resolver.get_card_released_at(record)
        created = await self.set_resolver.ensure_set_persisted(
            session, set_id, record.get("cardSetName"), released_at
        )
        if created:
            self.summary.sets_created += 1

    async def _insert_raw(self, session: AsyncSession, record: RawCardRecord) -> None:
        try:
            await insert_raw_card(session, record)
            await session.commit()
        except SQLAlchemyError as e:
            raise WriteFailure(
                f"Failed to store raw card {record.get('name')!r}", detail=str(e)
            ) from e

    async def upsert_card_record(self, session: AsyncSession, record: RawCardRecord) -> bool:
        """
        Create the canonical card for a record, or add its printing.

        Cards are matched by exact name. A new name is normalized and
        upserted; a known name only gets the record's printing appended.

        Returns:
            True if a new card was created, False if a printing was appended.

        Raises:
            LookupFailure: If the existence check fails
            WriteFailure: If the upsert or append fails
        """
        name = record.get("name") or ""

        async with self._card_locks.hold(name):
            try:
                exists = await card_exists(session, name)
            except SQLAlchemyError as e:
                raise LookupFailure(f"Failed to look up card {name!r}", detail=str(e)) from e

            try:
                if exists:
                    printing = get_printing(record, self._set_replacements)
                    await append_printing(session, name, printing)
                else:
                    card = self.normalizer.format_card(record)
                    await upsert_card(session, card)
                await session.commit()
            except SQLAlchemyError as e:
                raise WriteFailure(f"Failed to store card {name!r}", detail=str(e)) from e

        return not exists
