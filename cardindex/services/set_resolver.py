"""
Set identity resolution.

Maps a catalog record to its set abbreviation and makes sure each set is
written to the store once per run.
"""

import logging
from datetime import UTC, datetime

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from cardindex.config import RELEASE_DATE_EXCEPTIONS, UNKNOWN_SET_ID
from cardindex.db.operations import get_set, insert_set_if_absent
from cardindex.models.card import RawCardRecord
from cardindex.models.failure import ImportFailureKind, LookupFailure, WriteFailure
from cardindex.services.import_tables import ImportTables
from cardindex.services.keyed_lock import KeyedLock

logger = logging.getLogger(__name__)


def parse_released_at(value: str | None) -> int | None:
    """
    Parse a release date into epoch milliseconds.

    Accepts ISO dates and datetimes; values without a timezone are taken
    as UTC. Returns None for missing or unparseable values.
    """
    if not value:
        return None

    try:
        parsed = datetime.fromisoformat(str(value))
    except ValueError:
        logger.debug("Unparseable release date: %r", value)
        return None

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return round(parsed.timestamp() * 1000)


class SetResolver:
    """
    Resolves and persists card sets.

    The set abbreviation is the identity of a set, both when checking
    whether it exists and when writing it.
    """

    def __init__(self, tables: ImportTables, locks: KeyedLock | None = None) -> None:
        self._set_names = tables.set_names
        self._locks = locks or KeyedLock()

    def resolve_set_id(self, record: RawCardRecord) -> str:
        """
        Get the set abbreviation of a record.

        Uses the record's own cardSetId when present, otherwise looks the
        set name up in the set-name table. Unknown sets get UNKNOWN_SET_ID.
        The result is stored back onto the record.
        """
        if not record.get("cardSetId"):
            set_name = record.get("cardSetName")
            set_id = self._set_names.get(set_name) if set_name else None
            if set_id:
                record["cardSetId"] = set_id
            else:
                logger.warning(
                    "Unknown card set %r for card %r (id=%s)",
                    set_name,
                    record.get("name"),
                    record.get("id"),
                    extra={"import_failure_kind": ImportFailureKind.UNKNOWN_SET},
                )
                record["cardSetId"] = UNKNOWN_SET_ID

        return record["cardSetId"]

    @staticmethod
    def get_card_released_at(record: RawCardRecord) -> str | None:
        """
        Get the release date of a record's set.

        Fills in known release dates for sets the catalog ships without one.
        The filled value is only used for the set, never for a printing.
        """
        released_at = record.get("releasedAt")
        if not released_at:
            released_at = RELEASE_DATE_EXCEPTIONS.get(record.get("cardSetId") or "")
        return released_at

    async def ensure_set_persisted(
        self,
        session: AsyncSession,
        set_id: str,
        name: str | None,
        released_at: str | None,
    ) -> bool:
        """
        Write a set unless it is already stored.

        Workflows for the same abbreviation are serialized, and the insert
        itself ignores conflicts.

        Returns:
            True if this call wrote the set.

        Raises:
            LookupFailure: If the existence check fails
            WriteFailure: If the insert fails
        """
        async with self._locks.hold(set_id):
            try:
                existing = await get_set(session, set_id)
            except SQLAlchemyError as e:
                raise LookupFailure(f"Failed to look up set {set_id}", detail=str(e)) from e

            if existing is not None:
                return False

            try:
                created = await insert_set_if_absent(
                    session, set_id, name, parse_released_at(released_at)
                )
                await session.commit()
            except SQLAlchemyError as e:
                raise WriteFailure(f"Failed to store set {set_id}", detail=str(e)) from e

        if created:
            logger.debug("Stored set %s (%s)", set_id, name)
        return created
