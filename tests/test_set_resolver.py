"""Tests for set resolution and persistence."""

import logging
from unittest.mock import AsyncMock, patch

import pytest
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from cardindex.db.operations import get_set, list_sets
from cardindex.models.failure import ImportFailureKind, LookupFailure, WriteFailure
from cardindex.services.import_tables import ImportTables
from cardindex.services.set_resolver import SetResolver, parse_released_at


@pytest.fixture
def resolver(tables: ImportTables) -> SetResolver:
    return SetResolver(tables)


class TestResolveSetId:
    def test_uses_record_set_id(self, resolver: SetResolver) -> None:
        """A record's own set id wins over the name table."""
        record = {"cardSetName": "Theros", "cardSetId": "XYZ"}

        assert resolver.resolve_set_id(record) == "XYZ"

    def test_maps_set_name(self, resolver: SetResolver) -> None:
        """Records without a set id are resolved by set name."""
        record = {"cardSetName": "Theros"}

        assert resolver.resolve_set_id(record) == "THS"

    def test_empty_set_id_falls_back_to_name(self, resolver: SetResolver) -> None:
        """An empty set id counts as missing."""
        record = {"cardSetName": "Theros", "cardSetId": ""}

        assert resolver.resolve_set_id(record) == "THS"

    def test_unknown_set_gets_sentinel(
        self, resolver: SetResolver, caplog: pytest.LogCaptureFixture
    ) -> None:
        """Set names absent from the table resolve to UNKNOWN and are logged."""
        record = {"name": "Mystery Card", "cardSetName": "Not A Real Set"}

        with caplog.at_level(logging.WARNING):
            assert resolver.resolve_set_id(record) == "UNKNOWN"

        assert "Unknown card set" in caplog.text

    def test_unknown_set_logged_with_kind(
        self, resolver: SetResolver, caplog: pytest.LogCaptureFixture
    ) -> None:
        """The unknown-set warning carries its failure kind."""
        with caplog.at_level(logging.WARNING):
            resolver.resolve_set_id({"name": "Mystery Card", "cardSetName": "Not A Real Set"})

        (log_record,) = caplog.records
        assert log_record.import_failure_kind == ImportFailureKind.UNKNOWN_SET

    def test_missing_set_name_gets_sentinel(self, resolver: SetResolver) -> None:
        """Records with neither a set id nor a set name are unknown."""
        assert resolver.resolve_set_id({"name": "Orphan"}) == "UNKNOWN"

    def test_result_memoized_on_record(self, resolver: SetResolver) -> None:
        """The resolved id is stored on the record."""
        record = {"cardSetName": "Theros"}

        resolver.resolve_set_id(record)

        assert record["cardSetId"] == "THS"

    def test_unknown_logged_once(
        self, resolver: SetResolver, caplog: pytest.LogCaptureFixture
    ) -> None:
        """Resolving the same record again uses the memoized sentinel."""
        record = {"cardSetName": "Not A Real Set"}

        with caplog.at_level(logging.WARNING):
            resolver.resolve_set_id(record)
            resolver.resolve_set_id(record)

        assert caplog.text.count("Unknown card set") == 1


class TestGetCardReleasedAt:
    def test_keeps_record_date(self) -> None:
        """A record's own release date is used."""
        record = {"cardSetId": "C14", "releasedAt": "2014-11-01"}

        assert SetResolver.get_card_released_at(record) == "2014-11-01"

    def test_fills_known_exceptions(self) -> None:
        """Sets shipped without a date get the known one."""
        assert SetResolver.get_card_released_at({"cardSetId": "C14"}) == "2014-11-07"
        assert SetResolver.get_card_released_at({"cardSetId": "V14"}) == "2014-08-22"

    def test_other_sets_stay_empty(self) -> None:
        """No date is invented for other sets."""
        assert SetResolver.get_card_released_at({"cardSetId": "THS"}) is None

    def test_record_not_modified(self) -> None:
        """The filled date is not written back onto the record."""
        record = {"cardSetId": "C14"}

        SetResolver.get_card_released_at(record)

        assert "releasedAt" not in record


class TestParseReleasedAt:
    def test_date_is_utc_midnight(self) -> None:
        """Date-only values become UTC midnight in milliseconds."""
        assert parse_released_at("2014-11-07") == 1415318400000

    def test_datetime_with_timezone(self) -> None:
        """Timezone-aware values are converted to UTC."""
        assert parse_released_at("2014-11-07T01:00:00+01:00") == 1415318400000

    @pytest.mark.parametrize("value", [None, "", "not a date", "2014-13-45"])
    def test_unparseable_is_none(self, value: str | None) -> None:
        """Missing and invalid dates are stored as None."""
        assert parse_released_at(value) is None


class TestEnsureSetPersisted:
    async def test_creates_new_set(self, resolver: SetResolver, session: AsyncSession) -> None:
        """An unseen abbreviation is written."""
        created = await resolver.ensure_set_persisted(session, "THS", "Theros", "2013-09-27")

        assert created is True
        stored = await get_set(session, "THS")
        assert stored is not None
        assert stored.name == "Theros"
        assert stored.released_at == 1380240000000

    async def test_existing_set_not_rewritten(
        self, resolver: SetResolver, session: AsyncSession
    ) -> None:
        """A stored abbreviation is left untouched."""
        await resolver.ensure_set_persisted(session, "THS", "Theros", "2013-09-27")

        created = await resolver.ensure_set_persisted(session, "THS", "Theros (Promo)", None)

        assert created is False
        sets = await list_sets(session)
        assert len(sets) == 1
        assert sets[0].name == "Theros"

    async def test_missing_date_stored_as_null(
        self, resolver: SetResolver, session: AsyncSession
    ) -> None:
        """Sets without a release date are still written."""
        await resolver.ensure_set_persisted(session, "UNKNOWN", None, None)

        stored = await get_set(session, "UNKNOWN")
        assert stored is not None
        assert stored.released_at is None

    async def test_lookup_error_is_fatal(self, resolver: SetResolver) -> None:
        """A failed existence check raises LookupFailure."""
        with (
            patch(
                "cardindex.services.set_resolver.get_set",
                new_callable=AsyncMock,
                side_effect=SQLAlchemyError("connection reset"),
            ),
            pytest.raises(LookupFailure) as exc_info,
        ):
            await resolver.ensure_set_persisted(AsyncMock(), "THS", "Theros", None)

        assert exc_info.value.kind == ImportFailureKind.LOOKUP_FAILURE
        assert "connection reset" in exc_info.value.detail

    async def test_write_error_is_fatal(self, resolver: SetResolver) -> None:
        """A failed insert raises WriteFailure."""
        with (
            patch(
                "cardindex.services.set_resolver.get_set",
                new_callable=AsyncMock,
                return_value=None,
            ),
            patch(
                "cardindex.services.set_resolver.insert_set_if_absent",
                new_callable=AsyncMock,
                side_effect=SQLAlchemyError("disk full"),
            ),
            pytest.raises(WriteFailure),
        ):
            await resolver.ensure_set_persisted(AsyncMock(), "THS", "Theros", None)
