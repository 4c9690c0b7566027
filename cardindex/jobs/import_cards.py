"""
Import the card catalog into the card store.

Every run wipes the store and rebuilds it from the catalog. Records are
imported concurrently, one workflow per record, with a cap on how many are
in flight. The first fatal store error stops new workflows from starting;
those already running finish, then the run aborts. Completed writes are
kept.

Usage:
    python -m cardindex.jobs.import_cards [--card-file PATH]
"""

import argparse
import asyncio
import copy
import logging
import sys
from collections.abc import Sequence
from pathlib import Path

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from cardindex.config import settings
from cardindex.db.database import engine as default_engine
from cardindex.db.database import async_session_factory, reset_store
from cardindex.models.card import RawCardRecord
from cardindex.models.failure import CardImportError, ImportAbortedError
from cardindex.models.import_result import ImportSummary
from cardindex.services.card_importer import CardImporter, CardImportTask
from cardindex.services.catalog import load_catalog
from cardindex.services.import_tables import (
    ImportTables,
    get_import_tables,
    load_import_tables,
)

logger = logging.getLogger(__name__)


class CardImportPipeline:
    """
    Bulk upsert of a catalog into the card store.

    Args:
        engine: Engine of the card store. Defaults to the configured database.
        tables: Keyword tables. Defaults to the bundled tables.
        concurrency: Max number of record workflows in flight
        progress_interval: Log progress every this many imported cards
    """

    def __init__(
        self,
        engine: AsyncEngine | None = None,
        tables: ImportTables | None = None,
        concurrency: int = settings.import_concurrency,
        progress_interval: int = settings.progress_interval,
    ) -> None:
        if concurrency < 1:
            raise ValueError(f"concurrency must be at least 1, got {concurrency}")

        self._engine = engine or default_engine
        self._session_factory = (
            async_sessionmaker(self._engine, class_=AsyncSession, expire_on_commit=False)
            if engine is not None
            else async_session_factory
        )
        self._tables = tables or get_import_tables()
        self._concurrency = concurrency
        self._progress_interval = progress_interval

    async def run(self, records: Sequence[RawCardRecord]) -> ImportSummary:
        """
        Replace the store contents with the given catalog records.

        Returns:
            Counters for the run.

        Raises:
            ImportAbortedError: If any record fails with a store error
        """
        await reset_store(self._engine)
        logger.info("Finished clearing out collections and ensuring indexes")

        tasks = [
            CardImportTask(index=index, record=copy.deepcopy(record))
            for index, record in enumerate(records)
        ]
        logger.info("Finished staging card imports, total cards found: %d", len(tasks))

        importer = CardImporter(self._session_factory, self._tables)
        semaphore = asyncio.Semaphore(self._concurrency)
        stop = asyncio.Event()
        errors: list[CardImportError] = []
        completed = 0

        async def run_task(task: CardImportTask) -> None:
            nonlocal completed
            async with semaphore:
                # Nothing new starts after a fatal error; in-flight workflows finish
                if stop.is_set():
                    return
                try:
                    await importer.import_record(task)
                except CardImportError as e:
                    e.record_index = task.index
                    errors.append(e)
                    stop.set()
                    return
                except Exception:
                    stop.set()
                    raise

            completed += 1
            if completed % self._progress_interval == 0:
                logger.info("Imported %d cards", completed)

        results = await asyncio.gather(
            *(run_task(task) for task in tasks), return_exceptions=True
        )

        if errors:
            error = errors[0]
            failure = error.to_detail()
            logger.error("Card import aborted: %s", failure.model_dump_json())
            raise ImportAbortedError(failure, completed) from error

        for result in results:
            if isinstance(result, BaseException):
                raise result

        summary = importer.summary
        summary.total_records = len(tasks)
        logger.info("Finished importing cards! %s", summary)
        return summary


async def run_import(card_file: Path | None = None) -> ImportSummary:
    """Load the configured catalog and import it into the card store."""
    path = card_file or Path(settings.card_file)
    records = load_catalog(path)
    logger.info("Finished reading card catalog %s", path)

    tables = (
        load_import_tables(Path(settings.import_tables_file))
        if settings.import_tables_file
        else get_import_tables()
    )

    pipeline = CardImportPipeline(tables=tables)
    try:
        return await pipeline.run(records)
    finally:
        await default_engine.dispose()


def main(argv: list[str] | None = None) -> None:
    """CLI entry point. Exits with status 1 if the import fails."""
    parser = argparse.ArgumentParser(description="Import the card catalog into the card store")
    parser.add_argument(
        "--card-file",
        type=Path,
        default=None,
        help=f"Catalog JSON file (default: {settings.card_file})",
    )
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    try:
        asyncio.run(run_import(args.card_file))
    except (ImportAbortedError, FileNotFoundError, ValueError) as e:
        logger.error("Card import failed: %s", e)
        sys.exit(1)


if __name__ == "__main__":
    main()
