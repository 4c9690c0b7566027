"""
Download the card catalog.

Run this job before an import to fetch the catalog from the configured URL.
"""

import asyncio
import logging
from pathlib import Path

from cardindex.config import settings
from cardindex.services.catalog import download_catalog

logger = logging.getLogger(__name__)


async def run_download() -> Path:
    """Download the card catalog to the configured card file."""
    logger.info("Downloading card catalog from %s...", settings.catalog_url)

    try:
        path = await download_catalog(settings.catalog_url, Path(settings.card_file))
        logger.info("Downloaded card catalog to %s", path)
        return path
    except Exception as e:
        logger.error("Failed to download card catalog: %s", e)
        raise


def main() -> None:
    """CLI entry point."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    asyncio.run(run_download())


if __name__ == "__main__":
    main()
