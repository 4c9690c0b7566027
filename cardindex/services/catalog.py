"""
Card catalog service.

Loads the catalog of raw card records from disk, and downloads it from a
remote location.
"""

import json
from pathlib import Path

import httpx

from cardindex.models.card import RawCardRecord


async def download_catalog(url: str, output_path: Path) -> Path:
    """
    Download a card catalog file.

    Args:
        url: Location of the catalog JSON
        output_path: Where to save the file

    Returns:
        Path to downloaded file.

    Raises:
        ValueError: If no URL is given
        httpx.HTTPError: If download fails
    """
    if not url:
        raise ValueError("No catalog URL configured")

    output_path.parent.mkdir(parents=True, exist_ok=True)

    async with httpx.AsyncClient(timeout=30.0, follow_redirects=True) as client:
        # Stream download (full catalogs run to tens of MB)
        async with client.stream("GET", url, timeout=300.0) as response:
            response.raise_for_status()
            with open(output_path, "wb") as f:
                async for chunk in response.aiter_bytes(8192):
                    f.write(chunk)

    return output_path


def load_catalog(path: Path) -> list[RawCardRecord]:
    """
    Load raw card records from a catalog file.

    Accepts either a JSON list of records or an object holding the list
    under "cards". Record order is preserved.

    Raises:
        FileNotFoundError: If the catalog file doesn't exist
        ValueError: If the file is not a catalog
    """
    if not path.exists():
        raise FileNotFoundError(
            f"Card catalog not found at {path}. "
            "Run `python -m cardindex.jobs.download_catalog` first."
        )

    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise ValueError(f"Card catalog at {path} is corrupted: {e}") from e

    if isinstance(data, dict):
        data = data.get("cards")

    if not isinstance(data, list):
        raise ValueError(f"Card catalog at {path} must be a list of card records")

    records = [record for record in data if isinstance(record, dict)]
    if len(records) != len(data):
        raise ValueError(f"Card catalog at {path} contains entries that are not card records")
    return records
