"""
Static keyword tables used by the card import.

The tables are loaded once from a JSON resource into an immutable model and
passed explicitly to the set resolver and card normalizer.
"""

from collections.abc import Mapping
from functools import lru_cache
from pathlib import Path
from types import MappingProxyType

from pydantic import BaseModel, ConfigDict, Field, field_validator

RESOURCES_DIR = Path(__file__).parent.parent / "resources"
DEFAULT_TABLES_PATH = RESOURCES_DIR / "import_tables.json"


class ImportTables(BaseModel):
    """Immutable keyword tables for set resolution and tag derivation."""

    model_config = ConfigDict(frozen=True)

    set_names: Mapping[str, str] = Field(
        default_factory=dict,
        validate_default=True,
        description="Full set name -> set abbreviation",
    )
    abilities: tuple[str, ...] = Field(
        default=(),
        description="Ability keywords searched for in rules text",
    )
    set_replacements: Mapping[str, str] = Field(
        default_factory=dict,
        validate_default=True,
        description="Catalog set abbreviation -> canonical abbreviation",
    )

    @field_validator("set_names", "set_replacements", mode="after")
    @classmethod
    def read_only(cls, value: Mapping[str, str]) -> Mapping[str, str]:
        # Shared by every concurrent workflow of a run
        return MappingProxyType(dict(value))


def load_import_tables(path: Path | None = None) -> ImportTables:
    """
    Load import tables from a JSON file.

    Args:
        path: Path to the tables file. Defaults to the bundled resource.

    Raises:
        FileNotFoundError: If the file doesn't exist
        pydantic.ValidationError: If the file doesn't match the expected shape
    """
    if path is None:
        path = DEFAULT_TABLES_PATH

    if not path.exists():
        raise FileNotFoundError(f"Import tables not found at {path}")

    return ImportTables.model_validate_json(path.read_text(encoding="utf-8"))


@lru_cache(maxsize=1)
def get_import_tables() -> ImportTables:
    """
    Get the bundled import tables.

    Cached after first load.
    """
    return load_import_tables()
