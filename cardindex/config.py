from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    model_config = SettingsConfigDict(env_file=".env", env_prefix="CARDINDEX_")

    debug: bool = False

    database_url: str = "postgresql+asyncpg://localhost:5432/cardindex"

    # Catalog location for the import job, and where the download job fetches it from
    card_file: str = "data/cards.json"
    catalog_url: str = ""

    # Override for the bundled keyword tables (set names, abilities, set replacements)
    import_tables_file: str | None = None

    import_concurrency: int = 100
    progress_interval: int = 100


settings = Settings()


# =============================================================================
# IMPORT CONSTANTS
# =============================================================================

# Set id assigned when a record's set name is missing from the set-name table
UNKNOWN_SET_ID = "UNKNOWN"

# Release dates for sets the catalog ships without one
RELEASE_DATE_EXCEPTIONS = {
    "C14": "2014-11-07",
    "V14": "2014-08-22",
}
