"""Card catalog import into a deduplicated, search-indexed store."""
