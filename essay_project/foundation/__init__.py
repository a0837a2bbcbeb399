"""Low-level helpers with no knowledge of essays."""
