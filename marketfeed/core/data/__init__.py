"""Data access layer: cache and upstream sources."""
