"""Timestamp helpers; the store persists every timestamp as aware UTC."""

from datetime import datetime, timezone


def utc_now() -> datetime:
    """Current time in UTC, timezone-aware (column default for created/updated)."""
    return datetime.now(timezone.utc)
