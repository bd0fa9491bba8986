"""
Datetime utilities.

Provides timezone-aware datetime functions.
"""

from datetime import UTC, datetime


# Format used by the legacy flattened transaction view
LEGACY_CREATED_AT_FORMAT = "%Y-%m-%dT%H:%M:%S.%f"


def ensure_utc(value: datetime) -> datetime:
    """Attach UTC to naive datetimes read from the store."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def format_legacy(value: datetime) -> str:
    """Render a timestamp the way the legacy transaction view does."""
    return ensure_utc(value).strftime(LEGACY_CREATED_AT_FORMAT)
