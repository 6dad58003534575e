"""
Timezone-safe datetime column type.

SQLite has no timezone-aware datetime storage, so values are normalised to
naive UTC on the way in and re-tagged as UTC on the way out. Comparisons in
SQL therefore always operate on UTC wall-clock values.
"""

from datetime import UTC, datetime

from sqlalchemy import types


class UTCDateTime(types.TypeDecorator):
    """DateTime that accepts aware datetimes and always returns aware UTC."""

    impl = types.DateTime
    cache_ok = True

    def process_bind_param(self, value: datetime | None, dialect):
        if value is None:
            return None
        if not isinstance(value, datetime):
            raise ValueError(f"Expected datetime, got {type(value).__name__}")
        if value.tzinfo is not None:
            value = value.astimezone(UTC).replace(tzinfo=None)
        return value

    def process_result_value(self, value: datetime | None, dialect):
        if value is None:
            return None
        if value.tzinfo is None:
            return value.replace(tzinfo=UTC)
        return value.astimezone(UTC)
