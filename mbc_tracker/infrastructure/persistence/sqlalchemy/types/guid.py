"""
UUID column type shared by every table.

PostgreSQL stores identifiers natively; SQLite stores the canonical
36-character string form.
"""

import uuid

from sqlalchemy import types
from sqlalchemy.dialects.postgresql import UUID as PostgresUUID


def _coerce(value) -> uuid.UUID:
    if isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value))
    except (TypeError, ValueError) as e:
        raise ValueError(f"Invalid UUID: {value}") from e


class GUID(types.TypeDecorator):
    """UUID in, UUID out, whatever the backend."""

    impl = types.CHAR
    cache_ok = True

    def load_dialect_impl(self, dialect):
        if dialect.name == "postgresql":
            return dialect.type_descriptor(PostgresUUID())
        return dialect.type_descriptor(types.CHAR(36))

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        return str(_coerce(value))

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        return _coerce(value)
