"""Custom SQLAlchemy column types."""

from mbc_tracker.infrastructure.persistence.sqlalchemy.types.guid import GUID
from mbc_tracker.infrastructure.persistence.sqlalchemy.types.json_encoded_dict import (
    JSONEncodedDict,
)
from mbc_tracker.infrastructure.persistence.sqlalchemy.types.utc_datetime import UTCDateTime

__all__ = ["GUID", "JSONEncodedDict", "UTCDateTime"]
