"""
JSON column type for answers, question definitions, severity bands and
audit metadata.
"""

from sqlalchemy import types


class JSONEncodedDict(types.TypeDecorator):
    """
    Dictionary or list stored as JSON.

    ``None`` is written as SQL NULL rather than the JSON literal ``null``.
    """

    impl = types.JSON(none_as_null=True)
    cache_ok = True

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        return value
