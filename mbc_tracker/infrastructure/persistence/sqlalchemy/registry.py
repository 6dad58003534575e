"""
SQLAlchemy Model Registry

This module provides the single MetaData instance shared by every model, so
``Base.metadata.create_all`` sees the whole schema.
"""

from sqlalchemy import MetaData

# Deterministic constraint names keep migrations and IntegrityError messages stable
NAMING_CONVENTION = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_N_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}

# Create a single metadata instance that all models will share
metadata = MetaData(naming_convention=NAMING_CONVENTION)
