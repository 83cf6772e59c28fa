"""
database/base.py

Declarative base shared by every kycgate ORM model.

Constraint and index names follow NAMING_CONVENTION, so unnamed foreign keys,
checks and primary keys come out the same on SQLite and PostgreSQL.
"""

from sqlalchemy import MetaData, inspect
from sqlalchemy.orm import DeclarativeBase

NAMING_CONVENTION = {
    "ix": "ix_%(table_name)s_%(column_0_N_name)s",
    "uq": "uq_%(table_name)s_%(column_0_N_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}


class Base(DeclarativeBase):
    """Base class for all kycgate ORM models."""

    metadata = MetaData(naming_convention=NAMING_CONVENTION)

    def __repr__(self) -> str:
        identity = inspect(self).identity
        key = ", ".join(str(part) for part in identity) if identity else "transient"
        return f"<{type(self).__name__} {key}>"
