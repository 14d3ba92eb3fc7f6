"""
Base configurations and mixins for database models.

Provides the declarative base shared by every model, a ``to_dict`` helper for
serialisation, and the timestamp and integer primary key mixins.
"""

from datetime import datetime

from sqlalchemy import Column, DateTime, Integer, inspect
from sqlalchemy.orm import declarative_base
from sqlalchemy.sql.functions import now as db_now

from app.config import settings


class CustomBase:
    """
    Custom base class for SQLAlchemy models with enhanced serialization.

    ``to_dict`` converts column values into JSON-friendly primitives, with
    datetimes rendered in ISO format.
    """

    def to_dict(self) -> dict:
        d = {}
        if not self:
            return d
        for column in inspect(self).mapper.column_attrs:
            value = getattr(self, column.key)
            if isinstance(value, datetime):
                d[column.key] = value.isoformat()
            else:
                d[column.key] = value
        return d


Base = declarative_base(cls=CustomBase)


class TimestampMixin:
    """
    Adds ``created_at`` and ``updated_at`` columns managed by the database.
    """

    created_at = Column(
        DateTime(timezone=True),
        server_default=db_now(),
        nullable=False,
        comment="Timestamp when the record was created",
    )
    updated_at = Column(
        DateTime(timezone=True),
        server_default=db_now(),
        onupdate=db_now(),
        nullable=False,
        comment="Timestamp when the record was last updated",
    )


class IntegerIDMixin:
    """Adds an auto-incrementing integer primary key."""

    id = Column(
        Integer,
        primary_key=True,
        autoincrement=True,
        comment="Numeric primary key",
    )


SCHEMA_NAME = settings.schema_name

__all__ = ["Base", "TimestampMixin", "IntegerIDMixin", "SCHEMA_NAME"]
