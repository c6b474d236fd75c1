"""
SQLAlchemy declarative base for the storage tables.
"""
from datetime import datetime, timezone
from sqlalchemy import DateTime
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    """Base class for every table in `init_db`."""
    pass


class TimestampMixin:
    """
    Adds created_at / updated_at columns.
    
    Timestamps are set on the Python side in UTC; SQLite's CURRENT_TIMESTAMP
    carries no zone.
    """
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=_utc_now,
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=_utc_now,
        onupdate=_utc_now,
        nullable=False,
    )
