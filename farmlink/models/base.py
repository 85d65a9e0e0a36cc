"""
Shared SQLAlchemy DeclarativeBase for all call directory models.

All models must inherit from this Base so relationships declared with
string references resolve against a single registry.
"""

from datetime import UTC, datetime

from sqlalchemy import MetaData
from sqlalchemy.orm import DeclarativeBase

metadata = MetaData()


def utc_now_naive() -> datetime:
    """Current UTC time without tzinfo; timestamps are persisted as naive UTC."""
    return datetime.now(UTC).replace(tzinfo=None)


class Base(DeclarativeBase):
    """Shared declarative base for all FarmLink models."""

    metadata = metadata
