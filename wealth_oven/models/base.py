"""
Declarative base and shared column helpers
"""
import uuid
from datetime import datetime, timezone

from sqlalchemy import Enum as SQLEnum
from sqlalchemy.orm import declarative_base

Base = declarative_base()


def utcnow() -> datetime:
    """Naive UTC timestamp (what the columns store)"""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_naive_utc(value: datetime) -> datetime:
    """Normalize an incoming datetime to naive UTC"""
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def generate_id() -> str:
    return str(uuid.uuid4())


def enum_column_type(enum_cls):
    """Persist enum *values* (lowercase strings) rather than member names"""
    return SQLEnum(
        enum_cls,
        values_callable=lambda members: [m.value for m in members],
        native_enum=False,
        length=32,
    )


def isoformat(value):
    return value.isoformat() if value else None
