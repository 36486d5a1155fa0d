"""
Module: quote_kernel.db.base
Responsibility: Declarative base class for all SQLAlchemy ORM models and the
    column types shared between them.
Architecture position: Kernel > DB.  This is the lowest-level import target
    within the kernel.  ALL model files import from here.  This module MUST NOT
    import from models/, domain/, or outer layers.

Invariants enforced:
    - Timestamps are timezone-aware UTC on the way in AND on the way out,
      including on backends (SQLite) that drop tzinfo on storage.
"""

from datetime import datetime, timezone
from typing import ClassVar

from sqlalchemy import DateTime
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.types import TypeDecorator


class UTCDateTime(TypeDecorator):
    """
    Timezone-aware datetime that always round-trips as UTC.

    Guarantees:
        - process_bind_param: aware datetime -> UTC; naive datetime is
          assumed to already be UTC.
        - process_result_value: naive value from the driver -> UTC-aware.
        - cache_ok=True enables SQLAlchemy statement caching.
    """

    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)


class Base(DeclarativeBase):
    """
    Declarative base for all SQLAlchemy models.

    Quote ids and history ids are caller-supplied strings; each model
    declares its own primary key.
    """

    type_annotation_map: ClassVar[dict] = {
        datetime: UTCDateTime(),
    }
