"""
Module: rental_kernel.db.base
Responsibility: Declarative base classes for all SQLAlchemy ORM models.  Provides
    the UUID primary key convention, the type annotation map for consistent
    column types, and the TrackedBase mixin for audit timestamps.
Architecture position: Kernel > DB.  Lowest-level import target within the
    kernel.  ALL model files import from here.  MUST NOT import from services/,
    selectors/, domain/, or rental_modules.

Invariants enforced:
    - UUID primary keys: every model inherits a uuid4-generated primary key.
    - Money precision: type_annotation_map maps Python Decimal to
      Numeric(12, 2).  Rent and fee values are whole cents; NEVER use float.
    - Audit timestamps: TrackedBase provides created_at, updated_at,
      created_by_id and updated_by_id.

Failure modes:
    - IntegrityError on duplicate primary key (uuid4, practically impossible).
"""

from datetime import date, datetime
from decimal import Decimal
from typing import ClassVar
from uuid import UUID as PyUUID, uuid4

from sqlalchemy import Date, DateTime, Integer, Numeric, String, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy.types import TypeDecorator

MONEY = Numeric(12, 2)


class UUIDString(TypeDecorator):
    """
    UUID type stored as String(36) for cross-database portability.

    Contract:
        Transparently converts between Python UUID objects and their
        36-character string representation, so the same schema runs on
        PostgreSQL and SQLite.
    """

    impl = String(36)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is not None:
            return str(value)
        return None

    def process_result_value(self, value, dialect):
        if value is not None:
            return PyUUID(value)
        return None


class Base(DeclarativeBase):
    """
    Declarative base for all SQLAlchemy models.

    Guarantees:
        - id is always a uuid4-generated UUID stored as String(36).
        - Decimal maps to Numeric(12, 2).
        - date maps to Date, datetime to DateTime(timezone=True).
    """

    type_annotation_map: ClassVar[dict] = {
        Decimal: MONEY,
        date: Date,
        datetime: DateTime(timezone=True),
        PyUUID: UUIDString(),
        int: Integer,
    }

    id: Mapped[PyUUID] = mapped_column(
        UUIDString(),
        primary_key=True,
        default=uuid4,
    )


class TrackedBase(Base):
    """
    Abstract base with audit timestamp and actor tracking.

    Contract:
        created_at/updated_at are maintained by the database.  Actor columns
        are nullable because scheduled sweeps act without a human actor.
    """

    __abstract__ = True

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )

    created_by_id: Mapped[PyUUID | None] = mapped_column(
        UUIDString(),
        nullable=True,
    )

    updated_by_id: Mapped[PyUUID | None] = mapped_column(
        UUIDString(),
        nullable=True,
    )


UUID = PyUUID
