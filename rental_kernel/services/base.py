"""
BaseStore -- abstract base for all persistence stores.

Responsibility:
    Provides the common constructor and session-handling contract for every
    store in ``rental_modules``.  Stores translate between ORM rows and
    frozen domain records and use ``session.flush()`` -- never
    ``session.commit()``.

Architecture position:
    Kernel > Services -- imperative shell infrastructure.

Invariants enforced:
    Transaction boundaries: stores flush within the caller's transaction and
    never commit or roll back.  The caller (a module service driving a
    ``UnitOfWork``, or a test) owns commit/rollback, which is what makes a
    renewal or a due-day change atomic across several stores.
"""

from abc import ABC
from typing import Generic, TypeVar
from uuid import UUID

from sqlalchemy.orm import Session

from rental_kernel.db.base import Base

ModelType = TypeVar("ModelType", bound=Base)


class BaseStore(ABC, Generic[ModelType]):
    """
    Abstract base class for stores.

    Contract:
        Accepts a SQLAlchemy ``Session`` from the caller and uses
        ``session.flush()`` to persist changes within the active transaction.

    Guarantees:
        - Never calls ``session.commit()`` or ``session.rollback()``.
        - Public methods return frozen DTOs, never ORM instances.

    Non-goals:
        - Does NOT validate business rules; services do.
    """

    model: type[ModelType]

    def __init__(self, session: Session):
        self.session = session

    def _get_row(self, row_id: UUID) -> ModelType | None:
        return self.session.get(self.model, row_id)
