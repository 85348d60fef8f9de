"""
UnitOfWork -- explicit transaction boundary for multi-entity operations.

Responsibility:
    Runs a callable against a session as one atomic commit.  Renewal,
    due-day change, mark-paid-with-fee-rollup and cancel-with-payments each
    touch several rows; either all of them land or none do.

Architecture position:
    Kernel > Services.  Used by module services; stores never see it.

Failure modes:
    - RentalKernelError raised inside the work: rolled back, re-raised as-is.
    - SQLAlchemyError: rolled back, re-raised as StoreError(operation).
    - Any other exception: rolled back, re-raised as-is.
"""

from typing import Callable, TypeVar

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from rental_kernel.exceptions import RentalKernelError, StoreError
from rental_kernel.logging_config import get_logger

logger = get_logger("services.unit_of_work")

T = TypeVar("T")


class UnitOfWork:
    """
    Commit-or-rollback wrapper around a caller-owned session.

    Contract:
        ``run(work, operation=...)`` calls ``work(session)``, flushes and
        commits.  On any failure the session is rolled back before the
        exception leaves ``run``.

    Non-goals:
        - Does NOT open or close sessions.
        - Does NOT retry.
    """

    def __init__(self, session: Session):
        self.session = session

    def run(self, work: Callable[[Session], T], *, operation: str) -> T:
        try:
            result = work(self.session)
            self.session.commit()
        except RentalKernelError:
            self.session.rollback()
            raise
        except SQLAlchemyError as exc:
            self.session.rollback()
            logger.error(
                "unit_of_work_failed",
                extra={"operation": operation, "error": type(exc).__name__},
            )
            raise StoreError(operation, exc) from exc
        except Exception:
            self.session.rollback()
            raise

        logger.debug("unit_of_work_committed", extra={"operation": operation})
        return result
