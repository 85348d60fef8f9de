"""
SweepTask protocol and supporting types.

Contract:
    ``SweepTask`` defines the interface every scheduled sweep implements.
    ``SweepOutcome`` is the frozen record the scheduler logs per run.

Architecture:
    rental_batch/tasks.  Only stdlib and SQLAlchemy session types here;
    task modules import their rental_modules services.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, runtime_checkable

from sqlalchemy.orm import Session

from rental_kernel.domain.clock import Clock


@dataclass(frozen=True)
class SweepOutcome:
    """Result of one task run.

    ``affected`` counts records moved; ``error`` holds the error code when
    the run failed and was rolled back.
    """

    task_name: str
    affected: int = 0
    error: str | None = None

    @property
    def succeeded(self) -> bool:
        return self.error is None


@runtime_checkable
class SweepTask(Protocol):
    """Protocol for scheduled sweeps.

    Contract:
        - ``task_name``: unique key, used in logs.
        - ``run()``: performs the sweep and returns the affected count.
          The service it drives owns the commit.

    Non-goals:
        - Does NOT catch errors -- the scheduler isolates failures.
    """

    @property
    def task_name(self) -> str: ...

    def run(self, session: Session, clock: Clock) -> int: ...
