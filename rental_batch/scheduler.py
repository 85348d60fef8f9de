"""
SweepScheduler -- In-process interval scheduler for lifecycle sweeps.

Contract:
    Every ``interval_hours`` runs each registered sweep in order, each with
    its own session, and records a ``SweepOutcome`` per task.

Architecture: rental_batch.  Uses rental_batch.tasks for the sweeps and an
    injected session factory for persistence.

Invariants enforced:
    - All timestamps from the injected Clock.
    - A failing task is rolled back and logged; later tasks still run.
    - Graceful shutdown (respects stop signal between tasks).
"""

from __future__ import annotations

import threading
from typing import Callable, Sequence

from sqlalchemy.orm import Session

from rental_kernel.domain.clock import Clock, SystemClock
from rental_kernel.exceptions import RentalKernelError
from rental_kernel.logging_config import LogContext, get_logger

from rental_batch.tasks.base import SweepOutcome, SweepTask

logger = get_logger("batch.scheduler")

DEFAULT_INTERVAL_HOURS = 24


class SweepScheduler:
    """In-process scheduler for the lease and payment sweeps.

    Contract:
        - ``tick()`` runs every task once and returns their outcomes.
        - ``start()`` / ``stop()`` for background thread operation.
        - ``run_on_start`` fires one tick as soon as the thread starts.

    Non-goals:
        - NOT a distributed scheduler (no leader election).
        - Does NOT persist run history; outcomes are logged.
    """

    def __init__(
        self,
        session_factory: Callable[[], Session],
        tasks: Sequence[SweepTask],
        clock: Clock | None = None,
        interval_hours: int = DEFAULT_INTERVAL_HOURS,
        run_on_start: bool = True,
    ):
        if interval_hours < 1:
            logger.warning(
                "scheduler_interval_invalid",
                extra={
                    "interval_hours": interval_hours,
                    "fallback_hours": DEFAULT_INTERVAL_HOURS,
                },
            )
            interval_hours = DEFAULT_INTERVAL_HOURS
        self._session_factory = session_factory
        self._tasks = tuple(tasks)
        self._clock = clock or SystemClock()
        self._interval_hours = interval_hours
        self._run_on_start = run_on_start
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None

    # -------------------------------------------------------------------------
    # Public API
    # -------------------------------------------------------------------------

    @property
    def interval_hours(self) -> int:
        return self._interval_hours

    @property
    def interval_seconds(self) -> float:
        return self._interval_hours * 3600.0

    def tick(self) -> tuple[SweepOutcome, ...]:
        """Run every task once (public for testing)."""
        started_at = self._clock.now()
        outcomes = []
        for task in self._tasks:
            if self._stop_event.is_set():
                break
            outcomes.append(self._run_task(task))

        logger.info(
            "scheduler_tick_completed",
            extra={
                "started_at": started_at,
                "task_count": len(outcomes),
                "failed_count": sum(1 for o in outcomes if not o.succeeded),
            },
        )
        return tuple(outcomes)

    def start(self) -> None:
        """Start the scheduler in a background thread."""
        if self._thread is not None and self._thread.is_alive():
            return

        self._stop_event.clear()
        self._thread = threading.Thread(
            target=self._run_loop,
            name="sweep-scheduler",
            daemon=True,
        )
        self._thread.start()
        logger.info(
            "scheduler_started",
            extra={
                "interval_hours": self._interval_hours,
                "run_on_start": self._run_on_start,
            },
        )

    def stop(self, timeout: float = 30.0) -> None:
        """Signal stop and wait for the current task to finish.

        Args:
            timeout: Max seconds to wait for the thread to finish.
        """
        self._stop_event.set()
        if self._thread is not None and self._thread.is_alive():
            self._thread.join(timeout=timeout)
        logger.info("scheduler_stopped")

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    # -------------------------------------------------------------------------
    # Internal
    # -------------------------------------------------------------------------

    def _run_task(self, task: SweepTask) -> SweepOutcome:
        session = self._session_factory()
        with LogContext.bind(job_name=task.task_name):
            try:
                affected = task.run(session, self._clock)
                logger.info(
                    "sweep_task_completed",
                    extra={"task_name": task.task_name, "affected": affected},
                )
                return SweepOutcome(task_name=task.task_name, affected=affected)
            except RentalKernelError as exc:
                session.rollback()
                logger.error(
                    "sweep_task_failed",
                    extra={"task_name": task.task_name, "error_code": exc.code},
                )
                return SweepOutcome(task_name=task.task_name, error=exc.code)
            except Exception as exc:
                session.rollback()
                logger.exception(
                    "sweep_task_failed", extra={"task_name": task.task_name}
                )
                return SweepOutcome(task_name=task.task_name, error=type(exc).__name__)
            finally:
                session.close()

    def _run_loop(self) -> None:
        """Background loop. Exits when stop_event is set."""
        if not self._run_on_start:
            self._stop_event.wait(timeout=self.interval_seconds)
        while not self._stop_event.is_set():
            try:
                self.tick()
            except Exception:
                logger.exception("scheduler_tick_exception")
            self._stop_event.wait(timeout=self.interval_seconds)
