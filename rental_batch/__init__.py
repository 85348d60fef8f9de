"""
rental_batch -- Periodic sweeps over the lease and payment lifecycle.

An in-process scheduler runs a fixed list of idempotent sweeps on an
interval: overdue payments, expiring-soon leases, auto-renewal and expiry
of leases past their end date.

Architecture:
    rental_batch/ is a top-level package.  Nothing in rental_kernel/ or
    rental_modules/ imports from rental_batch.

Invariants:
    - Clock injection; no task reads the wall clock directly.
    - Each task runs in its own session; one failing task never stops the
      others in the same tick.
    - Sweeps only move records forward along their state machines.
    - Graceful shutdown: the loop honours a stop event.
"""
