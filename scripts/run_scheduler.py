#!/usr/bin/env python3
"""
Run the lease and payment sweeps: overdue payments, expiring-soon leases,
auto-renewal and expiry of leases past their end date.

Configuration comes from get_active_config() (RENTAL_CONFIG_PATH, or the
bundled default set); DATABASE_URL overrides the configured database.

Usage:
    python3 scripts/run_scheduler.py --once
    python3 scripts/run_scheduler.py --loop [--config path/to/config.yaml]

Examples:
    # One tick, then exit (cron-friendly)
    python3 scripts/run_scheduler.py --once

    # Run in the foreground on the configured interval until Ctrl-C
    python3 scripts/run_scheduler.py --loop --log-level DEBUG
"""

from __future__ import annotations

import argparse
import sys
import time
from pathlib import Path

# Project root on sys.path
ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(ROOT))


def _parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Run the rental lifecycle sweeps once or on an interval.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    mode = parser.add_mutually_exclusive_group(required=True)
    mode.add_argument("--once", action="store_true", help="Run one tick and exit.")
    mode.add_argument(
        "--loop", action="store_true", help="Run ticks on the configured interval."
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Configuration YAML (default: RENTAL_CONFIG_PATH or bundled default).",
    )
    parser.add_argument(
        "--create-tables",
        action="store_true",
        help="Create missing tables before the first tick.",
    )
    parser.add_argument("--log-level", default="INFO", help="Log level (default: INFO).")
    return parser.parse_args()


def main() -> int:
    args = _parse_args()

    from rental_batch.scheduler import SweepScheduler
    from rental_batch.tasks import default_tasks
    from rental_config import get_active_config
    from rental_config.bridges import build_lease_config, build_payment_config, engine_kwargs
    from rental_kernel.db import create_tables, get_session_factory, init_engine_from_url
    from rental_kernel.domain.clock import SystemClock
    from rental_kernel.logging_config import configure_logging

    configure_logging(level=args.log_level)
    config = get_active_config(args.config)
    init_engine_from_url(**engine_kwargs(config))
    if args.create_tables:
        create_tables()

    scheduler = SweepScheduler(
        session_factory=get_session_factory(),
        tasks=default_tasks(build_lease_config(config), build_payment_config(config)),
        clock=SystemClock(),
        interval_hours=config.scheduler.interval_hours,
        run_on_start=config.scheduler.run_on_start,
    )

    if args.once:
        outcomes = scheduler.tick()
        for outcome in outcomes:
            status = "ok" if outcome.succeeded else f"FAILED ({outcome.error})"
            print(f"{outcome.task_name:<30} {outcome.affected:>6}  {status}")
        return 0 if all(o.succeeded for o in outcomes) else 1

    scheduler.start()
    try:
        while scheduler.is_running:
            time.sleep(1)
    except KeyboardInterrupt:
        print("\nStopping scheduler...")
    finally:
        scheduler.stop()
    return 0


if __name__ == "__main__":
    sys.exit(main())
