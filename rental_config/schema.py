"""
EngineConfiguration schema.

Typed, frozen view of a configuration set.  YAML files are parsed into
these types by the loader; ``rental_config.bridges`` turns them into the
module-level config dataclasses the services take.
"""

from __future__ import annotations

from dataclasses import dataclass

# ---------------------------------------------------------------------------
# Sections
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class LeasePolicyDef:
    """Contract length, rent-review cadence and expiry window."""

    contract_length_months: int = 6
    adjustment_cadence_months: int = 12
    expiring_soon_days: int = 45
    max_painting_fee_installments: int = 4


@dataclass(frozen=True)
class PaymentPolicyDef:
    """Proration basis and listing defaults for the payment ledger."""

    proration_day_basis: int = 30
    upcoming_default_days: int = 7
    rent_payments_per_contract: int = 6


@dataclass(frozen=True)
class SchedulerDef:
    interval_hours: int = 24
    run_on_start: bool = True


@dataclass(frozen=True)
class DatabaseDef:
    url: str = "sqlite:///rental.db"
    echo: bool = False
    pool_size: int = 10
    max_overflow: int = 5
    pool_timeout: int = 30
    pool_recycle: int = 1800


# ---------------------------------------------------------------------------
# Root
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class EngineConfiguration:
    """A loaded, validated configuration set."""

    config_id: str
    version: int
    lease: LeasePolicyDef
    payment: PaymentPolicyDef
    scheduler: SchedulerDef
    database: DatabaseDef
    checksum: str = ""
