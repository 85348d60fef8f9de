"""
Config -> module bridges.

Convert an ``EngineConfiguration`` into the inputs services and the engine
factory take.  These live in rental_config (the producer) because
rental_kernel and rental_modules never import rental_config.

Usage:
    from rental_config import get_active_config
    from rental_config.bridges import build_lease_config, engine_kwargs

    config = get_active_config()
    init_engine_from_url(**engine_kwargs(config))
    service = LeaseLifecycleService(session, clock, build_lease_config(config))
"""

from __future__ import annotations

from typing import Any

from rental_config.schema import EngineConfiguration
from rental_modules.leases.config import LeaseConfig
from rental_modules.payments.config import PaymentConfig


def build_lease_config(config: EngineConfiguration) -> LeaseConfig:
    lease = config.lease
    return LeaseConfig(
        contract_length_months=lease.contract_length_months,
        adjustment_cadence_months=lease.adjustment_cadence_months,
        expiring_soon_days=lease.expiring_soon_days,
        max_painting_fee_installments=lease.max_painting_fee_installments,
    )


def build_payment_config(config: EngineConfiguration) -> PaymentConfig:
    return PaymentConfig(
        proration_day_basis=config.payment.proration_day_basis,
        upcoming_default_days=config.payment.upcoming_default_days,
        rent_payments_per_contract=config.payment.rent_payments_per_contract,
        max_painting_fee_installments=config.lease.max_painting_fee_installments,
    )


def engine_kwargs(config: EngineConfiguration) -> dict[str, Any]:
    """Keyword arguments for ``rental_kernel.db.init_engine_from_url``."""
    db = config.database
    return {
        "database_url": db.url,
        "echo": db.echo,
        "pool_size": db.pool_size,
        "max_overflow": db.max_overflow,
        "pool_timeout": db.pool_timeout,
        "pool_recycle": db.pool_recycle,
    }
