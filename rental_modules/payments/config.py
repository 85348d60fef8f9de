"""
Payment Ledger Configuration Schema.

Proration basis for due-day changes and the default look-ahead for
upcoming-payment listings.
"""

from dataclasses import dataclass
from typing import Self

from rental_kernel.logging_config import get_logger

logger = get_logger("modules.payments.config")


@dataclass
class PaymentConfig:
    """Configuration schema for the payment ledger module."""

    # Flat month length used to prorate rent on a due-day change
    proration_day_basis: int = 30

    # Look-ahead for get_upcoming_payments when the caller gives none
    upcoming_default_days: int = 7

    # Rent payments generated per contract
    rent_payments_per_contract: int = 6

    max_painting_fee_installments: int = 4

    def __post_init__(self):
        if self.proration_day_basis <= 0:
            raise ValueError("proration_day_basis must be positive")
        if self.upcoming_default_days <= 0:
            raise ValueError("upcoming_default_days must be positive")
        if self.rent_payments_per_contract <= 0:
            raise ValueError("rent_payments_per_contract must be positive")
        if not 1 <= self.max_painting_fee_installments <= 4:
            raise ValueError("max_painting_fee_installments must be between 1 and 4")

        logger.info(
            "payment_config_initialized",
            extra={
                "proration_day_basis": self.proration_day_basis,
                "upcoming_default_days": self.upcoming_default_days,
                "rent_payments_per_contract": self.rent_payments_per_contract,
            },
        )

    @classmethod
    def with_defaults(cls) -> Self:
        return cls()
