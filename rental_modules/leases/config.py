"""
Lease Lifecycle Configuration Schema.

Contract length, the rent-review cadence and the expiring-soon window.
``RenewalPolicy`` turns the cadence into an explicit rule: with 6-month
contracts and a 12-month review cycle, every 2nd renewal needs a new rent.
"""

from dataclasses import dataclass, field
from typing import Self

from rental_kernel.logging_config import get_logger

logger = get_logger("modules.leases.config")


@dataclass(frozen=True)
class RenewalPolicy:
    """
    Which lease generations coincide with a rent review.

    Contract:
        ``adjustment_cadence_months`` is a whole multiple of
        ``contract_length_months``.  Generation 1 never requires review;
        generation g > 1 does when g is a multiple of
        ``renewals_per_adjustment``.
    """

    contract_length_months: int = 6
    adjustment_cadence_months: int = 12

    def __post_init__(self):
        if self.contract_length_months <= 0:
            raise ValueError("contract_length_months must be positive")
        if self.adjustment_cadence_months <= 0:
            raise ValueError("adjustment_cadence_months must be positive")
        if self.adjustment_cadence_months % self.contract_length_months != 0:
            raise ValueError(
                "adjustment_cadence_months must be a multiple of "
                "contract_length_months"
            )

    @property
    def renewals_per_adjustment(self) -> int:
        return self.adjustment_cadence_months // self.contract_length_months

    def requires_adjustment(self, generation: int) -> bool:
        return generation > 1 and generation % self.renewals_per_adjustment == 0

    def allows_auto_renewal(self, generation: int) -> bool:
        """A lease whose generation is due for rent review is renewed manually."""
        return not self.requires_adjustment(generation)


DEFAULT_RENEWAL_POLICY = RenewalPolicy()


@dataclass
class LeaseConfig:
    """Configuration schema for the lease lifecycle module."""

    # Fixed contract length; end_date = start_date + this many months
    contract_length_months: int = 6

    # Rent review cycle
    adjustment_cadence_months: int = 12

    # Days before end_date at which an active lease becomes expiring_soon
    expiring_soon_days: int = 45

    max_painting_fee_installments: int = 4

    renewal_policy: RenewalPolicy = field(init=False)

    def __post_init__(self):
        if self.expiring_soon_days <= 0:
            raise ValueError("expiring_soon_days must be positive")
        if not 1 <= self.max_painting_fee_installments <= 4:
            raise ValueError("max_painting_fee_installments must be between 1 and 4")
        self.renewal_policy = RenewalPolicy(
            contract_length_months=self.contract_length_months,
            adjustment_cadence_months=self.adjustment_cadence_months,
        )

        logger.info(
            "lease_config_initialized",
            extra={
                "contract_length_months": self.contract_length_months,
                "adjustment_cadence_months": self.adjustment_cadence_months,
                "expiring_soon_days": self.expiring_soon_days,
            },
        )

    @classmethod
    def with_defaults(cls) -> Self:
        return cls()
