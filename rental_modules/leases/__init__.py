"""
Lease lifecycle.

Contracts over one unit for one tenant, their renewal chain and the rent
adjustments applied at renewal.  The lifecycle service lives in
``rental_modules.leases.service``.
"""

from rental_modules.leases.config import DEFAULT_RENEWAL_POLICY, LeaseConfig, RenewalPolicy
from rental_modules.leases.models import (
    LIVE_STATUSES,
    Lease,
    LeaseCreationResult,
    LeaseRenewalResult,
    LeaseRentAdjustment,
    LeaseStats,
    LeaseStatus,
)

__all__ = [
    "DEFAULT_RENEWAL_POLICY",
    "LIVE_STATUSES",
    "Lease",
    "LeaseConfig",
    "LeaseCreationResult",
    "LeaseRenewalResult",
    "LeaseRentAdjustment",
    "LeaseStats",
    "LeaseStatus",
    "RenewalPolicy",
]
