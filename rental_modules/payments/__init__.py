"""
Payment ledger.

Payment obligations per lease: schedule generation, settlement, the overdue
sweep and mid-contract due-day changes.
"""

from rental_modules.payments.config import PaymentConfig
from rental_modules.payments.models import (
    ChangePaymentDueDayResponse,
    GenerationError,
    GenerationReport,
    OverdueSweepResult,
    Payment,
    PaymentMethod,
    PaymentStats,
    PaymentStatus,
    PaymentType,
    ProportionalPaymentInfo,
    UpdatedPaymentInfo,
)

__all__ = [
    "ChangePaymentDueDayResponse",
    "GenerationError",
    "GenerationReport",
    "OverdueSweepResult",
    "Payment",
    "PaymentConfig",
    "PaymentMethod",
    "PaymentStats",
    "PaymentStatus",
    "PaymentType",
    "ProportionalPaymentInfo",
    "UpdatedPaymentInfo",
]
