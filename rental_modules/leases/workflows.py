"""Lease Lifecycle Workflows.

State machine for rental contracts.  ``expired`` and ``cancelled`` are
terminal; renewal never revives a lease, it creates the next generation.
"""

from rental_kernel.domain.workflow import Guard, Transition, Workflow
from rental_kernel.logging_config import get_logger

logger = get_logger("modules.leases.workflows")


WITHIN_EXPIRY_WINDOW = Guard(
    "within_expiry_window", "0 < days until end_date <= expiring-soon window"
)
END_DATE_PASSED = Guard("end_date_passed", "today is after end_date")
SUCCESSOR_CREATED = Guard("successor_created", "next generation inserted atomically")


LEASE_LIFECYCLE = Workflow(
    name="lease_lifecycle",
    description="Rental contract lifecycle",
    initial_state="active",
    states=("active", "expiring_soon", "expired", "cancelled"),
    transitions=(
        Transition("active", "expiring_soon", action="flag_expiring", guard=WITHIN_EXPIRY_WINDOW),
        Transition("active", "expired", action="expire", guard=END_DATE_PASSED),
        Transition("expiring_soon", "expired", action="expire", guard=END_DATE_PASSED),
        Transition("active", "expired", action="renew", guard=SUCCESSOR_CREATED),
        Transition("expiring_soon", "expired", action="renew", guard=SUCCESSOR_CREATED),
        Transition("active", "cancelled", action="cancel"),
        Transition("expiring_soon", "cancelled", action="cancel"),
    ),
    terminal_states=("expired", "cancelled"),
)

logger.info(
    "lease_lifecycle_workflow_registered",
    extra={
        "workflow_name": LEASE_LIFECYCLE.name,
        "state_count": len(LEASE_LIFECYCLE.states),
        "transition_count": len(LEASE_LIFECYCLE.transitions),
    },
)
