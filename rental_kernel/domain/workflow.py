"""
Canonical workflow types (``rental_kernel.domain.workflow``).

Responsibility
--------------
Pure value objects for status state machines.  Leases and payments declare
their lifecycles as explicit transition tables built from these types, so
every status write can be checked against one definition.

Architecture position
---------------------
**Kernel domain layer** -- pure value objects.  ZERO I/O.

Invariants enforced
-------------------
* Transitions reference only states in ``Workflow.states``.
* ``initial_state`` is a member of ``states``.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Guard:
    """A condition that must hold before a transition fires.

    Contract: frozen, descriptive only.  The owning service evaluates it.
    """
    name: str
    description: str


@dataclass(frozen=True)
class Transition:
    """A valid state transition in a workflow."""
    from_state: str
    to_state: str
    action: str
    guard: Guard | None = None


@dataclass(frozen=True)
class Workflow:
    """A state machine definition for a record lifecycle.

    Contract: frozen; ``transitions`` reference only states in ``states``.
    ``terminal_states`` have no outgoing transitions.
    """
    name: str
    description: str
    initial_state: str
    states: tuple[str, ...]
    transitions: tuple[Transition, ...]
    terminal_states: tuple[str, ...] = ()

    def __post_init__(self):
        if self.initial_state not in self.states:
            raise ValueError(
                f"{self.name}: initial state {self.initial_state!r} not in states"
            )
        for t in self.transitions:
            if t.from_state not in self.states or t.to_state not in self.states:
                raise ValueError(
                    f"{self.name}: transition {t.action!r} references unknown state"
                )
            if t.from_state in self.terminal_states:
                raise ValueError(
                    f"{self.name}: terminal state {t.from_state!r} has an outgoing "
                    f"transition"
                )

    def find(self, from_state: str, to_state: str) -> Transition | None:
        for t in self.transitions:
            if t.from_state == from_state and t.to_state == to_state:
                return t
        return None

    def can_transition(self, from_state: str, to_state: str) -> bool:
        return self.find(from_state, to_state) is not None

    def is_terminal(self, state: str) -> bool:
        return state in self.terminal_states
