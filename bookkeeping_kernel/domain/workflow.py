"""
Canonical workflow types (``bookkeeping_kernel.domain.workflow``).

Responsibility
--------------
Pure value objects for the status state machines: expenses, expense
reports and personal-account transactions all declare a ``Workflow`` made
of ``Transition`` values.  The executor in
``bookkeeping_services.workflow_executor`` interprets them.

Architecture position
---------------------
**Kernel domain layer** -- pure value objects.  ZERO I/O.

Invariants enforced
-------------------
* Transitions reference only states in ``Workflow.states``.
* ``initial_state`` is a member of ``states``.
* ``terminal_states`` have no outgoing transitions.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Transition:
    """A valid state transition in a workflow."""
    from_state: str
    to_state: str
    action: str


@dataclass(frozen=True)
class Workflow:
    """A state machine definition for a record lifecycle.

    Contract: frozen; ``transitions`` reference only states in ``states``.
    Guarantees: ``initial_state`` is a member of ``states``.
    """
    name: str
    description: str
    initial_state: str
    states: tuple[str, ...]
    transitions: tuple[Transition, ...]
    terminal_states: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        if self.initial_state not in self.states:
            raise ValueError(
                f"Workflow '{self.name}' initial state '{self.initial_state}' "
                f"not in states"
            )
        for t in self.transitions:
            if t.from_state not in self.states or t.to_state not in self.states:
                raise ValueError(
                    f"Workflow '{self.name}' transition {t.action} references "
                    f"an unknown state"
                )
            if t.from_state in self.terminal_states:
                raise ValueError(
                    f"Workflow '{self.name}' terminal state '{t.from_state}' "
                    f"has an outgoing transition"
                )

    def find_transition(self, current_state: str, action: str) -> Transition | None:
        for t in self.transitions:
            if t.from_state == current_state and t.action == action:
                return t
        return None

    def actions_from(self, state: str) -> tuple[str, ...]:
        return tuple(t.action for t in self.transitions if t.from_state == state)


@dataclass(frozen=True)
class TransitionResult:
    """Result of executing a workflow transition.

    ``already_applied`` is set when the action is not legal from the
    current state but the current state is exactly the state that action
    produces.  Callers decide whether the repeat is an idempotent success.
    """
    success: bool
    new_state: str | None = None
    already_applied: bool = False
    reason: str = ""
