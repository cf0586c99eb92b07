"""
bookkeeping_services.workflow_executor -- status transitions for expenses,
expense reports and personal-account transactions.

Responsibility:
    Given a record's current status and a requested action, decide whether
    the action is legal and which status it leads to.  It never touches a
    store: the calling module service applies the field changes and
    commits.

Architecture position:
    Services layer.  Imports only bookkeeping_kernel.

Invariants enforced:
    - Only transitions declared on the Workflow are executed.
    - Repeating the action that produced the current status is reported
      as ``already_applied``; the caller decides whether identical details
      make it a no-op.
    - Every decision, legal or not, is logged once as
      ``workflow_transition`` with the bound LogContext fields.
"""

from __future__ import annotations

import time
from typing import Any, Callable
from uuid import UUID

from bookkeeping_kernel.domain.workflow import TransitionResult, Workflow
from bookkeeping_kernel.logging_config import LogContext, get_logger

logger = get_logger("services.workflow_executor")

TRACE_TYPE_WORKFLOW_TRANSITION = "WORKFLOW_TRANSITION"
OUTCOME_SUCCESS = "success"
OUTCOME_ALREADY_APPLIED = "already_applied"
OUTCOME_NO_TRANSITION = "no_transition"

OutcomeSink = Callable[[dict[str, Any]], None]


class WorkflowExecutor:
    """Stateless; one instance is shared by every module service of a ledger."""

    def execute_transition(
        self,
        workflow: Workflow,
        entity_type: str,
        entity_id: UUID,
        current_state: str,
        action: str,
        outcome_sink: OutcomeSink | None = None,
    ) -> TransitionResult:
        started = time.perf_counter()
        result, outcome = self._decide(workflow, entity_type, current_state, action)

        trace: dict[str, Any] = {
            "trace_type": TRACE_TYPE_WORKFLOW_TRANSITION,
            "workflow": workflow.name,
            "action": action,
            "entity_type": entity_type,
            "entity_id": str(entity_id),
            "from_state": current_state,
            "to_state": result.new_state,
            "outcome": outcome,
            "reason": result.reason,
            "duration_ms": round((time.perf_counter() - started) * 1000, 3),
            **LogContext.get_all(),
        }
        logger.info("workflow_transition", extra=trace)
        if outcome_sink is not None:
            outcome_sink(trace)
        return result

    @staticmethod
    def _decide(
        workflow: Workflow, entity_type: str, current_state: str, action: str,
    ) -> tuple[TransitionResult, str]:
        transition = workflow.find_transition(current_state, action)
        if transition is not None:
            return TransitionResult(success=True, new_state=transition.to_state), OUTCOME_SUCCESS

        if any(t.action == action and t.to_state == current_state for t in workflow.transitions):
            return TransitionResult(
                success=False,
                new_state=current_state,
                already_applied=True,
                reason=f"'{action}' already applied; {entity_type} is '{current_state}'",
            ), OUTCOME_ALREADY_APPLIED

        return TransitionResult(
            success=False,
            reason=f"No transition '{action}' from state '{current_state}'",
        ), OUTCOME_NO_TRANSITION
