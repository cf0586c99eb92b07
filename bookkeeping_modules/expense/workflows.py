"""Expense Workflows.

State machines for company expenses and expense reports.  Both share one
shape; a report's status is tracked independently of the expenses it
references.
"""

from bookkeeping_kernel.domain.workflow import Transition, Workflow
from bookkeeping_kernel.logging_config import get_logger
from bookkeeping_modules.expense.models import ExpenseStatus

logger = get_logger("modules.expense.workflows")

PENDING = ExpenseStatus.PENDING.value
APPROVED = ExpenseStatus.APPROVED.value
REIMBURSED = ExpenseStatus.REIMBURSED.value
REJECTED = ExpenseStatus.REJECTED.value


def _approval_workflow(name: str, description: str) -> Workflow:
    """pending -> approved -> reimbursed, or pending -> rejected."""
    return Workflow(
        name=name,
        description=description,
        initial_state=PENDING,
        states=(PENDING, APPROVED, REIMBURSED, REJECTED),
        transitions=(
            Transition(PENDING, APPROVED, action="approve"),
            Transition(PENDING, REJECTED, action="reject"),
            Transition(APPROVED, REIMBURSED, action="reimburse"),
        ),
        terminal_states=(REIMBURSED, REJECTED),
    )


# -----------------------------------------------------------------------------
# Company Expense Workflow
# -----------------------------------------------------------------------------

EXPENSE_WORKFLOW = _approval_workflow("company_expense", "Company expense lifecycle")

logger.info(
    "expense_workflow_registered",
    extra={
        "workflow_name": EXPENSE_WORKFLOW.name,
        "state_count": len(EXPENSE_WORKFLOW.states),
        "transition_count": len(EXPENSE_WORKFLOW.transitions),
        "initial_state": EXPENSE_WORKFLOW.initial_state,
    },
)


# -----------------------------------------------------------------------------
# Expense Report Workflow
# -----------------------------------------------------------------------------

EXPENSE_REPORT_WORKFLOW = _approval_workflow("expense_report", "Expense report lifecycle")

logger.info(
    "expense_report_workflow_registered",
    extra={
        "workflow_name": EXPENSE_REPORT_WORKFLOW.name,
        "state_count": len(EXPENSE_REPORT_WORKFLOW.states),
        "transition_count": len(EXPENSE_REPORT_WORKFLOW.transitions),
        "initial_state": EXPENSE_REPORT_WORKFLOW.initial_state,
    },
)
