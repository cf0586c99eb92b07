"""Personal Account Workflows.

A personal-funds transaction is either reimbursed by the company or
cancelled.  Neither outcome can be left.
"""

from bookkeeping_kernel.domain.workflow import Transition, Workflow
from bookkeeping_kernel.logging_config import get_logger
from bookkeeping_modules.account.models import TransactionStatus

logger = get_logger("modules.account.workflows")

PENDING = TransactionStatus.PENDING.value
REIMBURSED = TransactionStatus.REIMBURSED.value
CANCELLED = TransactionStatus.CANCELLED.value

ACCOUNT_TRANSACTION_WORKFLOW = Workflow(
    name="account_transaction",
    description="Personal-funds transaction lifecycle",
    initial_state=PENDING,
    states=(PENDING, REIMBURSED, CANCELLED),
    transitions=(
        Transition(PENDING, REIMBURSED, action="reimburse"),
        Transition(PENDING, CANCELLED, action="cancel"),
    ),
    terminal_states=(REIMBURSED, CANCELLED),
)

# Status a caller asks for -> workflow action that reaches it.
ACTION_FOR_STATUS = {
    TransactionStatus.REIMBURSED: "reimburse",
    TransactionStatus.CANCELLED: "cancel",
}

logger.info(
    "account_transaction_workflow_registered",
    extra={
        "workflow_name": ACCOUNT_TRANSACTION_WORKFLOW.name,
        "state_count": len(ACCOUNT_TRANSACTION_WORKFLOW.states),
        "transition_count": len(ACCOUNT_TRANSACTION_WORKFLOW.transitions),
        "initial_state": ACCOUNT_TRANSACTION_WORKFLOW.initial_state,
    },
)
