"""
Expense Module (``bookkeeping_modules.expense``).

Company expenses and expense reports with their approval and
reimbursement workflows.
"""

from bookkeeping_modules.expense.models import (
    CompanyExpense,
    ExpenseCategory,
    ExpenseReport,
    ExpenseStatus,
)
from bookkeeping_modules.expense.service import ExpenseService
from bookkeeping_modules.expense.workflows import EXPENSE_REPORT_WORKFLOW, EXPENSE_WORKFLOW

__all__ = [
    "CompanyExpense",
    "EXPENSE_REPORT_WORKFLOW",
    "EXPENSE_WORKFLOW",
    "ExpenseCategory",
    "ExpenseReport",
    "ExpenseService",
    "ExpenseStatus",
]
