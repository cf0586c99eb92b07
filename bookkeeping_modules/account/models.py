"""
Personal Account Models.

The owner's personal-funds account: money the owner spent on the
company's behalf and the reimbursements received back.
"""

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from uuid import UUID

from bookkeeping_kernel.domain.values import PaymentMethod, sum_amounts


class TransactionType(Enum):
    SALARY_PAYMENT = "Salary Payment"
    EXPENSE_PAYMENT = "Expense Payment"
    COMPANY_REIMBURSEMENT = "Company Reimbursement"
    PERSONAL_DEPOSIT = "Personal Deposit"
    OTHER = "Other Transaction"


class TransactionStatus(Enum):
    PENDING = "Pending"
    REIMBURSED = "Reimbursed"
    CANCELLED = "Cancelled"


@dataclass(frozen=True)
class AccountTransaction:
    """
    One movement on the personal account.

    Positive amounts were paid out by the owner for the company; negative
    amounts were received back from it.
    """
    id: UUID
    date: date
    amount: Decimal
    description: str
    type: TransactionType
    status: TransactionStatus = TransactionStatus.PENDING
    related_expense_id: UUID | None = None
    related_employee_id: UUID | None = None
    reimbursement_date: date | None = None
    payment_method: PaymentMethod | None = None
    reference_number: str | None = None
    notes: str | None = None

    @property
    def is_pending(self) -> bool:
        return self.status is TransactionStatus.PENDING

    @property
    def is_reimbursed(self) -> bool:
        return self.status is TransactionStatus.REIMBURSED


@dataclass(frozen=True)
class AccountBalance:
    id: UUID
    owner_name: str
    last_updated: datetime
    transactions: tuple[AccountTransaction, ...] = ()

    @property
    def pending_amount(self) -> Decimal:
        return sum_amounts(t.amount for t in self.transactions if t.is_pending)

    @property
    def reimbursed_amount(self) -> Decimal:
        return sum_amounts(t.amount for t in self.transactions if t.is_reimbursed)

    @property
    def total_balance(self) -> Decimal:
        return sum_amounts(t.amount for t in self.transactions)
