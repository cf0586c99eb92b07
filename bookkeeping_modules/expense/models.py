"""
Expense Domain Models.

Company expenses and the expense reports that group them for approval
and reimbursement.
"""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from enum import Enum
from uuid import UUID

from bookkeeping_kernel.domain.values import DatePeriod, PaymentMethod


class ExpenseCategory(Enum):
    TRAVEL = "Travel"
    ACCOMMODATION = "Accommodation"
    MEALS = "Meals"
    EQUIPMENT = "Equipment"
    SUPPLIES = "Supplies"
    TRANSPORTATION = "Transportation"
    CLIENT_MEETING = "Client Meeting"
    MARKETING = "Marketing"
    SOFTWARE = "Software"
    TRAINING = "Training"
    OTHER = "Other"


class ExpenseStatus(Enum):
    PENDING = "Pending"
    APPROVED = "Approved"
    REIMBURSED = "Reimbursed"
    REJECTED = "Rejected"


@dataclass(frozen=True)
class CompanyExpense:
    """
    Money spent on the company's behalf.

    ``paid_by`` is a display name.  ``paid_by_employee_id`` is an optional
    non-owning link to the employee who paid.
    """
    id: UUID
    title: str
    description: str
    amount: Decimal
    category: ExpenseCategory
    date: date
    paid_by: str
    payment_method: PaymentMethod
    paid_by_employee_id: UUID | None = None
    status: ExpenseStatus = ExpenseStatus.PENDING
    approved_by: str | None = None
    rejected_by: str | None = None
    reimbursement_date: date | None = None
    attachment_urls: tuple[str, ...] = ()
    notes: str | None = None
    reference_number: str | None = None


@dataclass(frozen=True)
class ExpenseReport:
    """
    A set of expenses submitted together by one employee.

    ``total_amount`` is a running total kept as expenses are added and
    removed; it can drift from the referenced expenses' current amounts
    until the report is reconciled.
    """
    id: UUID
    title: str
    period: DatePeriod
    employee_id: UUID
    employee_name: str
    total_amount: Decimal
    submission_date: date
    expense_ids: tuple[UUID, ...] = ()
    status: ExpenseStatus = ExpenseStatus.PENDING
    approval_date: date | None = None
    approved_by: str | None = None
    rejected_by: str | None = None
    rejection_date: date | None = None
    reimbursement_date: date | None = None
    reimbursement_method: PaymentMethod | None = None
    reimbursement_reference_number: str | None = None
    notes: str | None = None
