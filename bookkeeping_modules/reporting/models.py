"""
Report Snapshot Models.

Salary slips and client statements are snapshots: their figures are
fixed when generated and never re-derived from the live employee or
client afterwards.
"""

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from uuid import UUID

from bookkeeping_kernel.domain.values import DatePeriod, PaymentMethod, sum_amounts
from bookkeeping_modules.client.models import ProjectPaymentType


@dataclass(frozen=True)
class SalarySlip:
    id: UUID
    employee_id: UUID
    employee_name: str
    position: str
    period: DatePeriod
    base_salary: Decimal
    bonuses: Decimal
    deductions: Decimal
    advances: Decimal
    generated_date: datetime
    payment_method: PaymentMethod | None = None
    processed_by: str | None = None
    reference_number: str | None = None
    payment_date: date | None = None
    notes: str | None = None

    @property
    def total_earnings(self) -> Decimal:
        return self.base_salary + self.bonuses

    @property
    def total_deductions(self) -> Decimal:
        return self.deductions + self.advances

    @property
    def net_salary(self) -> Decimal:
        return self.total_earnings - self.total_deductions


@dataclass(frozen=True)
class PaymentRecord:
    """A project payment as copied onto a statement."""
    id: UUID
    amount: Decimal
    date: date
    payment_type: ProjectPaymentType


@dataclass(frozen=True)
class ProjectPaymentSummary:
    id: UUID
    project_id: UUID
    project_name: str
    contract_amount: Decimal
    paid_amount: Decimal
    payments: tuple[PaymentRecord, ...] = ()

    @property
    def balance(self) -> Decimal:
        return self.contract_amount - self.paid_amount


@dataclass(frozen=True)
class ClientStatement:
    """
    Payments one client made in a period, grouped by project.

    Only projects with at least one payment in the period appear.
    """
    id: UUID
    client_id: UUID
    client_name: str
    company: str
    period: DatePeriod
    generated_date: datetime
    project_payments: tuple[ProjectPaymentSummary, ...] = ()

    @property
    def total_amount(self) -> Decimal:
        return sum_amounts(s.contract_amount for s in self.project_payments)

    @property
    def total_paid(self) -> Decimal:
        return sum_amounts(s.paid_amount for s in self.project_payments)

    @property
    def balance_due(self) -> Decimal:
        return self.total_amount - self.total_paid
