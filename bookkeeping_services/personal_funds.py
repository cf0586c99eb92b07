"""
bookkeeping_services.personal_funds -- Personal-funds linking flows.

Responsibility:
    The composite operations that tie salary payments, salary slips and
    company expenses to the owner's personal-funds account:

    1. create the primary record (salary payment, salary slip or expense);
    2. create a company expense for it when the primary is not one;
    3. when paid from personal funds, add an account transaction that
       references the expense and the employee;
    4. that transaction starts pending.

Architecture position:
    Services -- orchestrates the employee, expense and account module
    services and the report generator.  Holds no store of its own.

Invariants enforced:
    - Steps run in the order above; a later step never runs after an
      earlier one fails.
    - Each step commits its own collections.  Nothing is reversed when a
      later step fails: the outcome carries every record created so far
      and the failing step's status.

Failure modes:
    - Whatever the failing step reports (NOT_FOUND, VALIDATION_FAILED),
      with ``LinkOutcome.failed_step`` naming the step.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import date
from decimal import Decimal
from typing import Any
from uuid import UUID

from bookkeeping_kernel.domain.clock import Clock, SystemClock
from bookkeeping_kernel.domain.results import OperationResult
from bookkeeping_kernel.domain.values import PaymentMethod
from bookkeeping_kernel.exceptions import ValidationFailedError
from bookkeeping_kernel.logging_config import LogContext, get_logger
from bookkeeping_modules._service_helpers import require_amount, service_operation
from bookkeeping_modules.account.models import AccountTransaction, TransactionType
from bookkeeping_modules.account.service import PersonalAccountService
from bookkeeping_modules.company.service import CompanyService
from bookkeeping_modules.employee.models import SalaryPayment
from bookkeeping_modules.employee.service import EmployeeService
from bookkeeping_modules.expense.models import CompanyExpense, ExpenseCategory
from bookkeeping_modules.expense.service import ExpenseService
from bookkeeping_modules.reporting.models import SalarySlip
from bookkeeping_services.report_generator import ReportGenerator

logger = get_logger("services.personal_funds")

SALARY_EXPENSE_TITLE = "Salary Payment"
SALARY_EXPENSE_NOTES = "Regular salary payment"
REIMBURSEMENT_DESCRIPTION = "Company Reimbursement"


@dataclass(frozen=True)
class LinkOutcome:
    """Records created by one linking flow, in creation order."""

    salary_payment: SalaryPayment | None = None
    salary_slip: SalarySlip | None = None
    expense: CompanyExpense | None = None
    transaction: AccountTransaction | None = None
    failed_step: str | None = None


class _Progress:
    """Collects step results for one flow."""

    def __init__(self, flow: str):
        self.flow = flow
        self.records: dict[str, Any] = {}
        self.persistence_errors: list[str] = []
        self.failed: tuple[str, OperationResult] | None = None

    def step(self, name: str, result: OperationResult) -> bool:
        if result.persistence_error:
            self.persistence_errors.append(result.persistence_error)
        if result.is_success:
            if name in LinkOutcome.__dataclass_fields__:
                self.records[name] = result.value
            return True
        self.failed = (name, result)
        logger.warning(
            "personal_funds_step_failed",
            extra={
                "flow": self.flow,
                "step": name,
                "error_code": result.error_code,
                "completed_steps": sorted(self.records),
            },
        )
        return False

    def outcome(self) -> OperationResult[LinkOutcome]:
        if self.failed is None:
            value = LinkOutcome(**self.records)
            result: OperationResult[LinkOutcome] = OperationResult.ok(value)
        else:
            step, failed = self.failed
            value = LinkOutcome(**self.records, failed_step=step)
            result = replace(failed, value=value, persistence_error=None)
        return result.with_persistence_error("; ".join(self.persistence_errors) or None)


class PersonalFundsLinker:
    """
    Composite flows over salary, expense and personal-account records.

    Contract:
        Every flow returns ``OperationResult[LinkOutcome]``.  On success
        ``value`` holds everything created.  On failure the status and
        message are the failing step's and ``value`` still holds what
        was created before it.
    """

    def __init__(
        self,
        companies: CompanyService,
        employees: EmployeeService,
        expenses: ExpenseService,
        account: PersonalAccountService,
        reports: ReportGenerator,
        clock: Clock | None = None,
    ):
        self._companies = companies
        self._employees = employees
        self._expenses = expenses
        self._account = account
        self._reports = reports
        self._clock = clock or SystemClock()

    # ------------------------------------------------------------------
    # Salary payments
    # ------------------------------------------------------------------

    def add_salary_payment_with_account_tracking(
        self,
        company_id: UUID,
        employee_id: UUID,
        *,
        amount: Decimal,
        date: date,
        period_start: date,
        period_end: date,
        bonuses: Decimal = Decimal("0"),
        deductions: Decimal = Decimal("0"),
        payment_method: PaymentMethod = PaymentMethod.BANK_TRANSFER,
        processed_by: str = "",
        paid_from_personal_funds: bool = False,
        reference_number: str | None = None,
        notes: str | None = None,
    ) -> OperationResult[LinkOutcome]:
        progress = _Progress("salary_payment")
        with LogContext.bind(operation="add_salary_payment_with_account_tracking"):
            lookup = self._employees.get_employee(company_id, employee_id)
            if not progress.step("employee_lookup", lookup):
                return progress.outcome()
            employee = lookup.value

            if not progress.step("salary_payment", self._employees.add_salary_payment(
                company_id,
                employee_id,
                amount=amount,
                date=date,
                period_start=period_start,
                period_end=period_end,
                bonuses=bonuses,
                deductions=deductions,
                payment_method=payment_method,
                processed_by=processed_by,
                reference_number=reference_number,
                notes=notes,
            )):
                return progress.outcome()

            total = Decimal(amount) + Decimal(bonuses) - Decimal(deductions)
            if not progress.step("expense", self.record_salary_payment_as_expense(
                company_id,
                employee_id,
                amount=total,
                date=date,
                payment_method=payment_method,
                reference_number=reference_number,
            )):
                return progress.outcome()

            if paid_from_personal_funds:
                progress.step("transaction", self._account.add_transaction(
                    amount=total,
                    date=date,
                    description=f"Salary payment to {employee.name}",
                    type=TransactionType.SALARY_PAYMENT,
                    related_expense_id=progress.records["expense"].id,
                    related_employee_id=employee_id,
                    payment_method=payment_method,
                    reference_number=reference_number,
                    notes=notes or _salary_period_note(period_start, period_end),
                ))
            return progress.outcome()

    @service_operation("record_salary_payment_as_expense")
    def record_salary_payment_as_expense(
        self,
        company_id: UUID,
        employee_id: UUID,
        *,
        amount: Decimal,
        date: date,
        payment_method: PaymentMethod = PaymentMethod.BANK_TRANSFER,
        reference_number: str | None = None,
    ) -> OperationResult[CompanyExpense]:
        """A "Salary Payment" expense paid by the company for one employee."""
        company = self._companies.get_company(company_id)
        if not company.is_success:
            return company
        employee = self._employees.get_employee(company_id, employee_id)
        if not employee.is_success:
            return employee
        return self._expenses.create_expense(
            company_id,
            title=SALARY_EXPENSE_TITLE,
            description=f"Salary payment for {employee.value.name}",
            amount=amount,
            category=ExpenseCategory.OTHER,
            date=date,
            paid_by=company.value.name,
            paid_by_employee_id=employee_id,
            payment_method=payment_method,
            reference_number=reference_number,
            notes=SALARY_EXPENSE_NOTES,
        )

    # ------------------------------------------------------------------
    # Salary slips
    # ------------------------------------------------------------------

    def generate_salary_slip_with_account_tracking(
        self,
        company_id: UUID,
        employee_id: UUID,
        period_start: date,
        period_end: date,
        *,
        payment_method: PaymentMethod = PaymentMethod.BANK_TRANSFER,
        processed_by: str = "",
        paid_from_personal_funds: bool = False,
        reference_number: str | None = None,
        payment_date: date | None = None,
        notes: str | None = None,
    ) -> OperationResult[LinkOutcome]:
        """
        Generate a slip and, when ``payment_date`` is given, book its net
        salary as an expense (and as a personal-funds transaction).
        """
        progress = _Progress("salary_slip")
        with LogContext.bind(operation="generate_salary_slip_with_account_tracking"):
            if not progress.step("salary_slip", self._reports.generate_salary_slip(
                company_id,
                employee_id,
                period_start,
                period_end,
                payment_method=payment_method,
                processed_by=processed_by,
                reference_number=reference_number,
                payment_date=payment_date,
                notes=notes,
            )):
                return progress.outcome()
            if payment_date is None:
                return progress.outcome()

            slip = progress.records["salary_slip"]
            if not progress.step("expense", self.record_salary_payment_as_expense(
                company_id,
                employee_id,
                amount=slip.net_salary,
                date=payment_date,
                payment_method=payment_method,
                reference_number=reference_number,
            )):
                return progress.outcome()

            if paid_from_personal_funds:
                progress.step("transaction", self._account.add_transaction(
                    amount=slip.net_salary,
                    date=payment_date,
                    description=f"Salary payment to {slip.employee_name} per slip",
                    type=TransactionType.SALARY_PAYMENT,
                    related_expense_id=progress.records["expense"].id,
                    related_employee_id=employee_id,
                    payment_method=payment_method,
                    reference_number=reference_number,
                    notes=notes or _salary_period_note(period_start, period_end),
                ))
            return progress.outcome()

    # ------------------------------------------------------------------
    # Expenses and reimbursements
    # ------------------------------------------------------------------

    def add_expense_with_personal_funds(
        self,
        company_id: UUID,
        *,
        title: str,
        amount: Decimal,
        category: ExpenseCategory,
        date: date,
        paid_by: str,
        payment_method: PaymentMethod,
        description: str = "",
        paid_by_employee_id: UUID | None = None,
        paid_from_personal_funds: bool = False,
        reference_number: str | None = None,
        notes: str | None = None,
    ) -> OperationResult[LinkOutcome]:
        progress = _Progress("expense")
        with LogContext.bind(operation="add_expense_with_personal_funds"):
            if not progress.step("expense", self._expenses.create_expense(
                company_id,
                title=title,
                description=description,
                amount=amount,
                category=category,
                date=date,
                paid_by=paid_by,
                payment_method=payment_method,
                paid_by_employee_id=paid_by_employee_id,
                reference_number=reference_number,
                notes=notes,
            )):
                return progress.outcome()

            expense = progress.records["expense"]
            if paid_from_personal_funds:
                progress.step("transaction", self._account.add_transaction(
                    amount=expense.amount,
                    date=date,
                    description=title,
                    type=TransactionType.EXPENSE_PAYMENT,
                    related_expense_id=expense.id,
                    related_employee_id=paid_by_employee_id,
                    payment_method=payment_method,
                    reference_number=reference_number,
                    notes=notes,
                ))
            return progress.outcome()

    @service_operation("record_reimbursement_to_personal_account")
    def record_reimbursement_to_personal_account(
        self,
        *,
        amount: Decimal,
        date: date | None = None,
        description: str = REIMBURSEMENT_DESCRIPTION,
        payment_method: PaymentMethod = PaymentMethod.BANK_TRANSFER,
        reference_number: str | None = None,
        notes: str | None = None,
    ) -> OperationResult[AccountTransaction]:
        """Money received back from the company, booked as a negative amount."""
        received = require_amount(amount, "amount")
        if received == 0:
            raise ValidationFailedError("amount must be greater than zero", field="amount")
        return self._account.add_transaction(
            amount=-received,
            date=date or self._clock.today(),
            description=description,
            type=TransactionType.COMPANY_REIMBURSEMENT,
            payment_method=payment_method,
            reference_number=reference_number,
            notes=notes,
        )


def _salary_period_note(start: date, end: date) -> str:
    return f"Salary period: {start.isoformat()} - {end.isoformat()}"
