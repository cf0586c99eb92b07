"""
Employee Module Service (``bookkeeping_modules.employee.service``).

Responsibility
--------------
Company-scoped employee records: CRUD, the salary advance / salary
payment / leave / duty sub-records, identity documents, and the derived
salary balance (delegated to ``bookkeeping_engines.payroll``).

Architecture position
---------------------
**Modules layer** -- thin glue over the kernel stores and the payroll
engine.

Invariants enforced
-------------------
* Every employee created here is attached to the given company in the
  same call.
* Sub-records are updated by id.  An id the employee does not have is
  reported as NOT_FOUND; nothing is changed.
* Amounts (salary, advances, payments, bonuses, deductions, overtime) are
  non-negative Decimals; sub-periods have start <= end.

Failure modes
-------------
* NOT_FOUND for an unknown company, an employee the company does not own,
  or an unknown sub-record id.
* VALIDATION_FAILED for bad amounts, empty required text, inverted
  periods or non-editable fields.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import date
from decimal import Decimal
from typing import Any
from uuid import UUID, uuid4

from bookkeeping_engines.payroll import (
    SALARY_PRORATION_DAYS,
    EmployeeTotals,
    duty_days,
    employee_totals,
    leave_days,
    overtime_hours,
    paid_leave_days,
)
from bookkeeping_kernel.domain.results import OperationResult
from bookkeeping_kernel.domain.values import Address, PaymentMethod
from bookkeeping_kernel.logging_config import get_logger
from bookkeeping_kernel.store.collections import CollectionName
from bookkeeping_kernel.store.tenancy import OwnedKind
from bookkeeping_modules._service_helpers import (
    ModuleService,
    apply_changes,
    find_by_id,
    replace_by_id,
    require_amount,
    require_period,
    require_text,
    service_operation,
)
from bookkeeping_modules.employee.models import (
    DutyRecord,
    EmergencyContact,
    Employee,
    Gender,
    Identification,
    IdentificationType,
    Leave,
    SalaryAdvance,
    SalaryPayment,
)

logger = get_logger("modules.employee.service")

EDITABLE_FIELDS = frozenset({
    "name", "position", "monthly_salary", "join_date", "email", "phone",
    "gender", "date_of_birth", "alternate_phone", "address",
})


@dataclass(frozen=True)
class EmployeeSummary:
    """Derived figures for one employee as of a date."""
    employee_id: UUID
    as_of: date
    totals: EmployeeTotals
    leave_days: int
    paid_leave_days: int
    duty_days: int
    overtime_hours: Decimal

    @property
    def current_balance(self) -> Decimal:
        return self.totals.current_balance


class EmployeeService(ModuleService):
    """
    Company-scoped employee operations.

    Contract
    --------
    * Every mutating method commits the employees collection (and the
      companies collection when ownership changes) and returns an
      ``OperationResult``; a failed save is reported on
      ``persistence_error`` without undoing the change.
    """

    def __init__(self, *args: Any, salary_proration_days: int = SALARY_PRORATION_DAYS, **kwargs: Any):
        super().__init__(*args, **kwargs)
        self._proration_days = salary_proration_days

    # =========================================================================
    # Employee CRUD
    # =========================================================================

    @service_operation("create_employee")
    def create_employee(
        self,
        company_id: UUID,
        *,
        name: str,
        position: str,
        monthly_salary: Decimal,
        join_date: date,
        email: str = "",
        phone: str = "",
        gender: Gender = Gender.NOT_SPECIFIED,
        date_of_birth: date | None = None,
        alternate_phone: str | None = None,
        address: Address | None = None,
    ) -> OperationResult[Employee]:
        employee = Employee(
            id=uuid4(),
            name=require_text(name, "name"),
            position=position,
            monthly_salary=require_amount(monthly_salary, "monthly_salary"),
            join_date=join_date,
            email=email,
            phone=phone,
            gender=gender,
            date_of_birth=date_of_birth,
            alternate_phone=alternate_phone,
            address=address or Address(),
        )
        self._create_owned(company_id, OwnedKind.EMPLOYEE, employee)
        logger.info(
            "employee_created",
            extra={
                "company_id": str(company_id),
                "employee_id": str(employee.id),
                "monthly_salary": str(employee.monthly_salary),
            },
        )
        return self._commit(
            OperationResult.ok(employee),
            CollectionName.EMPLOYEES, CollectionName.COMPANIES,
        )

    @service_operation("update_employee")
    def update_employee(
        self, company_id: UUID, employee_id: UUID, **changes: Any,
    ) -> OperationResult[Employee]:
        employee = self._get_owned(company_id, OwnedKind.EMPLOYEE, employee_id)
        if "name" in changes:
            require_text(changes["name"], "name")
        if "monthly_salary" in changes:
            changes["monthly_salary"] = require_amount(changes["monthly_salary"], "monthly_salary")
        updated = apply_changes(employee, changes, EDITABLE_FIELDS, "employee")
        return self._save(updated, "employee_updated", fields=sorted(changes))

    @service_operation("delete_employee")
    def delete_employee(self, company_id: UUID, employee_id: UUID) -> OperationResult[Employee]:
        employee = self._delete_owned(company_id, OwnedKind.EMPLOYEE, employee_id)
        logger.info(
            "employee_deleted",
            extra={"company_id": str(company_id), "employee_id": str(employee_id)},
        )
        return self._commit(
            OperationResult.ok(employee),
            CollectionName.EMPLOYEES, CollectionName.COMPANIES,
        )

    @service_operation("get_employee")
    def get_employee(self, company_id: UUID, employee_id: UUID) -> OperationResult[Employee]:
        return OperationResult.ok(self._get_owned(company_id, OwnedKind.EMPLOYEE, employee_id))

    @service_operation("list_employees")
    def list_employees(self, company_id: UUID) -> OperationResult[list[Employee]]:
        return OperationResult.ok(self._list_owned(company_id, OwnedKind.EMPLOYEE))

    # =========================================================================
    # Salary advances and payments
    # =========================================================================

    @service_operation("add_salary_advance")
    def add_salary_advance(
        self,
        company_id: UUID,
        employee_id: UUID,
        *,
        amount: Decimal,
        date: date,
        reason: str = "",
        payment_method: PaymentMethod = PaymentMethod.BANK_TRANSFER,
        processed_by: str = "",
        reference_number: str | None = None,
        notes: str | None = None,
    ) -> OperationResult[SalaryAdvance]:
        employee = self._get_owned(company_id, OwnedKind.EMPLOYEE, employee_id)
        advance = SalaryAdvance(
            id=uuid4(),
            amount=require_amount(amount, "amount"),
            date=date,
            reason=reason,
            payment_method=payment_method,
            processed_by=processed_by,
            reference_number=reference_number,
            notes=notes,
        )
        updated = replace(employee, salary_advances=employee.salary_advances + (advance,))
        return self._save(
            updated, "salary_advance_added",
            value=advance, advance_id=str(advance.id), amount=str(advance.amount),
        )

    @service_operation("add_salary_payment")
    def add_salary_payment(
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
        reference_number: str | None = None,
        notes: str | None = None,
    ) -> OperationResult[SalaryPayment]:
        employee = self._get_owned(company_id, OwnedKind.EMPLOYEE, employee_id)
        require_period(period_start, period_end)
        payment = SalaryPayment(
            id=uuid4(),
            amount=require_amount(amount, "amount"),
            date=date,
            period_start=period_start,
            period_end=period_end,
            bonuses=require_amount(bonuses, "bonuses"),
            deductions=require_amount(deductions, "deductions"),
            payment_method=payment_method,
            processed_by=processed_by,
            reference_number=reference_number,
            notes=notes,
        )
        updated = replace(employee, salary_history=employee.salary_history + (payment,))
        return self._save(
            updated, "salary_payment_added",
            value=payment, payment_id=str(payment.id), amount=str(payment.amount),
        )

    @service_operation("update_salary_advance")
    def update_salary_advance(
        self, company_id: UUID, employee_id: UUID, advance: SalaryAdvance,
    ) -> OperationResult[SalaryAdvance]:
        employee = self._get_owned(company_id, OwnedKind.EMPLOYEE, employee_id)
        require_amount(advance.amount, "amount")
        updated = replace(
            employee,
            salary_advances=replace_by_id(employee.salary_advances, advance, "salary_advance"),
        )
        return self._save(updated, "salary_advance_updated", value=advance, advance_id=str(advance.id))

    @service_operation("update_salary_payment")
    def update_salary_payment(
        self, company_id: UUID, employee_id: UUID, payment: SalaryPayment,
    ) -> OperationResult[SalaryPayment]:
        employee = self._get_owned(company_id, OwnedKind.EMPLOYEE, employee_id)
        for name in ("amount", "bonuses", "deductions"):
            require_amount(getattr(payment, name), name)
        require_period(payment.period_start, payment.period_end)
        updated = replace(
            employee,
            salary_history=replace_by_id(employee.salary_history, payment, "salary_payment"),
        )
        return self._save(updated, "salary_payment_updated", value=payment, payment_id=str(payment.id))

    # =========================================================================
    # Leaves and duty records
    # =========================================================================

    @service_operation("add_leave")
    def add_leave(
        self,
        company_id: UUID,
        employee_id: UUID,
        *,
        start_date: date,
        end_date: date,
        reason: str = "",
        is_paid: bool = False,
        approved_by: str | None = None,
        notes: str | None = None,
    ) -> OperationResult[Leave]:
        employee = self._get_owned(company_id, OwnedKind.EMPLOYEE, employee_id)
        require_period(start_date, end_date)
        leave = Leave(
            id=uuid4(),
            start_date=start_date,
            end_date=end_date,
            reason=reason,
            is_paid=is_paid,
            approved_by=approved_by,
            notes=notes,
        )
        updated = replace(employee, leaves=employee.leaves + (leave,))
        return self._save(updated, "leave_added", value=leave, leave_id=str(leave.id))

    @service_operation("update_leave")
    def update_leave(
        self, company_id: UUID, employee_id: UUID, leave: Leave,
    ) -> OperationResult[Leave]:
        employee = self._get_owned(company_id, OwnedKind.EMPLOYEE, employee_id)
        require_period(leave.start_date, leave.end_date)
        updated = replace(employee, leaves=replace_by_id(employee.leaves, leave, "leave"))
        return self._save(updated, "leave_updated", value=leave, leave_id=str(leave.id))

    @service_operation("add_duty_record")
    def add_duty_record(
        self,
        company_id: UUID,
        employee_id: UUID,
        *,
        start_date: date,
        end_date: date,
        notes: str | None = None,
        overtime_hours: Decimal = Decimal("0"),
        verified_by: str | None = None,
    ) -> OperationResult[DutyRecord]:
        employee = self._get_owned(company_id, OwnedKind.EMPLOYEE, employee_id)
        require_period(start_date, end_date)
        record = DutyRecord(
            id=uuid4(),
            start_date=start_date,
            end_date=end_date,
            notes=notes,
            overtime_hours=require_amount(overtime_hours, "overtime_hours"),
            verified_by=verified_by,
        )
        updated = replace(employee, duty_records=employee.duty_records + (record,))
        return self._save(updated, "duty_record_added", value=record, duty_record_id=str(record.id))

    @service_operation("update_duty_record")
    def update_duty_record(
        self, company_id: UUID, employee_id: UUID, record: DutyRecord,
    ) -> OperationResult[DutyRecord]:
        employee = self._get_owned(company_id, OwnedKind.EMPLOYEE, employee_id)
        require_period(record.start_date, record.end_date)
        require_amount(record.overtime_hours, "overtime_hours")
        updated = replace(
            employee, duty_records=replace_by_id(employee.duty_records, record, "duty_record"),
        )
        return self._save(updated, "duty_record_updated", value=record, duty_record_id=str(record.id))

    # =========================================================================
    # Contacts and identity documents
    # =========================================================================

    @service_operation("set_emergency_contact")
    def set_emergency_contact(
        self, company_id: UUID, employee_id: UUID, contact: EmergencyContact | None,
    ) -> OperationResult[Employee]:
        employee = self._get_owned(company_id, OwnedKind.EMPLOYEE, employee_id)
        if contact is not None:
            require_text(contact.name, "emergency_contact.name")
        return self._save(replace(employee, emergency_contact=contact), "emergency_contact_set")

    @service_operation("add_identification")
    def add_identification(
        self,
        company_id: UUID,
        employee_id: UUID,
        *,
        type: IdentificationType,
        document_number: str,
        issued_date: date | None = None,
        expiry_date: date | None = None,
    ) -> OperationResult[Identification]:
        employee = self._get_owned(company_id, OwnedKind.EMPLOYEE, employee_id)
        if issued_date is not None and expiry_date is not None:
            require_period(issued_date, expiry_date, field="expiry_date")
        identification = Identification(
            id=uuid4(),
            type=type,
            document_number=require_text(document_number, "document_number"),
            issued_date=issued_date,
            expiry_date=expiry_date,
        )
        updated = replace(
            employee, identifications=employee.identifications + (identification,),
        )
        return self._save(
            updated, "identification_added",
            value=identification, identification_id=str(identification.id),
        )

    @service_operation("remove_identification")
    def remove_identification(
        self, company_id: UUID, employee_id: UUID, identification_id: UUID,
    ) -> OperationResult[Identification]:
        employee = self._get_owned(company_id, OwnedKind.EMPLOYEE, employee_id)
        identification = find_by_id(employee.identifications, identification_id, "identification")
        updated = replace(
            employee,
            identifications=tuple(i for i in employee.identifications if i.id != identification_id),
        )
        return self._save(
            updated, "identification_removed",
            value=identification, identification_id=str(identification_id),
        )

    # =========================================================================
    # Derived figures
    # =========================================================================

    @service_operation("employee_balance_summary")
    def balance_summary(
        self, company_id: UUID, employee_id: UUID, as_of: date | None = None,
    ) -> OperationResult[EmployeeSummary]:
        employee = self._get_owned(company_id, OwnedKind.EMPLOYEE, employee_id)
        as_of = as_of or self._clock.today()
        totals = employee_totals(
            monthly_salary=employee.monthly_salary,
            join_date=employee.join_date,
            advances=employee.salary_advances,
            payments=employee.salary_history,
            as_of=as_of,
            proration_days=self._proration_days,
        )
        return OperationResult.ok(EmployeeSummary(
            employee_id=employee.id,
            as_of=as_of,
            totals=totals,
            leave_days=leave_days(employee.leaves),
            paid_leave_days=paid_leave_days(employee.leaves),
            duty_days=duty_days(employee.duty_records),
            overtime_hours=overtime_hours(employee.duty_records),
        ))

    # -------------------------------------------------------------------------

    def _save(
        self, employee: Employee, event: str, value: Any = None, **log_fields: Any,
    ) -> OperationResult:
        self._store(CollectionName.EMPLOYEES).update(employee)
        logger.info(event, extra={"employee_id": str(employee.id), **log_fields})
        return self._commit(
            OperationResult.ok(employee if value is None else value),
            CollectionName.EMPLOYEES,
        )
