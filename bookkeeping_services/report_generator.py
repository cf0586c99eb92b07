"""
bookkeeping_services.report_generator -- Salary slips and client statements.

Responsibility:
    Generate the two snapshot reports.  A salary slip fixes an employee's
    prorated salary, advances, bonuses and deductions for a period; a
    client statement fixes the payments each of a client's projects
    received in a period.  Both are stored and attached to the company
    that asked for them.

Architecture position:
    Services -- composes the payroll and receivables engines with the
    kernel stores.  Reached through ``Ledger.reports``.

Invariants enforced:
    - A generated report is never recomputed from live data.
    - A client statement is only created when at least one project has a
      payment in the period; otherwise nothing is stored and the result is
      NO_MATCHING_DATA.
    - Generation and attachment to the company happen in one call.

Failure modes:
    - NOT_FOUND for an unknown company, or an employee / client the
      company does not own.
    - VALIDATION_FAILED for an inverted period.
    - NO_MATCHING_DATA for a client statement with nothing in the period.
"""

from __future__ import annotations

from datetime import date
from typing import Any
from uuid import UUID, uuid4

from bookkeeping_engines.payroll import SALARY_PRORATION_DAYS, salary_slip_figures
from bookkeeping_engines.receivables import statement_sections
from bookkeeping_kernel.domain.results import OperationResult
from bookkeeping_kernel.domain.values import PaymentMethod
from bookkeeping_kernel.exceptions import NoMatchingDataError
from bookkeeping_kernel.logging_config import get_logger
from bookkeeping_kernel.store.collections import CollectionName
from bookkeeping_kernel.store.tenancy import OwnedKind
from bookkeeping_modules._service_helpers import ModuleService, require_period, service_operation
from bookkeeping_modules.reporting.models import (
    ClientStatement,
    PaymentRecord,
    ProjectPaymentSummary,
    SalarySlip,
)

logger = get_logger("services.report_generator")


class ReportGenerator(ModuleService):
    """Generates and lists salary slips and client statements."""

    def __init__(self, *args: Any, salary_proration_days: int = SALARY_PRORATION_DAYS, **kwargs: Any):
        super().__init__(*args, **kwargs)
        self._proration_days = salary_proration_days

    # =========================================================================
    # Salary slips
    # =========================================================================

    @service_operation("generate_salary_slip")
    def generate_salary_slip(
        self,
        company_id: UUID,
        employee_id: UUID,
        period_start: date,
        period_end: date,
        payment_method: PaymentMethod | None = None,
        processed_by: str | None = None,
        reference_number: str | None = None,
        payment_date: date | None = None,
        notes: str | None = None,
    ) -> OperationResult[SalarySlip]:
        """
        Build a slip for ``employee_id`` over ``period_start..period_end``.

        Base salary is prorated on a month of ``salary_proration_days``
        days (30 unless configured).  Advances dated inside
        the period are deducted.  Bonuses and deductions come from salary
        payments whose own period lies fully inside the slip period.
        """
        employee = self._get_owned(company_id, OwnedKind.EMPLOYEE, employee_id)
        period = require_period(period_start, period_end)

        figures = salary_slip_figures(
            monthly_salary=employee.monthly_salary,
            advances=employee.salary_advances,
            salary_history=employee.salary_history,
            period=period,
            payment_method=payment_method,
            processed_by=processed_by or None,
            proration_days=self._proration_days,
        )
        slip = SalarySlip(
            id=uuid4(),
            employee_id=employee.id,
            employee_name=employee.name,
            position=employee.position,
            period=period,
            base_salary=figures.base_salary,
            bonuses=figures.bonuses,
            deductions=figures.deductions,
            advances=figures.advances,
            generated_date=self._clock.now(),
            payment_method=figures.payment_method,
            processed_by=figures.processed_by,
            reference_number=reference_number,
            payment_date=payment_date,
            notes=notes,
        )
        self._create_owned(company_id, OwnedKind.SALARY_SLIP, slip)

        logger.info(
            "salary_slip_generated",
            extra={
                "company_id": str(company_id),
                "employee_id": str(employee.id),
                "salary_slip_id": str(slip.id),
                "period_start": period.start_date.isoformat(),
                "period_end": period.end_date.isoformat(),
                "net_salary": str(slip.net_salary),
            },
        )
        return self._commit(
            OperationResult.ok(slip),
            CollectionName.SALARY_SLIPS, CollectionName.COMPANIES,
        )

    @service_operation("list_salary_slips")
    def list_salary_slips(
        self, company_id: UUID, employee_id: UUID | None = None,
    ) -> OperationResult[list[SalarySlip]]:
        slips = self._list_owned(company_id, OwnedKind.SALARY_SLIP)
        if employee_id is not None:
            slips = [s for s in slips if s.employee_id == employee_id]
        return OperationResult.ok(slips)

    def employee_salary_slips(
        self, company_id: UUID, employee_id: UUID,
    ) -> OperationResult[list[SalarySlip]]:
        """Slips for one employee, newest period first."""
        result = self.list_salary_slips(company_id, employee_id)
        if not result.is_success:
            return result
        return OperationResult.ok(
            sorted(result.value, key=lambda s: s.period.end_date, reverse=True)
        )

    @service_operation("get_salary_slip")
    def get_salary_slip(self, company_id: UUID, slip_id: UUID) -> OperationResult[SalarySlip]:
        return OperationResult.ok(self._get_owned(company_id, OwnedKind.SALARY_SLIP, slip_id))

    # =========================================================================
    # Client statements
    # =========================================================================

    @service_operation("generate_client_statement")
    def generate_client_statement(
        self,
        company_id: UUID,
        client_id: UUID,
        period_start: date,
        period_end: date,
    ) -> OperationResult[ClientStatement]:
        client = self._get_owned(company_id, OwnedKind.CLIENT, client_id)
        period = require_period(period_start, period_end)

        sections = statement_sections(projects=client.projects, period=period)
        if not sections:
            raise NoMatchingDataError(
                "client_statement",
                f"client {client.name!r} has no project payments between "
                f"{period.start_date} and {period.end_date}",
            )

        summaries = tuple(
            ProjectPaymentSummary(
                id=uuid4(),
                project_id=section.project.id,
                project_name=section.project.name,
                contract_amount=section.project.contract_amount,
                paid_amount=section.paid_amount,
                payments=tuple(
                    PaymentRecord(
                        id=p.id,
                        amount=p.amount,
                        date=p.date,
                        payment_type=p.payment_type,
                    )
                    for p in section.payments
                ),
            )
            for section in sections
        )
        statement = ClientStatement(
            id=uuid4(),
            client_id=client.id,
            client_name=client.name,
            company=client.company,
            period=period,
            generated_date=self._clock.now(),
            project_payments=summaries,
        )
        self._create_owned(company_id, OwnedKind.CLIENT_STATEMENT, statement)

        logger.info(
            "client_statement_generated",
            extra={
                "company_id": str(company_id),
                "client_id": str(client.id),
                "client_statement_id": str(statement.id),
                "project_count": len(summaries),
                "total_paid": str(statement.total_paid),
            },
        )
        return self._commit(
            OperationResult.ok(statement),
            CollectionName.CLIENT_STATEMENTS, CollectionName.COMPANIES,
        )

    @service_operation("list_client_statements")
    def list_client_statements(
        self, company_id: UUID, client_id: UUID | None = None,
    ) -> OperationResult[list[ClientStatement]]:
        statements = self._list_owned(company_id, OwnedKind.CLIENT_STATEMENT)
        if client_id is not None:
            statements = [s for s in statements if s.client_id == client_id]
        return OperationResult.ok(statements)

    @service_operation("get_client_statement")
    def get_client_statement(
        self, company_id: UUID, statement_id: UUID,
    ) -> OperationResult[ClientStatement]:
        return OperationResult.ok(
            self._get_owned(company_id, OwnedKind.CLIENT_STATEMENT, statement_id)
        )
