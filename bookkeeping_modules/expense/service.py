"""
Expense Module Service (``bookkeeping_modules.expense.service``).

Responsibility
--------------
Company-scoped company expenses and expense reports: CRUD, the
approve / reject / reimburse workflow on each, and the running total an
expense report keeps over the expenses it references.

Architecture position
---------------------
**Modules layer**.  Owns the company-expenses and expense-reports
collections.  Status changes go through ``WorkflowExecutor`` with the
workflows in ``bookkeeping_modules.expense.workflows``.

Invariants enforced
-------------------
* Status is never edited directly; only approve / reject / reimburse
  change it, and only along the declared transitions.  ``approved ->
  rejected`` is not a transition.
* Repeating the action that produced the current status with the same
  data is a success that changes and saves nothing.  Repeating it with
  different data is VALIDATION_FAILED.
* Report ``expense_ids`` holds each id at most once.  The running total
  moves by the expense's current amount on add and remove; reads never
  recompute it.  ``reconcile_expense_report_total`` is the one place the
  total is recomputed from the referenced expenses.
* Report decisions do not cascade to the referenced expenses.

Failure modes
-------------
* NOT_FOUND for an unknown company, an expense / report / employee the
  company does not own, or removing an id that is not on the report.
* VALIDATION_FAILED for bad amounts, empty titles, inverted report
  periods, non-editable fields and illegal transitions.
"""

from __future__ import annotations

from dataclasses import replace
from datetime import date
from decimal import Decimal
from typing import Any, Iterable
from uuid import UUID, uuid4

from bookkeeping_engines.expense import (
    ReportDrift,
    category_totals,
    expense_report_total,
    report_total_drift,
)
from bookkeeping_kernel.domain.results import OperationResult
from bookkeeping_kernel.domain.values import PaymentMethod
from bookkeeping_kernel.domain.workflow import Workflow
from bookkeeping_kernel.exceptions import EntityNotFoundError, ValidationFailedError
from bookkeeping_kernel.logging_config import get_logger
from bookkeeping_kernel.store.collections import CollectionName
from bookkeeping_kernel.store.tenancy import OwnedKind
from bookkeeping_modules._service_helpers import (
    ModuleService,
    apply_changes,
    require_amount,
    require_period,
    require_text,
    service_operation,
)
from bookkeeping_modules.expense.models import (
    CompanyExpense,
    ExpenseCategory,
    ExpenseReport,
    ExpenseStatus,
)
from bookkeeping_modules.expense.workflows import EXPENSE_REPORT_WORKFLOW, EXPENSE_WORKFLOW

logger = get_logger("modules.expense.service")

EXPENSE_EDITABLE_FIELDS = frozenset({
    "title", "description", "amount", "category", "date", "paid_by",
    "paid_by_employee_id", "payment_method", "attachment_urls", "notes",
    "reference_number",
})

REPORT_EDITABLE_FIELDS = frozenset({"title", "period", "notes"})


class ExpenseService(ModuleService):
    """
    Company expenses and expense reports.

    Contract
    --------
    * Every mutating method commits the collection it changed (plus the
      companies collection when ownership changes).
    * Idempotent repeats return the stored record unchanged and do not
      save.
    """

    # =========================================================================
    # Company expenses
    # =========================================================================

    @service_operation("create_expense")
    def create_expense(
        self,
        company_id: UUID,
        *,
        title: str,
        amount: Decimal,
        category: ExpenseCategory,
        date: date,
        paid_by: str,
        description: str = "",
        payment_method: PaymentMethod = PaymentMethod.CASH,
        paid_by_employee_id: UUID | None = None,
        attachment_urls: Iterable[str] = (),
        notes: str | None = None,
        reference_number: str | None = None,
    ) -> OperationResult[CompanyExpense]:
        if paid_by_employee_id is not None:
            self._get_owned(company_id, OwnedKind.EMPLOYEE, paid_by_employee_id)
        expense = CompanyExpense(
            id=uuid4(),
            title=require_text(title, "title"),
            description=description,
            amount=require_amount(amount, "amount"),
            category=category,
            date=date,
            paid_by=paid_by,
            payment_method=payment_method,
            paid_by_employee_id=paid_by_employee_id,
            attachment_urls=tuple(attachment_urls),
            notes=notes,
            reference_number=reference_number,
        )
        self._create_owned(company_id, OwnedKind.EXPENSE, expense)
        logger.info(
            "expense_created",
            extra={
                "company_id": str(company_id),
                "expense_id": str(expense.id),
                "amount": str(expense.amount),
                "category": expense.category.value,
            },
        )
        return self._commit(
            OperationResult.ok(expense),
            CollectionName.COMPANY_EXPENSES, CollectionName.COMPANIES,
        )

    @service_operation("update_expense")
    def update_expense(
        self, company_id: UUID, expense_id: UUID, **changes: Any,
    ) -> OperationResult[CompanyExpense]:
        expense = self._get_owned(company_id, OwnedKind.EXPENSE, expense_id)
        if "title" in changes:
            require_text(changes["title"], "title")
        if "amount" in changes:
            changes["amount"] = require_amount(changes["amount"], "amount")
        if changes.get("paid_by_employee_id") is not None:
            self._get_owned(company_id, OwnedKind.EMPLOYEE, changes["paid_by_employee_id"])
        if "attachment_urls" in changes:
            changes["attachment_urls"] = tuple(changes["attachment_urls"])
        updated = apply_changes(expense, changes, EXPENSE_EDITABLE_FIELDS, "company_expense")
        return self._save_expense(updated, "expense_updated", fields=sorted(changes))

    @service_operation("delete_expense")
    def delete_expense(self, company_id: UUID, expense_id: UUID) -> OperationResult[CompanyExpense]:
        expense = self._delete_owned(company_id, OwnedKind.EXPENSE, expense_id)
        logger.info(
            "expense_deleted",
            extra={"company_id": str(company_id), "expense_id": str(expense_id)},
        )
        return self._commit(
            OperationResult.ok(expense),
            CollectionName.COMPANY_EXPENSES, CollectionName.COMPANIES,
        )

    @service_operation("get_expense")
    def get_expense(self, company_id: UUID, expense_id: UUID) -> OperationResult[CompanyExpense]:
        return OperationResult.ok(self._get_owned(company_id, OwnedKind.EXPENSE, expense_id))

    @service_operation("list_expenses")
    def list_expenses(
        self, company_id: UUID, status: ExpenseStatus | None = None,
    ) -> OperationResult[list[CompanyExpense]]:
        expenses = self._list_owned(company_id, OwnedKind.EXPENSE)
        if status is not None:
            expenses = [e for e in expenses if e.status is status]
        return OperationResult.ok(expenses)

    @service_operation("expense_category_totals")
    def expense_category_totals(
        self, company_id: UUID, status: ExpenseStatus | None = None,
    ) -> OperationResult[dict[ExpenseCategory, Decimal]]:
        """Amount spent per category, categories in first-seen order."""
        expenses = self._list_owned(company_id, OwnedKind.EXPENSE)
        if status is not None:
            expenses = [e for e in expenses if e.status is status]
        return OperationResult.ok(category_totals(expenses))

    @service_operation("approve_expense")
    def approve_expense(
        self, company_id: UUID, expense_id: UUID, approved_by: str,
    ) -> OperationResult[CompanyExpense]:
        expense = self._get_owned(company_id, OwnedKind.EXPENSE, expense_id)
        return self._transition_expense(
            expense, "approve", {"approved_by": require_text(approved_by, "approved_by")},
        )

    @service_operation("reject_expense")
    def reject_expense(
        self, company_id: UUID, expense_id: UUID, rejected_by: str,
    ) -> OperationResult[CompanyExpense]:
        expense = self._get_owned(company_id, OwnedKind.EXPENSE, expense_id)
        return self._transition_expense(
            expense, "reject", {"rejected_by": require_text(rejected_by, "rejected_by")},
        )

    @service_operation("mark_expense_reimbursed")
    def mark_expense_reimbursed(
        self, company_id: UUID, expense_id: UUID, reimbursement_date: date | None = None,
    ) -> OperationResult[CompanyExpense]:
        """
        Reimburse an approved expense.

        Without ``reimbursement_date`` a first reimbursement is dated today,
        and a repeat accepts whatever date is already stored.
        """
        expense = self._get_owned(company_id, OwnedKind.EXPENSE, expense_id)
        if reimbursement_date is None and expense.status is ExpenseStatus.REIMBURSED:
            reimbursement_date = expense.reimbursement_date
        return self._transition_expense(
            expense, "reimburse",
            {"reimbursement_date": reimbursement_date or self._clock.today()},
        )

    # =========================================================================
    # Expense reports
    # =========================================================================

    @service_operation("create_expense_report")
    def create_expense_report(
        self,
        company_id: UUID,
        *,
        title: str,
        period_start: date,
        period_end: date,
        employee_id: UUID,
        expense_ids: Iterable[UUID] = (),
        notes: str | None = None,
    ) -> OperationResult[ExpenseReport]:
        employee = self._get_owned(company_id, OwnedKind.EMPLOYEE, employee_id)
        period = require_period(period_start, period_end)
        ids = tuple(dict.fromkeys(expense_ids))
        expenses = {i: self._get_owned(company_id, OwnedKind.EXPENSE, i) for i in ids}
        report = ExpenseReport(
            id=uuid4(),
            title=require_text(title, "title"),
            period=period,
            employee_id=employee.id,
            employee_name=employee.name,
            total_amount=expense_report_total(ids, expenses),
            submission_date=self._clock.today(),
            expense_ids=ids,
            notes=notes,
        )
        self._create_owned(company_id, OwnedKind.EXPENSE_REPORT, report)
        logger.info(
            "expense_report_created",
            extra={
                "company_id": str(company_id),
                "report_id": str(report.id),
                "expense_count": len(ids),
                "total_amount": str(report.total_amount),
            },
        )
        return self._commit(
            OperationResult.ok(report),
            CollectionName.EXPENSE_REPORTS, CollectionName.COMPANIES,
        )

    @service_operation("update_expense_report")
    def update_expense_report(
        self, company_id: UUID, report_id: UUID, **changes: Any,
    ) -> OperationResult[ExpenseReport]:
        report = self._get_owned(company_id, OwnedKind.EXPENSE_REPORT, report_id)
        if "title" in changes:
            require_text(changes["title"], "title")
        if "period" in changes:
            period = changes["period"]
            changes["period"] = require_period(period.start_date, period.end_date)
        updated = apply_changes(report, changes, REPORT_EDITABLE_FIELDS, "expense_report")
        return self._save_report(updated, "expense_report_updated", fields=sorted(changes))

    @service_operation("delete_expense_report")
    def delete_expense_report(
        self, company_id: UUID, report_id: UUID,
    ) -> OperationResult[ExpenseReport]:
        report = self._delete_owned(company_id, OwnedKind.EXPENSE_REPORT, report_id)
        logger.info(
            "expense_report_deleted",
            extra={"company_id": str(company_id), "report_id": str(report_id)},
        )
        return self._commit(
            OperationResult.ok(report),
            CollectionName.EXPENSE_REPORTS, CollectionName.COMPANIES,
        )

    @service_operation("get_expense_report")
    def get_expense_report(
        self, company_id: UUID, report_id: UUID,
    ) -> OperationResult[ExpenseReport]:
        return OperationResult.ok(
            self._get_owned(company_id, OwnedKind.EXPENSE_REPORT, report_id)
        )

    @service_operation("list_expense_reports")
    def list_expense_reports(
        self, company_id: UUID, employee_id: UUID | None = None,
    ) -> OperationResult[list[ExpenseReport]]:
        reports = self._list_owned(company_id, OwnedKind.EXPENSE_REPORT)
        if employee_id is not None:
            reports = [r for r in reports if r.employee_id == employee_id]
        return OperationResult.ok(reports)

    @service_operation("approve_expense_report")
    def approve_expense_report(
        self, company_id: UUID, report_id: UUID, approved_by: str,
    ) -> OperationResult[ExpenseReport]:
        report = self._get_owned(company_id, OwnedKind.EXPENSE_REPORT, report_id)
        return self._transition_report(
            report, "approve",
            {"approved_by": require_text(approved_by, "approved_by")},
            stamp={"approval_date": self._clock.today()},
        )

    @service_operation("reject_expense_report")
    def reject_expense_report(
        self, company_id: UUID, report_id: UUID, rejected_by: str,
    ) -> OperationResult[ExpenseReport]:
        report = self._get_owned(company_id, OwnedKind.EXPENSE_REPORT, report_id)
        return self._transition_report(
            report, "reject",
            {"rejected_by": require_text(rejected_by, "rejected_by")},
            stamp={"rejection_date": self._clock.today()},
        )

    @service_operation("mark_expense_report_reimbursed")
    def mark_expense_report_reimbursed(
        self,
        company_id: UUID,
        report_id: UUID,
        reimbursement_date: date | None = None,
        reimbursement_method: PaymentMethod | None = None,
        reference_number: str | None = None,
    ) -> OperationResult[ExpenseReport]:
        report = self._get_owned(company_id, OwnedKind.EXPENSE_REPORT, report_id)
        if report.status is ExpenseStatus.REIMBURSED:
            reimbursement_date = reimbursement_date or report.reimbursement_date
            reimbursement_method = reimbursement_method or report.reimbursement_method
            reference_number = reference_number or report.reimbursement_reference_number
        return self._transition_report(
            report, "reimburse",
            {
                "reimbursement_date": reimbursement_date or self._clock.today(),
                "reimbursement_method": reimbursement_method,
                "reimbursement_reference_number": reference_number,
            },
        )

    @service_operation("add_expense_to_report")
    def add_expense_to_report(
        self, company_id: UUID, report_id: UUID, expense_id: UUID,
    ) -> OperationResult[ExpenseReport]:
        report = self._get_owned(company_id, OwnedKind.EXPENSE_REPORT, report_id)
        expense = self._get_owned(company_id, OwnedKind.EXPENSE, expense_id)
        if expense_id in report.expense_ids:
            return OperationResult.ok(report)
        updated = replace(
            report,
            expense_ids=report.expense_ids + (expense_id,),
            total_amount=report.total_amount + expense.amount,
        )
        return self._save_report(
            updated, "expense_added_to_report",
            expense_id=str(expense_id), amount=str(expense.amount),
        )

    @service_operation("remove_expense_from_report")
    def remove_expense_from_report(
        self, company_id: UUID, report_id: UUID, expense_id: UUID,
    ) -> OperationResult[ExpenseReport]:
        """
        Take an expense id off the report.

        The expense's current amount is subtracted when the expense still
        exists; a dangling id is removed without touching the total.
        """
        report = self._get_owned(company_id, OwnedKind.EXPENSE_REPORT, report_id)
        if expense_id not in report.expense_ids:
            raise EntityNotFoundError("expense_report.expense_ids", expense_id)
        expense = self._store(CollectionName.COMPANY_EXPENSES).find(expense_id)
        amount = expense.amount if expense is not None else Decimal("0")
        updated = replace(
            report,
            expense_ids=tuple(i for i in report.expense_ids if i != expense_id),
            total_amount=report.total_amount - amount,
        )
        return self._save_report(
            updated, "expense_removed_from_report",
            expense_id=str(expense_id), amount=str(amount),
        )

    @service_operation("reconcile_expense_report_total")
    def reconcile_expense_report_total(
        self, company_id: UUID, report_id: UUID,
    ) -> OperationResult[ReportDrift]:
        """
        Recompute a report's total from the expenses it references.

        Returns the drift found.  When the recorded total differs it is
        replaced by the computed one and saved.
        """
        report = self._get_owned(company_id, OwnedKind.EXPENSE_REPORT, report_id)
        expenses = self._store(CollectionName.COMPANY_EXPENSES)
        found = {i: e for i in report.expense_ids if (e := expenses.find(i)) is not None}
        drift = report_total_drift(
            recorded_total=report.total_amount,
            expense_ids=report.expense_ids,
            expenses=found,
        )
        if drift.is_consistent:
            return OperationResult.ok(drift)
        logger.warning(
            "expense_report_total_drift",
            extra={
                "report_id": str(report.id),
                "recorded_total": str(drift.recorded_total),
                "computed_total": str(drift.computed_total),
                "missing_ids": [str(i) for i in drift.missing_ids],
            },
        )
        result = self._save_report(
            replace(report, total_amount=drift.computed_total),
            "expense_report_total_reconciled",
        )
        return replace(result, value=drift)

    # -------------------------------------------------------------------------
    # Workflow plumbing
    # -------------------------------------------------------------------------

    def _transition(
        self,
        workflow: Workflow,
        entity_type: str,
        record: Any,
        action: str,
        data: dict[str, Any],
    ) -> Any | None:
        """
        Run ``action`` on ``record``.

        Returns the record with its new status and ``data`` applied, or
        None when the action was already applied with the same ``data``.
        """
        new_state, already_applied = self._run_transition(
            workflow, entity_type, record.id, record.status.value, action,
        )
        if already_applied:
            if all(getattr(record, k) == v for k, v in data.items()):
                return None
            raise ValidationFailedError(
                f"{entity_type} {record.id} is already '{record.status.value}' "
                f"with different details",
                field=next(k for k, v in data.items() if getattr(record, k) != v),
            )
        return replace(record, status=ExpenseStatus(new_state), **data)

    def _transition_expense(
        self, expense: CompanyExpense, action: str, data: dict[str, Any],
    ) -> OperationResult[CompanyExpense]:
        updated = self._transition(EXPENSE_WORKFLOW, "company_expense", expense, action, data)
        if updated is None:
            return OperationResult.ok(expense)
        return self._save_expense(
            updated, f"expense_{updated.status.value.lower()}",
            from_status=expense.status.value, to_status=updated.status.value,
        )

    def _transition_report(
        self,
        report: ExpenseReport,
        action: str,
        data: dict[str, Any],
        stamp: dict[str, Any] | None = None,
    ) -> OperationResult[ExpenseReport]:
        updated = self._transition(EXPENSE_REPORT_WORKFLOW, "expense_report", report, action, data)
        if updated is None:
            return OperationResult.ok(report)
        if stamp:
            updated = replace(updated, **stamp)
        return self._save_report(
            updated, f"expense_report_{updated.status.value.lower()}",
            from_status=report.status.value, to_status=updated.status.value,
        )

    def _save_expense(self, expense: CompanyExpense, event: str, **log_fields: Any) -> OperationResult:
        self._store(CollectionName.COMPANY_EXPENSES).update(expense)
        logger.info(event, extra={"expense_id": str(expense.id), **log_fields})
        return self._commit(OperationResult.ok(expense), CollectionName.COMPANY_EXPENSES)

    def _save_report(self, report: ExpenseReport, event: str, **log_fields: Any) -> OperationResult:
        self._store(CollectionName.EXPENSE_REPORTS).update(report)
        logger.info(event, extra={"report_id": str(report.id), **log_fields})
        return self._commit(OperationResult.ok(report), CollectionName.EXPENSE_REPORTS)
