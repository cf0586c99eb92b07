"""
Tests for ExpenseService.

Covers:
- Expense CRUD and the approval workflow
- Idempotent repeats and conflicting repeats
- Expense reports: creation, membership, running total, reconciliation
"""

from datetime import timedelta
from decimal import Decimal
from uuid import uuid4

import pytest

from bookkeeping_kernel.domain.results import OperationStatus
from bookkeeping_kernel.domain.values import DatePeriod, PaymentMethod
from bookkeeping_kernel.store.collections import CollectionName
from bookkeeping_modules.expense import ExpenseCategory, ExpenseStatus


@pytest.fixture
def make_expense(ledger, company_id, today):
    def _make(amount="100", **kwargs):
        return ledger.expenses.create_expense(
            company_id,
            title=kwargs.pop("title", "Taxi"),
            amount=amount,
            category=kwargs.pop("category", ExpenseCategory.TRANSPORTATION),
            date=kwargs.pop("date", today),
            paid_by=kwargs.pop("paid_by", "Owner"),
            **kwargs,
        ).unwrap()

    return _make


@pytest.fixture
def report(ledger, company_id, employee, make_expense, today):
    first, second = make_expense("100"), make_expense("50.25")
    return ledger.expenses.create_expense_report(
        company_id,
        title="January trip",
        period_start=today - timedelta(days=30),
        period_end=today,
        employee_id=employee.id,
        expense_ids=[first.id, second.id, first.id],
    ).unwrap()


# =============================================================================
# Expenses
# =============================================================================


class TestExpenseCrud:

    def test_create_defaults(self, make_expense, ledger, company_id):
        expense = make_expense()

        assert expense.status is ExpenseStatus.PENDING
        assert expense.payment_method is PaymentMethod.CASH
        assert ledger.companies.get_company(company_id).value.expense_ids == (expense.id,)

    def test_paid_by_employee_must_belong_to_company(self, ledger, company_id, second_company_id, today):
        outsider = ledger.employees.create_employee(
            second_company_id, name="Out", position="X", monthly_salary="1", join_date=today,
        ).unwrap()

        result = ledger.expenses.create_expense(
            company_id, title="T", amount="1", category=ExpenseCategory.OTHER, date=today,
            paid_by="Out", paid_by_employee_id=outsider.id,
        )
        assert result.status is OperationStatus.NOT_FOUND

    def test_update_and_filtered_list(self, ledger, company_id, make_expense):
        expense = make_expense()
        make_expense()
        ledger.expenses.update_expense(company_id, expense.id, notes="receipt lost")
        ledger.expenses.approve_expense(company_id, expense.id, "Boss")

        approved = ledger.expenses.list_expenses(company_id, ExpenseStatus.APPROVED).value
        assert [e.id for e in approved] == [expense.id]
        assert approved[0].notes == "receipt lost"
        assert len(ledger.expenses.list_expenses(company_id).value) == 2

    def test_category_totals(self, ledger, company_id, make_expense):
        make_expense("40")
        meal = make_expense("12.50", category=ExpenseCategory.MEALS)
        make_expense("10")
        ledger.expenses.approve_expense(company_id, meal.id, "Boss")

        totals = ledger.expenses.expense_category_totals(company_id).unwrap()
        assert totals == {
            ExpenseCategory.TRANSPORTATION: Decimal("50"),
            ExpenseCategory.MEALS: Decimal("12.50"),
        }
        assert list(totals) == [ExpenseCategory.TRANSPORTATION, ExpenseCategory.MEALS]

        approved = ledger.expenses.expense_category_totals(company_id, ExpenseStatus.APPROVED)
        assert approved.value == {ExpenseCategory.MEALS: Decimal("12.50")}

    def test_category_totals_for_unknown_company(self, ledger):
        result = ledger.expenses.expense_category_totals(uuid4())
        assert result.status is OperationStatus.NOT_FOUND

    def test_status_is_not_editable(self, ledger, company_id, make_expense):
        expense = make_expense()
        result = ledger.expenses.update_expense(company_id, expense.id, status=ExpenseStatus.REIMBURSED)
        assert result.status is OperationStatus.VALIDATION_FAILED

    def test_delete_expense(self, ledger, company_id, make_expense):
        expense = make_expense()
        assert ledger.expenses.delete_expense(company_id, expense.id).is_success
        assert ledger.expenses.get_expense(company_id, expense.id).status is OperationStatus.NOT_FOUND


class TestExpenseWorkflow:

    def test_approve_then_reimburse(self, ledger, company_id, make_expense, today):
        expense = make_expense()

        approved = ledger.expenses.approve_expense(company_id, expense.id, "Boss").unwrap()
        assert approved.status is ExpenseStatus.APPROVED
        assert approved.approved_by == "Boss"

        reimbursed = ledger.expenses.mark_expense_reimbursed(company_id, expense.id).unwrap()
        assert reimbursed.status is ExpenseStatus.REIMBURSED
        assert reimbursed.reimbursement_date == today

    def test_reject_records_rejecter(self, ledger, company_id, make_expense):
        expense = make_expense()
        rejected = ledger.expenses.reject_expense(company_id, expense.id, "Auditor").unwrap()

        assert rejected.status is ExpenseStatus.REJECTED
        assert rejected.rejected_by == "Auditor"

    def test_report_decisions_leave_its_expenses_alone(self, ledger, company_id, report):
        ledger.expenses.approve_expense_report(company_id, report.id, "Boss").unwrap()
        ledger.expenses.mark_expense_report_reimbursed(company_id, report.id).unwrap()

        for expense_id in report.expense_ids:
            expense = ledger.expenses.get_expense(company_id, expense_id).unwrap()
            assert expense.status is ExpenseStatus.PENDING
            assert expense.approved_by is None
            assert expense.reimbursement_date is None
        assert rejected.approved_by is None

    def test_pending_cannot_be_reimbursed(self, ledger, company_id, make_expense):
        expense = make_expense()
        result = ledger.expenses.mark_expense_reimbursed(company_id, expense.id)

        assert result.status is OperationStatus.VALIDATION_FAILED
        assert result.error_code == "INVALID_TRANSITION"

    def test_rejected_is_terminal(self, ledger, company_id, make_expense):
        expense = make_expense()
        ledger.expenses.reject_expense(company_id, expense.id, "Auditor")

        assert ledger.expenses.approve_expense(company_id, expense.id, "Boss").error_code == "INVALID_TRANSITION"

    def test_approved_cannot_be_rejected(self, ledger, company_id, make_expense):
        expense = make_expense()
        ledger.expenses.approve_expense(company_id, expense.id, "Boss")

        result = ledger.expenses.reject_expense(company_id, expense.id, "Auditor")
        assert result.status is OperationStatus.VALIDATION_FAILED

    def test_repeat_approval_by_same_person_is_a_no_op(self, ledger, company_id, make_expense):
        expense = make_expense()
        ledger.expenses.approve_expense(company_id, expense.id, "Boss")
        ledger.gateway.save_log.clear()

        assert ledger.expenses.approve_expense(company_id, expense.id, "Boss").is_success
        assert ledger.gateway.save_log == []

    def test_repeat_approval_by_someone_else_conflicts(self, ledger, company_id, make_expense):
        expense = make_expense()
        ledger.expenses.approve_expense(company_id, expense.id, "Boss")

        result = ledger.expenses.approve_expense(company_id, expense.id, "Other")
        assert result.status is OperationStatus.VALIDATION_FAILED
        assert ledger.expenses.get_expense(company_id, expense.id).value.approved_by == "Boss"

    def test_repeat_reimbursement(self, ledger, company_id, make_expense, today):
        expense = make_expense()
        ledger.expenses.approve_expense(company_id, expense.id, "Boss")
        ledger.expenses.mark_expense_reimbursed(company_id, expense.id, today)

        assert ledger.expenses.mark_expense_reimbursed(company_id, expense.id).is_success
        assert ledger.expenses.mark_expense_reimbursed(company_id, expense.id, today).is_success
        conflict = ledger.expenses.mark_expense_reimbursed(
            company_id, expense.id, today + timedelta(days=1),
        )
        assert conflict.status is OperationStatus.VALIDATION_FAILED

    def test_other_company_cannot_approve(self, ledger, second_company_id, make_expense):
        expense = make_expense()
        result = ledger.expenses.approve_expense(second_company_id, expense.id, "Boss")
        assert result.status is OperationStatus.NOT_FOUND


# =============================================================================
# Expense reports
# =============================================================================


class TestExpenseReports:

    def test_create_dedupes_and_totals(self, report, employee, today):
        assert len(report.expense_ids) == 2
        assert report.total_amount == Decimal("150.25")
        assert report.employee_name == employee.name
        assert report.submission_date == today
        assert report.status is ExpenseStatus.PENDING

    def test_unknown_expense_id_is_refused(self, ledger, company_id, employee, today):
        result = ledger.expenses.create_expense_report(
            company_id, title="T", period_start=today, period_end=today,
            employee_id=employee.id, expense_ids=[uuid4()],
        )

        assert result.status is OperationStatus.NOT_FOUND
        assert len(ledger.collections.store(CollectionName.EXPENSE_REPORTS)) == 0

    def test_add_expense_updates_total(self, ledger, company_id, report, make_expense):
        extra = make_expense("10")
        updated = ledger.expenses.add_expense_to_report(company_id, report.id, extra.id).unwrap()

        assert updated.expense_ids[-1] == extra.id
        assert updated.total_amount == Decimal("160.25")

    def test_add_existing_expense_is_a_no_op(self, ledger, company_id, report):
        again = ledger.expenses.add_expense_to_report(company_id, report.id, report.expense_ids[0]).unwrap()
        assert again == report

    def test_remove_expense(self, ledger, company_id, report):
        updated = ledger.expenses.remove_expense_from_report(
            company_id, report.id, report.expense_ids[0],
        ).unwrap()

        assert updated.total_amount == Decimal("50.25")
        assert len(updated.expense_ids) == 1

    def test_remove_absent_expense_is_not_found(self, ledger, company_id, report):
        result = ledger.expenses.remove_expense_from_report(company_id, report.id, uuid4())
        assert result.status is OperationStatus.NOT_FOUND

    def test_update_report_period(self, ledger, company_id, report, today):
        period = DatePeriod(today - timedelta(days=7), today)
        assert ledger.expenses.update_expense_report(company_id, report.id, period=period).value.period == period

    def test_list_reports_by_employee(self, ledger, company_id, report, employee):
        assert ledger.expenses.list_expense_reports(company_id, employee.id).value == [report]
        assert ledger.expenses.list_expense_reports(company_id, uuid4()).value == []

    def test_report_workflow_stamps_dates(self, ledger, company_id, report, today):
        approved = ledger.expenses.approve_expense_report(company_id, report.id, "Boss").unwrap()
        assert approved.approval_date == today

        reimbursed = ledger.expenses.mark_expense_report_reimbursed(
            company_id, report.id, reimbursement_method=PaymentMethod.BANK_TRANSFER,
            reference_number="TX-1",
        ).unwrap()
        assert reimbursed.status is ExpenseStatus.REIMBURSED
        assert reimbursed.reimbursement_reference_number == "TX-1"

        assert ledger.expenses.mark_expense_report_reimbursed(company_id, report.id).is_success

    def test_reject_report_stamps_rejection_date(self, ledger, company_id, report, today):
        rejected = ledger.expenses.reject_expense_report(company_id, report.id, "Auditor").unwrap()

        assert rejected.rejection_date == today
        assert rejected.rejected_by == "Auditor"

    def test_delete_report(self, ledger, company_id, report):
        assert ledger.expenses.delete_expense_report(company_id, report.id).is_success
        assert ledger.companies.get_company(company_id).value.expense_report_ids == ()


class TestReportReconciliation:

    def test_consistent_report_is_unchanged(self, ledger, company_id, report):
        drift = ledger.expenses.reconcile_expense_report_total(company_id, report.id).unwrap()
        assert drift.is_consistent

    def test_drift_after_expense_edit_is_corrected(self, ledger, company_id, report, captured_logs):
        ledger.expenses.update_expense(company_id, report.expense_ids[0], amount=Decimal("120"))

        drift = ledger.expenses.reconcile_expense_report_total(company_id, report.id).unwrap()

        assert drift.drift == Decimal("-20")
        stored = ledger.expenses.get_expense_report(company_id, report.id).value
        assert stored.total_amount == Decimal("170.25")
        assert any(r["message"] == "expense_report_total_drift" for r in captured_logs())

    def test_deleted_expense_is_reported_missing(self, ledger, company_id, report):
        gone = report.expense_ids[1]
        ledger.expenses.delete_expense(company_id, gone)

        drift = ledger.expenses.reconcile_expense_report_total(company_id, report.id).unwrap()

        assert drift.missing_ids == (gone,)
        assert ledger.expenses.get_expense_report(company_id, report.id).value.total_amount == Decimal("100")
