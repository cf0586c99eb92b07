"""
Tests for PersonalFundsLinker composite flows.

Covers:
- Expense paid from personal funds -> expense + pending transaction
- Salary payment and salary slip flows
- Partial outcomes when a later step fails
- Reimbursements booked as negative amounts
"""

from datetime import timedelta
from decimal import Decimal
from uuid import uuid4

import pytest

from bookkeeping_kernel.domain.results import OperationStatus
from bookkeeping_kernel.domain.values import PaymentMethod
from bookkeeping_modules.account import TransactionStatus, TransactionType
from bookkeeping_modules.expense import ExpenseCategory
from bookkeeping_services.personal_funds import SALARY_EXPENSE_TITLE


def _transactions(ledger):
    return ledger.account.get_account().value.transactions


class TestExpenseWithPersonalFunds:

    def test_links_expense_and_transaction(self, ledger, company_id, today):
        result = ledger.personal_funds.add_expense_with_personal_funds(
            company_id, title="Printer", amount="200", category=ExpenseCategory.EQUIPMENT,
            date=today, paid_by="Owner", payment_method=PaymentMethod.CREDIT_CARD,
            paid_from_personal_funds=True,
        )

        assert result.is_durable
        outcome = result.value
        assert outcome.failed_step is None
        assert outcome.transaction.related_expense_id == outcome.expense.id
        assert outcome.transaction.amount == Decimal("200")
        assert outcome.transaction.status is TransactionStatus.PENDING
        assert outcome.transaction.type is TransactionType.EXPENSE_PAYMENT
        assert _transactions(ledger) == (outcome.transaction,)
        assert ledger.expenses.list_expenses(company_id).value == [outcome.expense]

    def test_without_personal_funds_no_transaction(self, ledger, company_id, today):
        outcome = ledger.personal_funds.add_expense_with_personal_funds(
            company_id, title="Printer", amount="200", category=ExpenseCategory.EQUIPMENT,
            date=today, paid_by="Company", payment_method=PaymentMethod.BANK_TRANSFER,
        ).unwrap()

        assert outcome.transaction is None
        assert _transactions(ledger) == ()

    def test_failed_expense_creates_nothing(self, ledger, company_id, today):
        result = ledger.personal_funds.add_expense_with_personal_funds(
            company_id, title="", amount="200", category=ExpenseCategory.EQUIPMENT,
            date=today, paid_by="Owner", payment_method=PaymentMethod.CASH,
            paid_from_personal_funds=True,
        )

        assert result.status is OperationStatus.VALIDATION_FAILED
        assert result.value.failed_step == "expense"
        assert _transactions(ledger) == ()


class TestSalaryPaymentFlow:

    def test_salary_payment_paid_personally(self, ledger, company_id, employee, today):
        result = ledger.personal_funds.add_salary_payment_with_account_tracking(
            company_id, employee.id, amount="3000", date=today,
            period_start=today - timedelta(days=30), period_end=today,
            bonuses="200", deductions="50", paid_from_personal_funds=True,
        )

        outcome = result.unwrap()
        assert outcome.salary_payment.amount == Decimal("3000")
        assert outcome.expense.title == SALARY_EXPENSE_TITLE
        assert outcome.expense.amount == Decimal("3150")
        assert outcome.expense.paid_by_employee_id == employee.id
        assert outcome.transaction.amount == Decimal("3150")
        assert outcome.transaction.related_employee_id == employee.id
        assert outcome.transaction.type is TransactionType.SALARY_PAYMENT

    def test_unknown_employee_fails_first_step(self, ledger, company_id, today):
        result = ledger.personal_funds.add_salary_payment_with_account_tracking(
            company_id, uuid4(), amount="3000", date=today,
            period_start=today - timedelta(days=30), period_end=today,
        )

        assert result.status is OperationStatus.NOT_FOUND
        assert result.value.failed_step == "employee_lookup"
        assert ledger.expenses.list_expenses(company_id).value == []

    def test_later_failure_keeps_earlier_records(self, ledger, company_id, employee, today):
        # A negative total refuses the expense after the payment is stored.
        result = ledger.personal_funds.add_salary_payment_with_account_tracking(
            company_id, employee.id, amount="100", date=today,
            period_start=today - timedelta(days=30), period_end=today,
            deductions="500", paid_from_personal_funds=True,
        )

        assert result.status is OperationStatus.VALIDATION_FAILED
        assert result.value.failed_step == "expense"
        assert result.value.salary_payment is not None
        stored = ledger.employees.get_employee(company_id, employee.id).value
        assert stored.salary_history == (result.value.salary_payment,)
        assert _transactions(ledger) == ()


class TestSalarySlipFlow:

    def test_slip_without_payment_date_books_nothing(self, ledger, company_id, employee, today):
        outcome = ledger.personal_funds.generate_salary_slip_with_account_tracking(
            company_id, employee.id, today - timedelta(days=30), today,
            paid_from_personal_funds=True,
        ).unwrap()

        assert outcome.salary_slip is not None
        assert outcome.expense is None
        assert outcome.transaction is None

    def test_slip_with_payment_books_net_salary(self, ledger, company_id, employee, today):
        ledger.employees.add_salary_advance(company_id, employee.id, amount="500", date=today)

        outcome = ledger.personal_funds.generate_salary_slip_with_account_tracking(
            company_id, employee.id, today - timedelta(days=30), today,
            payment_date=today, paid_from_personal_funds=True,
        ).unwrap()

        assert outcome.salary_slip.net_salary == Decimal("2500")
        assert outcome.expense.amount == Decimal("2500")
        assert outcome.transaction.related_expense_id == outcome.expense.id
        assert outcome.transaction.notes.startswith("Salary period:")


class TestReimbursement:

    def test_reimbursement_is_negative(self, ledger, today):
        txn = ledger.personal_funds.record_reimbursement_to_personal_account(amount="150").unwrap()

        assert txn.amount == Decimal("-150")
        assert txn.date == today
        assert txn.type is TransactionType.COMPANY_REIMBURSEMENT

    @pytest.mark.parametrize("amount", ["0", "-5"])
    def test_non_positive_amount_is_refused(self, ledger, amount):
        result = ledger.personal_funds.record_reimbursement_to_personal_account(amount=amount)
        assert result.status is OperationStatus.VALIDATION_FAILED

    def test_net_balance_after_reimbursement(self, ledger, company_id, today):
        ledger.personal_funds.add_expense_with_personal_funds(
            company_id, title="Fuel", amount="80", category=ExpenseCategory.TRANSPORTATION,
            date=today, paid_by="Owner", payment_method=PaymentMethod.CASH,
            paid_from_personal_funds=True,
        )
        ledger.personal_funds.record_reimbursement_to_personal_account(amount="50")

        assert ledger.account.totals().value.net_balance == Decimal("30")


class TestPersistenceFailures:

    def test_step_persistence_errors_are_reported(self, ledger, company_id, today):
        ledger.gateway.fail_saves = True

        result = ledger.personal_funds.add_expense_with_personal_funds(
            company_id, title="Fuel", amount="80", category=ExpenseCategory.TRANSPORTATION,
            date=today, paid_by="Owner", payment_method=PaymentMethod.CASH,
            paid_from_personal_funds=True,
        )

        assert result.is_success
        assert not result.is_durable
        assert result.value.transaction is not None
