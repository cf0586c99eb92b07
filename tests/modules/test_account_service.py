"""
Tests for PersonalAccountService.
"""

from datetime import timedelta
from decimal import Decimal
from uuid import uuid4

import pytest

from bookkeeping_kernel.domain.results import OperationStatus
from bookkeeping_modules.account import TransactionStatus, TransactionType


@pytest.fixture
def add_txn(ledger, today):
    def _add(amount="100", day=None, type=TransactionType.EXPENSE_PAYMENT):
        return ledger.account.add_transaction(
            amount=amount, date=day or today, description="spent", type=type,
        ).unwrap()

    return _add


class TestAccount:

    def test_bootstrap_creates_single_account(self, ledger, settings):
        account = ledger.account.get_account().unwrap()
        assert account.owner_name == settings.default_account_owner

        again = ledger.account.ensure_account("Someone else").unwrap()
        assert again.id == account.id
        assert again.owner_name == settings.default_account_owner

    def test_add_transaction_appends(self, ledger, add_txn):
        txn = add_txn("250.75")

        account = ledger.account.get_account().value
        assert account.transactions[-1] == txn
        assert txn.status is TransactionStatus.PENDING

    def test_negative_amount_is_allowed(self, add_txn):
        txn = add_txn("-40", type=TransactionType.COMPANY_REIMBURSEMENT)
        assert txn.amount == Decimal("-40")

    def test_float_amount_is_refused(self, ledger, today):
        result = ledger.account.add_transaction(
            amount=1.5, date=today, description="x", type=TransactionType.OTHER,
        )
        assert result.status is OperationStatus.VALIDATION_FAILED

    def test_mutation_moves_last_updated(self, ledger, add_txn, deterministic_clock):
        before = ledger.account.get_account().value.last_updated
        deterministic_clock.advance(3600)
        add_txn()

        assert ledger.account.get_account().value.last_updated > before


class TestTransactionStatus:

    def test_reimburse_defaults_to_today(self, ledger, add_txn, today):
        txn = add_txn()
        updated = ledger.account.update_transaction_status(txn.id, TransactionStatus.REIMBURSED).unwrap()

        assert updated.status is TransactionStatus.REIMBURSED
        assert updated.reimbursement_date == today

    def test_repeat_reimbursement_is_idempotent(self, ledger, add_txn, today):
        txn = add_txn()
        ledger.account.update_transaction_status(txn.id, TransactionStatus.REIMBURSED, today)
        ledger.gateway.save_log.clear()

        assert ledger.account.update_transaction_status(txn.id, TransactionStatus.REIMBURSED).is_success
        assert ledger.account.update_transaction_status(
            txn.id, TransactionStatus.REIMBURSED, today,
        ).is_success
        assert ledger.gateway.save_log == []

    def test_repeat_with_other_date_conflicts(self, ledger, add_txn, today):
        txn = add_txn()
        ledger.account.update_transaction_status(txn.id, TransactionStatus.REIMBURSED, today)

        result = ledger.account.update_transaction_status(
            txn.id, TransactionStatus.REIMBURSED, today + timedelta(days=3),
        )
        assert result.status is OperationStatus.VALIDATION_FAILED

    def test_back_to_pending_is_refused(self, ledger, add_txn):
        txn = add_txn()
        result = ledger.account.update_transaction_status(txn.id, TransactionStatus.PENDING)
        assert result.status is OperationStatus.VALIDATION_FAILED

    def test_cancel_then_reimburse_is_illegal(self, ledger, add_txn):
        txn = add_txn()
        cancelled = ledger.account.update_transaction_status(txn.id, TransactionStatus.CANCELLED)
        assert cancelled.value.reimbursement_date is None

        result = ledger.account.update_transaction_status(txn.id, TransactionStatus.REIMBURSED)
        assert result.error_code == "INVALID_TRANSITION"

    def test_unknown_transaction(self, ledger):
        result = ledger.account.update_transaction_status(uuid4(), TransactionStatus.CANCELLED)
        assert result.status is OperationStatus.NOT_FOUND


class TestStatementAndTotals:

    def test_statement_window(self, ledger, add_txn, today):
        old = add_txn("10", today - timedelta(days=40))
        recent = add_txn("20", today - timedelta(days=5))
        newest = add_txn("30", today)

        window = ledger.account.get_statement(today - timedelta(days=30), today).value
        assert window == [newest, recent]
        assert ledger.account.get_statement().value == [newest, recent, old]

    def test_inverted_statement_range(self, ledger, today):
        result = ledger.account.get_statement(today, today - timedelta(days=1))
        assert result.status is OperationStatus.VALIDATION_FAILED

    def test_totals(self, ledger, add_txn):
        first = add_txn("100")
        add_txn("60")
        add_txn("-30", type=TransactionType.COMPANY_REIMBURSEMENT)
        ledger.account.update_transaction_status(first.id, TransactionStatus.REIMBURSED)

        totals = ledger.account.totals().value
        assert totals.pending == Decimal("30")
        assert totals.reimbursed == Decimal("100")
        assert totals.net_balance == Decimal("130")
