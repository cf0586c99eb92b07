"""
Personal Account Service (``bookkeeping_modules.account.service``).

Responsibility
--------------
The single personal-funds account: appending transactions, moving a
transaction to reimbursed or cancelled, statements over a date range and
the pending / reimbursed / net totals.

Architecture position
---------------------
**Modules layer**.  Owns the account-balance collection.  Not
tenant-scoped: the account belongs to the owner, not to a company.

Invariants enforced
-------------------
* Transactions are only appended; an existing one changes only its
  status (and reimbursement date) through the workflow.
* ``last_updated`` moves on every mutation.
* Amounts are signed and may be negative (reimbursements received).

Failure modes
-------------
* NOT_FOUND when no account exists yet or the transaction id is unknown.
* VALIDATION_FAILED for asking to move a transaction back to pending,
  illegal transitions, an inverted statement range, or a repeat with a
  different reimbursement date.
"""

from __future__ import annotations

from dataclasses import replace
from datetime import date
from decimal import Decimal
from uuid import UUID, uuid4

from bookkeeping_engines.personal_account import AccountTotals, account_totals, statement
from bookkeeping_kernel.domain.results import OperationResult
from bookkeeping_kernel.domain.values import PaymentMethod
from bookkeeping_kernel.exceptions import EntityNotFoundError, ValidationFailedError
from bookkeeping_kernel.logging_config import get_logger
from bookkeeping_kernel.store.collections import CollectionName
from bookkeeping_modules._service_helpers import (
    ModuleService,
    find_by_id,
    replace_by_id,
    require_amount,
    require_text,
    service_operation,
)
from bookkeeping_modules.account.models import (
    AccountBalance,
    AccountTransaction,
    TransactionStatus,
    TransactionType,
)
from bookkeeping_modules.account.workflows import ACCOUNT_TRANSACTION_WORKFLOW, ACTION_FOR_STATUS

logger = get_logger("modules.account.service")


class PersonalAccountService(ModuleService):
    """Operations on the owner's personal-funds account."""

    def _account(self) -> AccountBalance:
        accounts = self._store(CollectionName.ACCOUNT_BALANCE).list()
        if not accounts:
            raise EntityNotFoundError(CollectionName.ACCOUNT_BALANCE.value, "personal")
        return accounts[0]

    @service_operation("ensure_account")
    def ensure_account(self, owner_name: str) -> OperationResult[AccountBalance]:
        """Return the account, creating it for ``owner_name`` if none exists."""
        accounts = self._store(CollectionName.ACCOUNT_BALANCE).list()
        if accounts:
            return OperationResult.ok(accounts[0])
        account = AccountBalance(
            id=uuid4(),
            owner_name=require_text(owner_name, "owner_name"),
            last_updated=self._clock.now(),
        )
        self._store(CollectionName.ACCOUNT_BALANCE).create(account)
        logger.info(
            "personal_account_created",
            extra={"account_id": str(account.id), "owner_name": account.owner_name},
        )
        return self._commit(OperationResult.ok(account), CollectionName.ACCOUNT_BALANCE)

    @service_operation("get_account")
    def get_account(self) -> OperationResult[AccountBalance]:
        return OperationResult.ok(self._account())

    @service_operation("add_account_transaction")
    def add_transaction(
        self,
        *,
        amount: Decimal,
        date: date,
        description: str,
        type: TransactionType,
        related_expense_id: UUID | None = None,
        related_employee_id: UUID | None = None,
        payment_method: PaymentMethod | None = None,
        reference_number: str | None = None,
        notes: str | None = None,
    ) -> OperationResult[AccountTransaction]:
        account = self._account()
        transaction = AccountTransaction(
            id=uuid4(),
            date=date,
            amount=require_amount(amount, "amount", allow_negative=True),
            description=description,
            type=type,
            related_expense_id=related_expense_id,
            related_employee_id=related_employee_id,
            payment_method=payment_method,
            reference_number=reference_number,
            notes=notes,
        )
        self._save(
            replace(account, transactions=account.transactions + (transaction,)),
        )
        logger.info(
            "account_transaction_added",
            extra={
                "transaction_id": str(transaction.id),
                "amount": str(transaction.amount),
                "transaction_type": transaction.type.value,
                "related_expense_id": str(related_expense_id) if related_expense_id else None,
            },
        )
        return self._commit(OperationResult.ok(transaction), CollectionName.ACCOUNT_BALANCE)

    @service_operation("update_transaction_status")
    def update_transaction_status(
        self,
        transaction_id: UUID,
        status: TransactionStatus,
        reimbursement_date: date | None = None,
    ) -> OperationResult[AccountTransaction]:
        """
        Reimburse or cancel a pending transaction.

        A reimbursement without a date is dated today.  Repeating a
        reimbursement with no date, or with the stored date, changes
        nothing.
        """
        account = self._account()
        transaction = find_by_id(account.transactions, transaction_id, "account_transaction")
        action = ACTION_FOR_STATUS.get(status)
        if action is None:
            raise ValidationFailedError(
                f"A transaction cannot be moved to '{status.value}'", field="status",
            )

        new_state, already_applied = self._run_transition(
            ACCOUNT_TRANSACTION_WORKFLOW,
            "account_transaction",
            transaction.id,
            transaction.status.value,
            action,
        )
        if already_applied:
            if reimbursement_date is None or reimbursement_date == transaction.reimbursement_date:
                return OperationResult.ok(transaction)
            raise ValidationFailedError(
                f"Transaction {transaction_id} is already '{transaction.status.value}' "
                f"with reimbursement date {transaction.reimbursement_date}",
                field="reimbursement_date",
            )

        updated = replace(transaction, status=TransactionStatus(new_state))
        if status is TransactionStatus.REIMBURSED:
            updated = replace(updated, reimbursement_date=reimbursement_date or self._clock.today())
        self._save(
            replace(
                account,
                transactions=replace_by_id(account.transactions, updated, "account_transaction"),
            ),
        )
        logger.info(
            "account_transaction_status_changed",
            extra={
                "transaction_id": str(transaction_id),
                "from_status": transaction.status.value,
                "to_status": updated.status.value,
            },
        )
        return self._commit(OperationResult.ok(updated), CollectionName.ACCOUNT_BALANCE)

    @service_operation("get_account_statement")
    def get_statement(
        self, start_date: date | None = None, end_date: date | None = None,
    ) -> OperationResult[list[AccountTransaction]]:
        """Transactions dated within the (inclusive) bounds, newest first."""
        account = self._account()
        try:
            return OperationResult.ok(statement(account.transactions, start_date, end_date))
        except ValueError as exc:
            raise ValidationFailedError(str(exc), field="start_date") from exc

    @service_operation("account_totals")
    def totals(self) -> OperationResult[AccountTotals]:
        return OperationResult.ok(account_totals(self._account().transactions))

    def _save(self, account: AccountBalance) -> None:
        self._store(CollectionName.ACCOUNT_BALANCE).update(
            replace(account, last_updated=self._clock.now()),
        )
