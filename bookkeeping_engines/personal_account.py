"""
Module: bookkeeping_engines.personal_account
Responsibility:
    Totals and statements for the owner's personal-funds account.

Architecture position:
    Engines -- pure calculation layer, zero I/O.

Invariants enforced:
    - Sign convention: a positive amount was spent on the company's
      behalf; a negative amount is a reimbursement received.  The owner is
      owed money while the net balance is positive.
    - Statements are inclusive on both optional bounds and sorted by date,
      newest first.  Same-day transactions keep their recorded order.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Iterable, Protocol, TypeVar

from bookkeeping_kernel.domain.values import sum_amounts


class AccountEntry(Protocol):
    @property
    def date(self) -> date: ...

    @property
    def amount(self) -> Decimal: ...

    @property
    def is_pending(self) -> bool: ...

    @property
    def is_reimbursed(self) -> bool: ...


T = TypeVar("T", bound=AccountEntry)


@dataclass(frozen=True)
class AccountTotals:
    pending: Decimal
    reimbursed: Decimal
    net_balance: Decimal


def account_totals(transactions: Iterable[AccountEntry]) -> AccountTotals:
    transactions = list(transactions)
    return AccountTotals(
        pending=sum_amounts(t.amount for t in transactions if t.is_pending),
        reimbursed=sum_amounts(t.amount for t in transactions if t.is_reimbursed),
        net_balance=sum_amounts(t.amount for t in transactions),
    )


def statement(
    transactions: Iterable[T],
    start: date | None = None,
    end: date | None = None,
) -> list[T]:
    if start is not None and end is not None and start > end:
        raise ValueError(f"Statement start {start} is after end {end}")
    selected = [
        t for t in transactions
        if (start is None or t.date >= start) and (end is None or t.date <= end)
    ]
    return sorted(selected, key=lambda t: t.date, reverse=True)
