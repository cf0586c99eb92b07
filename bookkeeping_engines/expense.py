"""
Module: bookkeeping_engines.expense
Responsibility:
    Expense report totals.  A report keeps a running total that is
    adjusted as expenses are added or removed; this engine computes the
    true sum from the referenced expenses and the drift between the two.

Architecture position:
    Engines -- pure calculation layer, zero I/O.

Invariants enforced:
    - Identifiers with no matching expense contribute nothing to the
      computed total and are reported as missing.
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from decimal import Decimal
from typing import Hashable, Iterable, Mapping, Protocol
from uuid import UUID

from bookkeeping_engines.tracer import traced_engine
from bookkeeping_kernel.domain.values import sum_amounts


class Amounted(Protocol):
    @property
    def amount(self) -> Decimal: ...


class Categorized(Amounted, Protocol):
    @property
    def category(self) -> Hashable: ...


def expense_report_total(
    expense_ids: Iterable[UUID],
    expenses: Mapping[UUID, Amounted],
) -> Decimal:
    return sum_amounts(expenses[i].amount for i in expense_ids if i in expenses)


@dataclass(frozen=True)
class ReportDrift:
    recorded_total: Decimal
    computed_total: Decimal
    missing_ids: tuple[UUID, ...] = ()

    @property
    def drift(self) -> Decimal:
        return self.recorded_total - self.computed_total

    @property
    def is_consistent(self) -> bool:
        return self.drift == 0


@traced_engine("expense", "1.0", fingerprint_fields=("recorded_total", "expense_ids"))
def report_total_drift(
    *,
    recorded_total: Decimal,
    expense_ids: Iterable[UUID],
    expenses: Mapping[UUID, Amounted],
) -> ReportDrift:
    expense_ids = tuple(expense_ids)
    return ReportDrift(
        recorded_total=recorded_total,
        computed_total=expense_report_total(expense_ids, expenses),
        missing_ids=tuple(i for i in expense_ids if i not in expenses),
    )


def category_totals(expenses: Iterable[Categorized]) -> dict[Hashable, Decimal]:
    """Sum of amounts per category, in first-seen category order."""
    totals: dict[Hashable, Decimal] = defaultdict(Decimal)
    for e in expenses:
        totals[e.category] += e.amount
    return dict(totals)
