"""
Module: bookkeeping_engines.receivables
Responsibility:
    Client-side arithmetic: what a project has been paid, what remains on
    its contract, client-level totals, and which project payments fall in
    a statement period.

Architecture position:
    Engines -- pure calculation layer, zero I/O.

Invariants enforced:
    - ``balance = contract - sum(payments)``.  Overpayment gives a negative
      balance; nothing is clamped.
    - Statement sections skip projects with no payment in the period and
      keep the project order and payment order of the input.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Generic, Iterable, Protocol, Sequence, TypeVar

from bookkeeping_engines.tracer import traced_engine
from bookkeeping_kernel.domain.values import DatePeriod, sum_amounts


class Payment(Protocol):
    @property
    def date(self) -> date: ...

    @property
    def amount(self) -> Decimal: ...


class ContractedProject(Protocol):
    @property
    def contract_amount(self) -> Decimal: ...

    @property
    def payments(self) -> Sequence[Payment]: ...


PR = TypeVar("PR", bound=ContractedProject)


def project_total_paid(project: ContractedProject) -> Decimal:
    return sum_amounts(p.amount for p in project.payments)


def project_balance(project: ContractedProject) -> Decimal:
    return project.contract_amount - project_total_paid(project)


@dataclass(frozen=True)
class ClientTotals:
    contract_total: Decimal
    paid_total: Decimal

    @property
    def balance(self) -> Decimal:
        return self.contract_total - self.paid_total


def client_totals(projects: Iterable[ContractedProject]) -> ClientTotals:
    projects = list(projects)
    return ClientTotals(
        contract_total=sum_amounts(p.contract_amount for p in projects),
        paid_total=sum_amounts(project_total_paid(p) for p in projects),
    )


@dataclass(frozen=True)
class StatementSection(Generic[PR]):
    """One project and the payments it received inside a statement period."""

    project: PR
    payments: tuple[Payment, ...]

    @property
    def paid_amount(self) -> Decimal:
        return sum_amounts(p.amount for p in self.payments)


@traced_engine("receivables", "1.0", fingerprint_fields=("period",))
def statement_sections(*, projects: Iterable[PR], period: DatePeriod) -> list[StatementSection[PR]]:
    """Projects with at least one payment dated inside ``period`` (inclusive)."""
    sections: list[StatementSection[PR]] = []
    for project in projects:
        in_period = tuple(p for p in project.payments if period.contains(p.date))
        if in_period:
            sections.append(StatementSection(project=project, payments=in_period))
    return sections
