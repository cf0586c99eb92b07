"""
Module: bookkeeping_engines.payroll
Responsibility:
    Salary arithmetic for employees: prorated salary over a period, the
    advances and payments that fall in a period, the employee's running
    balance, the figures that go on a salary slip, and the leave/duty
    duration helpers.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import bookkeeping_kernel.domain, bookkeeping_kernel.logging_config
    and sibling engine modules.

Invariants enforced:
    - Fixed-length month: ``prorated = monthly * days / proration_days``,
      30 by default.  This is a policy convention, not a calendar-accurate
      figure.
    - Period filters on ``date`` are inclusive on both ends.
    - Slip bonuses/deductions only come from salary-history entries whose
      own period lies fully inside the slip period (not mere overlap).
    - Decimal-only arithmetic; no rounding is applied here.
    - Purity: no clock access.  ``as_of`` is always passed in.

Failure modes:
    - ValueError from DatePeriod when a period is inverted.

Usage:
    from bookkeeping_engines.payroll import prorated_salary
    from bookkeeping_kernel.domain.values import DatePeriod

    prorated_salary(
        monthly_salary=Decimal("3000"),
        period=DatePeriod(date(2024, 1, 1), date(2024, 1, 31)),
    )  # Decimal("3000")
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Iterable, Protocol, Sequence, TypeVar

from bookkeeping_engines.tracer import traced_engine
from bookkeeping_kernel.domain.values import ZERO, DatePeriod, sum_amounts

SALARY_PRORATION_DAYS = 30


class DatedAmount(Protocol):
    @property
    def date(self) -> date: ...

    @property
    def amount(self) -> Decimal: ...


class PeriodPayment(DatedAmount, Protocol):
    """A salary payment covering its own sub-period."""

    @property
    def period_start(self) -> date: ...

    @property
    def period_end(self) -> date: ...

    @property
    def bonuses(self) -> Decimal: ...

    @property
    def deductions(self) -> Decimal: ...

    @property
    def payment_method(self) -> object: ...

    @property
    def processed_by(self) -> str: ...


class Span(Protocol):
    @property
    def start_date(self) -> date: ...

    @property
    def end_date(self) -> date: ...


class LeaveSpan(Span, Protocol):
    @property
    def is_paid(self) -> bool: ...


class DutySpan(Span, Protocol):
    @property
    def overtime_hours(self) -> Decimal: ...


D = TypeVar("D", bound=DatedAmount)
P = TypeVar("P", bound=PeriodPayment)


# -----------------------------------------------------------------------------
# Proration
# -----------------------------------------------------------------------------


def days_in_period(period: DatePeriod) -> int:
    """Whole days from start to end; the start day itself is not counted."""
    return period.days


@traced_engine("payroll", "1.0", fingerprint_fields=("monthly_salary", "period", "proration_days"))
def prorated_salary(
    *,
    monthly_salary: Decimal,
    period: DatePeriod,
    proration_days: int = SALARY_PRORATION_DAYS,
) -> Decimal:
    return monthly_salary * Decimal(days_in_period(period)) / Decimal(proration_days)


# -----------------------------------------------------------------------------
# Period filters
# -----------------------------------------------------------------------------


def advances_in_period(advances: Iterable[D], period: DatePeriod) -> list[D]:
    return [a for a in advances if period.contains(a.date)]


def payments_in_period(payments: Iterable[D], period: DatePeriod) -> list[D]:
    return [p for p in payments if period.contains(p.date)]


def payments_fully_within_period(payments: Iterable[P], period: DatePeriod) -> list[P]:
    """Salary-history entries whose own period lies inside ``period``."""
    return [p for p in payments if period.encloses(p.period_start, p.period_end)]


def total_amount(items: Iterable[DatedAmount]) -> Decimal:
    return sum_amounts(i.amount for i in items)


# -----------------------------------------------------------------------------
# Balances
# -----------------------------------------------------------------------------


@dataclass(frozen=True)
class EmployeeTotals:
    """Derived salary position of one employee as of a date."""

    total_earned: Decimal
    total_paid: Decimal
    total_advances: Decimal

    @property
    def current_balance(self) -> Decimal:
        return self.total_earned - self.total_paid - self.total_advances


@traced_engine("payroll", "1.0", fingerprint_fields=("monthly_salary", "join_date", "as_of", "proration_days"))
def employee_totals(
    *,
    monthly_salary: Decimal,
    join_date: date,
    advances: Sequence[DatedAmount],
    payments: Sequence[DatedAmount],
    as_of: date,
    proration_days: int = SALARY_PRORATION_DAYS,
) -> EmployeeTotals:
    """
    Earned-to-date salary against everything paid or advanced.

    Nothing has been earned before the join date, so an ``as_of`` earlier
    than ``join_date`` yields zero earnings rather than a negative figure.
    """
    if as_of < join_date:
        earned = ZERO
    else:
        earned = prorated_salary(
            monthly_salary=monthly_salary,
            period=DatePeriod(join_date, as_of),
            proration_days=proration_days,
        )
    return EmployeeTotals(
        total_earned=earned,
        total_paid=total_amount(payments),
        total_advances=total_amount(advances),
    )


def current_balance(
    *,
    monthly_salary: Decimal,
    join_date: date,
    advances: Sequence[DatedAmount],
    payments: Sequence[DatedAmount],
    as_of: date,
    proration_days: int = SALARY_PRORATION_DAYS,
) -> Decimal:
    return employee_totals(
        monthly_salary=monthly_salary,
        join_date=join_date,
        advances=advances,
        payments=payments,
        as_of=as_of,
        proration_days=proration_days,
    ).current_balance


# -----------------------------------------------------------------------------
# Salary slip figures
# -----------------------------------------------------------------------------


@dataclass(frozen=True)
class SlipFigures:
    """Amounts and payment metadata for one salary slip."""

    base_salary: Decimal
    bonuses: Decimal
    deductions: Decimal
    advances: Decimal
    payment_method: object | None = None
    processed_by: str | None = None

    @property
    def total_earnings(self) -> Decimal:
        return self.base_salary + self.bonuses

    @property
    def total_deductions(self) -> Decimal:
        return self.deductions + self.advances

    @property
    def net_salary(self) -> Decimal:
        return self.total_earnings - self.total_deductions


@traced_engine("payroll", "1.0", fingerprint_fields=("monthly_salary", "period", "proration_days"))
def salary_slip_figures(
    *,
    monthly_salary: Decimal,
    advances: Sequence[DatedAmount],
    salary_history: Sequence[PeriodPayment],
    period: DatePeriod,
    payment_method: object | None = None,
    processed_by: str | None = None,
    proration_days: int = SALARY_PRORATION_DAYS,
) -> SlipFigures:
    """
    Compute slip amounts for ``period``.

    Payment method and processor default to the explicit arguments, then
    to the most recently dated selected history entry, then to None.
    """
    selected = payments_fully_within_period(salary_history, period)
    latest = max(selected, key=lambda p: p.date) if selected else None

    if payment_method is None and latest is not None:
        payment_method = latest.payment_method
    if processed_by is None and latest is not None and latest.processed_by:
        processed_by = latest.processed_by

    return SlipFigures(
        base_salary=prorated_salary(
            monthly_salary=monthly_salary, period=period, proration_days=proration_days,
        ),
        bonuses=sum_amounts(p.bonuses for p in selected),
        deductions=sum_amounts(p.deductions for p in selected),
        advances=total_amount(advances_in_period(advances, period)),
        payment_method=payment_method,
        processed_by=processed_by,
    )


# -----------------------------------------------------------------------------
# Leave and duty durations
# -----------------------------------------------------------------------------


def span_days(span: Span) -> int:
    """Duration of a leave or duty record: end minus start, in days."""
    return (span.end_date - span.start_date).days


def leave_days(leaves: Iterable[Span]) -> int:
    return sum(span_days(leave) for leave in leaves)


def paid_leave_days(leaves: Iterable[LeaveSpan]) -> int:
    return sum(span_days(leave) for leave in leaves if leave.is_paid)


def duty_days(records: Iterable[Span]) -> int:
    return sum(span_days(r) for r in records)


def overtime_hours(records: Iterable[DutySpan]) -> Decimal:
    return sum_amounts(r.overtime_hours for r in records)
