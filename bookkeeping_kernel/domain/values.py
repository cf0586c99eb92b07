"""
Value objects shared by every module.

Responsibility:
    ``DatePeriod`` (an inclusive calendar range), ``PaymentMethod`` (how a
    salary, advance or expense was paid), ``Address``, and small Decimal
    helpers.  These are the only value shapes that more than one module
    needs.

Architecture position:
    Kernel > Domain -- pure value objects.  ZERO I/O.

Invariants enforced:
    * ``DatePeriod.start_date <= DatePeriod.end_date``.
    * Monetary amounts are ``Decimal`` -- NEVER ``float``.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Iterable

ZERO = Decimal("0")


class PaymentMethod(Enum):
    """How a salary, advance, expense or reimbursement was paid."""
    CASH = "Cash"
    BANK_TRANSFER = "Bank Transfer"
    CHECK = "Check"
    WALLET = "Digital Wallet"
    CREDIT_CARD = "Credit Card"
    OTHER = "Other"


@dataclass(frozen=True)
class DatePeriod:
    """
    A calendar range, inclusive on both ends.

    Contract:
        frozen; ``start_date <= end_date``.
    """
    start_date: date
    end_date: date

    def __post_init__(self) -> None:
        if self.start_date > self.end_date:
            raise ValueError(
                f"Period start {self.start_date} is after end {self.end_date}"
            )

    def contains(self, day: date) -> bool:
        """True if ``day`` falls within the period (both ends inclusive)."""
        return self.start_date <= day <= self.end_date

    def encloses(self, start: date, end: date) -> bool:
        """True if ``[start, end]`` lies fully inside the period."""
        return start >= self.start_date and end <= self.end_date

    @property
    def days(self) -> int:
        """Calendar days from start to end (the start day is not counted)."""
        return (self.end_date - self.start_date).days


def to_decimal(value: Decimal | int | str) -> Decimal:
    """Coerce an amount to ``Decimal``; floats are refused."""
    if isinstance(value, float):
        raise TypeError("Monetary amounts must not be float; use Decimal or str")
    if isinstance(value, Decimal):
        return value
    return Decimal(value)


def sum_amounts(amounts: Iterable[Decimal]) -> Decimal:
    """Sum Decimal amounts, returning ``Decimal('0')`` for an empty input."""
    return sum(amounts, ZERO)


@dataclass(frozen=True)
class Address:
    """A postal address.  Any part may be empty."""
    street: str = ""
    city: str = ""
    state: str = ""
    postal_code: str = ""
    country: str = ""

    @property
    def formatted(self) -> str:
        """Non-empty parts joined with ", "."""
        parts = (self.street, self.city, self.state, self.postal_code, self.country)
        return ", ".join(p for p in parts if p)
