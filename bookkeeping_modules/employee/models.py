"""
Employee Domain Models.

The nouns of staff records: the employee, their identity documents and
emergency contact, and the salary advances, salary payments, leaves and
duty records kept against them.
"""

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from enum import Enum
from uuid import UUID

from bookkeeping_kernel.domain.values import ZERO, Address, PaymentMethod, sum_amounts


class Gender(Enum):
    MALE = "Male"
    FEMALE = "Female"
    OTHER = "Other"
    NOT_SPECIFIED = "Not Specified"


class IdentificationType(Enum):
    PASSPORT = "Passport"
    DRIVING_LICENSE = "Driving License"
    NATIONAL_ID = "National ID"
    SOCIAL_SECURITY = "Social Security"
    OTHER = "Other"


@dataclass(frozen=True)
class EmergencyContact:
    name: str
    relationship: str
    phone: str
    email: str | None = None


@dataclass(frozen=True)
class Identification:
    id: UUID
    type: IdentificationType
    document_number: str
    issued_date: date | None = None
    expiry_date: date | None = None


@dataclass(frozen=True)
class SalaryAdvance:
    """Money advanced against future salary."""
    id: UUID
    amount: Decimal
    date: date
    reason: str
    payment_method: PaymentMethod = PaymentMethod.BANK_TRANSFER
    processed_by: str = ""
    reference_number: str | None = None
    notes: str | None = None


@dataclass(frozen=True)
class SalaryPayment:
    """A salary payment covering ``period_start``..``period_end``."""
    id: UUID
    amount: Decimal
    date: date
    period_start: date
    period_end: date
    bonuses: Decimal = ZERO
    deductions: Decimal = ZERO
    payment_method: PaymentMethod = PaymentMethod.BANK_TRANSFER
    processed_by: str = ""
    reference_number: str | None = None
    notes: str | None = None


@dataclass(frozen=True)
class Leave:
    id: UUID
    start_date: date
    end_date: date
    reason: str
    is_paid: bool
    approved_by: str | None = None
    notes: str | None = None

    @property
    def duration_days(self) -> int:
        return (self.end_date - self.start_date).days


@dataclass(frozen=True)
class DutyRecord:
    id: UUID
    start_date: date
    end_date: date
    notes: str | None = None
    overtime_hours: Decimal = ZERO
    verified_by: str | None = None

    @property
    def duration_days(self) -> int:
        return (self.end_date - self.start_date).days


@dataclass(frozen=True)
class Employee:
    """
    An employee of one company.

    Sub-record tuples are replaced whole through the employee service;
    each element keeps its own id so it can be updated in place.
    """
    id: UUID
    name: str
    position: str
    monthly_salary: Decimal
    join_date: date
    email: str = ""
    phone: str = ""
    gender: Gender = Gender.NOT_SPECIFIED
    date_of_birth: date | None = None
    alternate_phone: str | None = None
    address: Address = field(default_factory=Address)
    emergency_contact: EmergencyContact | None = None
    identifications: tuple[Identification, ...] = ()
    salary_advances: tuple[SalaryAdvance, ...] = ()
    salary_history: tuple[SalaryPayment, ...] = ()
    leaves: tuple[Leave, ...] = ()
    duty_records: tuple[DutyRecord, ...] = ()

    @property
    def total_advances(self) -> Decimal:
        return sum_amounts(a.amount for a in self.salary_advances)

    @property
    def total_paid(self) -> Decimal:
        return sum_amounts(p.amount for p in self.salary_history)
