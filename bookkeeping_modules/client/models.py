"""
Client Domain Models.

Clients, their contact persons, and the projects billed to them with each
project's milestones and received payments.
"""

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from enum import Enum
from uuid import UUID

from bookkeeping_kernel.domain.values import Address, sum_amounts


class ProjectStatus(Enum):
    PROPOSED = "Proposed"
    ACTIVE = "Active"
    ON_HOLD = "On Hold"
    COMPLETED = "Completed"
    CANCELLED = "Cancelled"


class ProjectPaymentType(Enum):
    ADVANCE = "Advance"
    MILESTONE = "Milestone Payment"
    FINAL = "Final Payment"


class ProjectPaymentMethod(Enum):
    """How a client paid.  Distinct from the payroll ``PaymentMethod``."""
    CASH = "Cash"
    BANK_TRANSFER = "Bank Transfer"
    CHECK = "Check"
    CREDIT_CARD = "Credit Card"
    ONLINE_PAYMENT = "Online Payment"
    OTHER = "Other"


@dataclass(frozen=True)
class ContactPerson:
    id: UUID
    name: str
    position: str
    phone: str
    email: str
    is_primary: bool = False
    notes: str | None = None


@dataclass(frozen=True)
class ProjectMilestone:
    id: UUID
    title: str
    description: str
    due_date: date
    amount: Decimal
    is_completed: bool = False
    completion_date: date | None = None


@dataclass(frozen=True)
class BankTransferDetails:
    bank_name: str
    account_number: str
    transfer_date: date
    branch_code: str | None = None
    swift_code: str | None = None


@dataclass(frozen=True)
class ProjectPayment:
    """Money received from the client against one project."""
    id: UUID
    amount: Decimal
    date: date
    notes: str
    payment_type: ProjectPaymentType
    payment_method: ProjectPaymentMethod
    reference_number: str | None = None
    received_by: str | None = None
    received_from: str | None = None
    verified_by: str | None = None
    invoice_number: str | None = None
    bank_details: BankTransferDetails | None = None


@dataclass(frozen=True)
class Project:
    id: UUID
    name: str
    description: str
    start_date: date
    contract_amount: Decimal
    end_date: date | None = None
    status: ProjectStatus = ProjectStatus.ACTIVE
    project_manager: str | None = None
    contract_reference: str | None = None
    contract_date: date | None = None
    milestones: tuple[ProjectMilestone, ...] = ()
    payments: tuple[ProjectPayment, ...] = ()

    @property
    def total_paid(self) -> Decimal:
        return sum_amounts(p.amount for p in self.payments)

    @property
    def balance(self) -> Decimal:
        """Contract minus payments; negative when overpaid."""
        return self.contract_amount - self.total_paid

    def is_completed(self, as_of: date) -> bool:
        if self.status is ProjectStatus.COMPLETED:
            return True
        return self.end_date is not None and as_of >= self.end_date


@dataclass(frozen=True)
class Client:
    """
    A client of one company.

    ``company`` is the client's own organisation name, not the owning
    tenant; ownership lives on ``Company.client_ids``.
    """
    id: UUID
    name: str
    company: str
    email: str = ""
    phone: str = ""
    company_description: str | None = None
    company_address: Address = field(default_factory=Address)
    gst_number: str | None = None
    tax_identification_number: str | None = None
    registration_number: str | None = None
    website: str | None = None
    industry: str | None = None
    contact_persons: tuple[ContactPerson, ...] = ()
    projects: tuple[Project, ...] = ()

    @property
    def total_contract_amount(self) -> Decimal:
        return sum_amounts(p.contract_amount for p in self.projects)

    @property
    def total_paid(self) -> Decimal:
        return sum_amounts(p.total_paid for p in self.projects)

    @property
    def total_balance(self) -> Decimal:
        return self.total_contract_amount - self.total_paid
