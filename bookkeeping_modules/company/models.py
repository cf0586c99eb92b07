"""
Company Domain Models.

The tenant: a company and the identifiers of everything it owns.
"""

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID


@dataclass(frozen=True)
class Company:
    """
    A company (tenant).

    The six ``*_ids`` tuples are the owned sets maintained by
    ``TenancyIndex``.  They are weak references: the entities themselves
    live in their own collections.
    """
    id: UUID
    name: str
    created_date: datetime
    address: str = ""
    phone: str = ""
    email: str = ""
    logo: str | None = None
    is_active: bool = True
    employee_ids: tuple[UUID, ...] = ()
    client_ids: tuple[UUID, ...] = ()
    salary_slip_ids: tuple[UUID, ...] = ()
    client_statement_ids: tuple[UUID, ...] = ()
    expense_ids: tuple[UUID, ...] = ()
    expense_report_ids: tuple[UUID, ...] = ()
