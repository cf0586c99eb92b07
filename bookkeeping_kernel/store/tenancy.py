"""
TenancyIndex -- per-company owned-identifier sets.

Responsibility:
    Answers "which entities of kind K belong to company C" and maintains
    those owned sets on the company records.  All cross-entity filtering
    goes through here.

Architecture position:
    Kernel > Store.  Operates on whatever company type the companies store
    holds, through the field names carried by ``OwnedKind``.

Invariants enforced:
    - An identifier appears in at most one company's owned set per kind.
      Violations raise ``TenancyInvariantError`` (a defect, not a result).
    - Owned sets are weak references: attaching or detaching never creates
      or deletes the referenced entity.
    - Owned sets keep attachment order and never hold duplicates.

Failure modes:
    - CompanyNotFoundError for attach/detach/owned_ids on an unknown company.
    - TenancyInvariantError when attaching an id owned by another company.
"""

from __future__ import annotations

from dataclasses import replace
from enum import Enum
from typing import Any, Iterable, TypeVar
from uuid import UUID

from bookkeeping_kernel.exceptions import CompanyNotFoundError, TenancyInvariantError
from bookkeeping_kernel.logging_config import get_logger
from bookkeeping_kernel.store.collections import CollectionName
from bookkeeping_kernel.store.entity_store import EntityStore

logger = get_logger("store.tenancy")

E = TypeVar("E")


class OwnedKind(str, Enum):
    """Entity kinds a company can own.  Values are the company field names."""

    EMPLOYEE = "employee_ids"
    CLIENT = "client_ids"
    SALARY_SLIP = "salary_slip_ids"
    CLIENT_STATEMENT = "client_statement_ids"
    EXPENSE = "expense_ids"
    EXPENSE_REPORT = "expense_report_ids"

    @property
    def collection(self) -> CollectionName:
        return _KIND_COLLECTIONS[self]


_KIND_COLLECTIONS: dict[OwnedKind, CollectionName] = {
    OwnedKind.EMPLOYEE: CollectionName.EMPLOYEES,
    OwnedKind.CLIENT: CollectionName.CLIENTS,
    OwnedKind.SALARY_SLIP: CollectionName.SALARY_SLIPS,
    OwnedKind.CLIENT_STATEMENT: CollectionName.CLIENT_STATEMENTS,
    OwnedKind.EXPENSE: CollectionName.COMPANY_EXPENSES,
    OwnedKind.EXPENSE_REPORT: CollectionName.EXPENSE_REPORTS,
}


class TenancyIndex:
    """
    Owned-set bookkeeping over the companies store.

    Contract:
        Every mutation replaces the company record through
        ``EntityStore.update``; the caller commits the companies
        collection afterwards.
    """

    def __init__(self, companies: EntityStore[Any]):
        self._companies = companies

    def _company(self, company_id: UUID) -> Any:
        company = self._companies.find(company_id)
        if company is None:
            raise CompanyNotFoundError(company_id)
        return company

    def owned_ids(self, company_id: UUID, kind: OwnedKind) -> frozenset[UUID]:
        return frozenset(getattr(self._company(company_id), kind.value))

    def is_owned(self, company_id: UUID, kind: OwnedKind, entity_id: UUID) -> bool:
        return entity_id in getattr(self._company(company_id), kind.value)

    def owner_of(self, kind: OwnedKind, entity_id: UUID) -> UUID | None:
        owners = [
            c.id for c in self._companies.list()
            if entity_id in getattr(c, kind.value)
        ]
        if len(owners) > 1:
            raise TenancyInvariantError(kind.name, entity_id, tuple(str(o) for o in owners))
        return owners[0] if owners else None

    def filter_owned(
        self, company_id: UUID, kind: OwnedKind, entities: Iterable[E],
    ) -> list[E]:
        """Entities (in the given order) whose id is in the company's owned set."""
        owned = self.owned_ids(company_id, kind)
        return [e for e in entities if e.id in owned]  # type: ignore[attr-defined]

    def attach(self, company_id: UUID, kind: OwnedKind, entity_id: UUID) -> None:
        company = self._company(company_id)
        current = getattr(company, kind.value)
        if entity_id in current:
            return

        owner = self.owner_of(kind, entity_id)
        if owner is not None and owner != company_id:
            raise TenancyInvariantError(
                kind.name, entity_id, (str(owner), str(company_id)),
            )

        self._companies.update(replace(company, **{kind.value: current + (entity_id,)}))
        logger.debug(
            "entity_attached",
            extra={
                "company_id": str(company_id),
                "kind": kind.name,
                "entity_id": str(entity_id),
            },
        )

    def detach(self, company_id: UUID, kind: OwnedKind, entity_id: UUID) -> bool:
        """Remove ``entity_id`` from the company's owned set.  Returns whether it was there."""
        company = self._company(company_id)
        current = getattr(company, kind.value)
        if entity_id not in current:
            return False
        self._companies.update(
            replace(company, **{kind.value: tuple(i for i in current if i != entity_id)})
        )
        logger.debug(
            "entity_detached",
            extra={
                "company_id": str(company_id),
                "kind": kind.name,
                "entity_id": str(entity_id),
            },
        )
        return True
