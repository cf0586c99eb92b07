"""
Company Module Service (``bookkeeping_modules.company.service``).

Responsibility
--------------
Company CRUD.  Companies are the tenants: every other tenant-scoped
service takes a ``company_id`` that must name a company stored here.

Architecture position
---------------------
**Modules layer**.  Owns the companies collection.  The active-company
pointer is not kept here; ``bookkeeping_services.ledger.Ledger`` holds it.

Invariants enforced
-------------------
* At least one company exists once one has been created: deleting the
  only company is refused with ``LAST_COMPANY``.
* Hooks registered with ``on_before_delete`` run before a company is
  removed; the ledger uses one to move its active-company pointer.
* Deleting a company soft-detaches what it owns: employees, clients and
  the rest stay in their collections and are simply no longer reachable
  through any tenant-scoped call.
* Owned-id tuples cannot be edited through ``update_company``.

Failure modes
-------------
* NOT_FOUND for an unknown company id.
* VALIDATION_FAILED for an empty name or a non-editable field.
"""

from __future__ import annotations

from typing import Any, Callable
from uuid import UUID, uuid4

from bookkeeping_kernel.domain.results import OperationResult
from bookkeeping_kernel.exceptions import LastCompanyDeletionError
from bookkeeping_kernel.logging_config import get_logger
from bookkeeping_kernel.store.collections import CollectionName
from bookkeeping_modules._service_helpers import (
    ModuleService,
    apply_changes,
    require_text,
    service_operation,
)
from bookkeeping_modules.company.models import Company

logger = get_logger("modules.company.service")

EDITABLE_FIELDS = frozenset({"name", "address", "phone", "email", "logo", "is_active"})

# (company being deleted, companies that remain) -> persistence error or None
BeforeDeleteHook = Callable[[Company, list[Company]], str | None]


class CompanyService(ModuleService):
    """Company CRUD over the companies collection."""

    def __init__(self, *args: Any, **kwargs: Any):
        super().__init__(*args, **kwargs)
        self._before_delete: list[BeforeDeleteHook] = []

    def on_before_delete(self, hook: BeforeDeleteHook) -> None:
        """
        Run ``hook`` once a deletion has passed its checks and before the
        company leaves the store.  A string it returns is carried on the
        delete result as a persistence error.
        """
        self._before_delete.append(hook)

    @property
    def _companies(self):
        return self._store(CollectionName.COMPANIES)

    @service_operation("create_company")
    def create_company(
        self,
        name: str,
        address: str = "",
        phone: str = "",
        email: str = "",
        logo: str | None = None,
    ) -> OperationResult[Company]:
        company = Company(
            id=uuid4(),
            name=require_text(name, "name"),
            created_date=self._clock.now(),
            address=address,
            phone=phone,
            email=email,
            logo=logo,
        )
        self._companies.create(company)
        logger.info(
            "company_created",
            extra={"company_id": str(company.id), "company_name": company.name},
        )
        return self._commit(OperationResult.ok(company), CollectionName.COMPANIES)

    @service_operation("update_company")
    def update_company(self, company_id: UUID, **changes: Any) -> OperationResult[Company]:
        company = self._companies.get(company_id)
        if "name" in changes:
            require_text(changes["name"], "name")
        updated = apply_changes(company, changes, EDITABLE_FIELDS, "company")
        if updated == company:
            return OperationResult.ok(company)
        self._companies.update(updated)
        logger.info(
            "company_updated",
            extra={"company_id": str(company_id), "fields": sorted(changes)},
        )
        return self._commit(OperationResult.ok(updated), CollectionName.COMPANIES)

    @service_operation("delete_company")
    def delete_company(self, company_id: UUID) -> OperationResult[Company]:
        company = self._companies.get(company_id)
        if len(self._companies) <= 1:
            raise LastCompanyDeletionError(company_id)
        remaining = [c for c in self._companies.list() if c.id != company_id]
        hook_errors = [e for e in (hook(company, remaining) for hook in self._before_delete) if e]
        self._companies.delete(company_id)
        logger.info(
            "company_deleted",
            extra={
                "company_id": str(company_id),
                "detached_employees": len(company.employee_ids),
                "detached_clients": len(company.client_ids),
            },
        )
        result = self._commit(OperationResult.ok(company), CollectionName.COMPANIES)
        return result.with_persistence_error("; ".join(hook_errors) or None)

    @service_operation("get_company")
    def get_company(self, company_id: UUID) -> OperationResult[Company]:
        return OperationResult.ok(self._companies.get(company_id))

    def list_companies(self) -> list[Company]:
        return self._companies.list()
