"""
EntityCollections -- the set of stores plus their persistence commits.

Responsibility:
    Groups one ``EntityStore`` per collection, loads them from a
    persistence gateway, and saves a single collection after a mutation.

Architecture position:
    Kernel > Store.  Entity types are supplied by the caller through a
    ``{CollectionName: type}`` registry, so the kernel never imports the
    modules that define them.

Invariants enforced:
    - A failed save never rolls back the in-memory mutation that preceded
      it.  ``commit`` logs the failure and hands the message back so the
      caller can surface it on its ``OperationResult``.

Failure modes:
    - KeyError if a collection is requested that the registry did not name.
    - PersistenceError propagates from ``load_all`` (nothing sensible can
      run on a half-loaded ledger).
"""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING, Any, Mapping

from bookkeeping_kernel.domain.codec import decode_record, encode_record
from bookkeeping_kernel.exceptions import PersistenceError
from bookkeeping_kernel.logging_config import get_logger
from bookkeeping_kernel.store.entity_store import EntityStore

if TYPE_CHECKING:
    from bookkeeping_kernel.services.persistence_gateway import PersistenceGateway

logger = get_logger("store.collections")


class CollectionName(str, Enum):
    """Durable collection names, one per entity type."""

    COMPANIES = "companies"
    EMPLOYEES = "employees"
    CLIENTS = "clients"
    SALARY_SLIPS = "salary_slips"
    CLIENT_STATEMENTS = "client_statements"
    COMPANY_EXPENSES = "company_expenses"
    EXPENSE_REPORTS = "expense_reports"
    ACCOUNT_BALANCE = "account_balance"


class EntityCollections:
    """
    One store per collection, bound to a persistence gateway.

    Contract:
        ``store(name)`` is the only way services reach a collection;
        ``commit(name)`` persists that collection's whole current state.
    """

    def __init__(
        self, registry: Mapping[CollectionName, type], gateway: PersistenceGateway,
    ):
        self._gateway = gateway
        self._stores: dict[CollectionName, EntityStore[Any]] = {
            name: EntityStore(name.value, entity_type)
            for name, entity_type in registry.items()
        }

    @property
    def gateway(self) -> PersistenceGateway:
        return self._gateway

    def store(self, name: CollectionName) -> EntityStore[Any]:
        return self._stores[name]

    def names(self) -> tuple[CollectionName, ...]:
        return tuple(self._stores)

    def load_all(self) -> None:
        """Populate every store from the gateway."""
        for name, store in self._stores.items():
            records = self._gateway.load(name.value)
            store.replace_all(decode_record(store.entity_type, r) for r in records)
            logger.debug(
                "collection_loaded",
                extra={"collection": name.value, "count": len(store)},
            )

    def commit(self, name: CollectionName) -> str | None:
        """
        Save one collection.

        Returns:
            None on success, or the failure message.  The in-memory state
            is kept either way.
        """
        store = self._stores[name]
        records = [encode_record(e) for e in store.list()]
        try:
            self._gateway.save(name.value, records)
        except PersistenceError as exc:
            logger.warning(
                "persistence_save_failed",
                extra={"collection": name.value, "record_count": len(records)},
                exc_info=True,
            )
            return str(exc)
        logger.debug(
            "collection_saved",
            extra={"collection": name.value, "record_count": len(records)},
        )
        return None

    def commit_many(self, *names: CollectionName) -> str | None:
        errors = [e for e in (self.commit(n) for n in names) if e is not None]
        return "; ".join(errors) if errors else None

    def commit_all(self) -> str | None:
        return self.commit_many(*self._stores)
