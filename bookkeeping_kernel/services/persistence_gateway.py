"""
PersistenceGateway -- load and save whole collections of encoded records.

Responsibility:
    The durable boundary of the ledger.  A gateway only ever sees plain
    JSON-safe dicts produced by ``bookkeeping_kernel.domain.codec``; it knows
    nothing about entity types.

Architecture position:
    Kernel > Services.  ``SqlAlchemyGateway`` writes through a ``LedgerDatabase``
    session scope; ``InMemoryGateway`` is the test double.

Invariants enforced:
    - ``save(collection, records)`` replaces the collection atomically: on
      failure the previously saved records are still what ``load`` returns.
    - ``load`` returns records in the order they were saved.
    - Loading a collection that was never saved yields ``[]``.

Failure modes:
    - PersistenceError wraps every backend failure.  Callers decide whether
      to surface it (see ``EntityCollections.commit``).
"""

from __future__ import annotations

import copy
import json
from typing import Any, Protocol, runtime_checkable
from uuid import UUID

from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError

from bookkeeping_kernel.db.engine import LedgerDatabase
from bookkeeping_kernel.db.models import CollectionRecordModel, LedgerSettingModel
from bookkeeping_kernel.exceptions import PersistenceError
from bookkeeping_kernel.logging_config import get_logger

logger = get_logger("services.persistence")


@runtime_checkable
class PersistenceGateway(Protocol):
    """Protocol for durable storage of encoded collections and settings."""

    def load(self, collection: str) -> list[dict[str, Any]]:
        """All records of ``collection`` in saved order; ``[]`` if never saved."""
        ...

    def save(self, collection: str, records: list[dict[str, Any]]) -> None:
        """Replace ``collection`` with ``records``."""
        ...

    def load_setting(self, key: str) -> Any:
        """The stored value for ``key``, or None."""
        ...

    def save_setting(self, key: str, value: Any) -> None:
        ...


class InMemoryGateway:
    """
    Gateway backed by a dict, for tests.

    Records are passed through ``json`` on save so anything the SQL gateway
    would reject is rejected here too.  Set ``fail_saves`` to make every
    save raise ``PersistenceError`` without touching stored data.
    """

    def __init__(self, fail_saves: bool = False):
        self.fail_saves = fail_saves
        self.save_log: list[str] = []
        self._collections: dict[str, str] = {}
        self._settings: dict[str, str] = {}

    def load(self, collection: str) -> list[dict[str, Any]]:
        raw = self._collections.get(collection)
        return json.loads(raw) if raw is not None else []

    def save(self, collection: str, records: list[dict[str, Any]]) -> None:
        if self.fail_saves:
            raise PersistenceError(collection, "in-memory gateway set to fail")
        try:
            self._collections[collection] = json.dumps(records)
        except (TypeError, ValueError) as exc:
            raise PersistenceError(collection, str(exc)) from exc
        self.save_log.append(collection)

    def load_setting(self, key: str) -> Any:
        raw = self._settings.get(key)
        return json.loads(raw) if raw is not None else None

    def save_setting(self, key: str, value: Any) -> None:
        if self.fail_saves:
            raise PersistenceError(f"setting:{key}", "in-memory gateway set to fail")
        self._settings[key] = json.dumps(value)

    def snapshot(self) -> dict[str, list[dict[str, Any]]]:
        """Deep copy of everything saved so far."""
        return {name: copy.deepcopy(self.load(name)) for name in self._collections}


class SqlAlchemyGateway:
    """
    Gateway over the ``collection_records`` and ``ledger_settings`` tables.

    Contract:
        Opens its own ``LedgerDatabase`` on ``database_url`` and creates the
        tables if missing.  ``close()`` releases the connection pool.
    """

    def __init__(self, database_url: str, echo: bool = False):
        self.database = LedgerDatabase(database_url, echo=echo)
        try:
            self.database.create_tables()
        except SQLAlchemyError as exc:
            self.database.close()
            raise PersistenceError("schema", str(exc)) from exc

    def close(self) -> None:
        self.database.close()

    def load(self, collection: str) -> list[dict[str, Any]]:
        try:
            with self.database.session_scope() as session:
                rows = session.scalars(
                    select(CollectionRecordModel)
                    .where(CollectionRecordModel.collection == collection)
                    .order_by(CollectionRecordModel.position)
                ).all()
                return [dict(row.payload) for row in rows]
        except SQLAlchemyError as exc:
            raise PersistenceError(collection, str(exc)) from exc

    def save(self, collection: str, records: list[dict[str, Any]]) -> None:
        try:
            with self.database.session_scope() as session:
                session.execute(
                    delete(CollectionRecordModel)
                    .where(CollectionRecordModel.collection == collection)
                )
                for position, record in enumerate(records):
                    session.add(
                        CollectionRecordModel(
                            collection=collection,
                            position=position,
                            entity_id=_entity_id(record),
                            payload=record,
                        )
                    )
        except SQLAlchemyError as exc:
            raise PersistenceError(collection, str(exc)) from exc

        logger.debug(
            "collection_persisted",
            extra={"collection": collection, "record_count": len(records)},
        )

    def load_setting(self, key: str) -> Any:
        try:
            with self.database.session_scope() as session:
                row = session.scalars(
                    select(LedgerSettingModel).where(LedgerSettingModel.key == key)
                ).first()
                return row.value if row is not None else None
        except SQLAlchemyError as exc:
            raise PersistenceError(f"setting:{key}", str(exc)) from exc

    def save_setting(self, key: str, value: Any) -> None:
        try:
            with self.database.session_scope() as session:
                row = session.scalars(
                    select(LedgerSettingModel).where(LedgerSettingModel.key == key)
                ).first()
                if row is None:
                    session.add(LedgerSettingModel(key=key, value=value))
                else:
                    row.value = value
        except SQLAlchemyError as exc:
            raise PersistenceError(f"setting:{key}", str(exc)) from exc


def _entity_id(record: dict[str, Any]) -> UUID | None:
    raw = record.get("id")
    return UUID(raw) if isinstance(raw, str) else None
