"""
Module: bookkeeping_kernel.db.models
Responsibility: The two tables behind SqlAlchemyGateway.
Architecture position: Kernel > DB.  Imports db/base.py only.

    collection_records  one row per stored entity: the collection name, the
                        entity's position in insertion order, and the
                        encoded record as JSON.
    ledger_settings     small key/value store for process-wide pointers
                        such as the active company id.

Invariants enforced:
    - (collection, position) is unique, so a collection reloads in the
      order it was saved.
    - Setting keys are unique.
"""

from typing import Any
from uuid import UUID

from sqlalchemy import JSON, Index, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from bookkeeping_kernel.db.base import LedgerTable


class CollectionRecordModel(LedgerTable):
    __tablename__ = "collection_records"

    __table_args__ = (
        UniqueConstraint("collection", "position", name="uq_collection_position"),
        Index("idx_collection_records_entity", "collection", "entity_id"),
    )

    collection: Mapped[str] = mapped_column(String(64), nullable=False)
    position: Mapped[int] = mapped_column(nullable=False)
    entity_id: Mapped[UUID | None] = mapped_column(nullable=True)
    payload: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False)

    def __repr__(self) -> str:
        return f"<CollectionRecord {self.collection}#{self.position} {self.entity_id}>"


class LedgerSettingModel(LedgerTable):
    __tablename__ = "ledger_settings"

    key: Mapped[str] = mapped_column(String(100), nullable=False, unique=True)
    value: Mapped[Any] = mapped_column(JSON, nullable=True)

    def __repr__(self) -> str:
        return f"<LedgerSetting {self.key}>"
