"""
Module: bookkeeping_kernel.db.base
Responsibility: Declarative base and column types shared by the two ledger
    tables.
Architecture position: Kernel > DB.  Imported by db/models.py only.

Invariants enforced:
    - Entity ids are kept as 36-character strings, so SQLite and any
      server database read back the same ``uuid.UUID``.
    - Every row carries ``saved_at``, set by the database when the row is
      written.  Collection saves rewrite rows, so this is the time of the
      last save of that collection.
"""

from datetime import datetime
from typing import ClassVar
from uuid import UUID, uuid4

from sqlalchemy import DateTime, String, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy.types import TypeDecorator


class UUIDString(TypeDecorator):
    """``uuid.UUID`` in Python, VARCHAR(36) in the database."""

    impl = String(36)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        return None if value is None else str(value)

    def process_result_value(self, value, dialect):
        return None if value is None else UUID(value)


class LedgerTable(DeclarativeBase):
    """Base for ledger tables: surrogate uuid key plus a save timestamp."""

    type_annotation_map: ClassVar[dict] = {
        UUID: UUIDString(),
        datetime: DateTime(timezone=True),
    }

    row_id: Mapped[UUID] = mapped_column(UUIDString(), primary_key=True, default=uuid4)
    saved_at: Mapped[datetime] = mapped_column(server_default=func.now(), nullable=False)
