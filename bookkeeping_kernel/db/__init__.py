"""Database layer: declarative base, the two ledger tables and the engine."""

from bookkeeping_kernel.db.base import LedgerTable, UUIDString
from bookkeeping_kernel.db.engine import LedgerDatabase
from bookkeeping_kernel.db.models import CollectionRecordModel, LedgerSettingModel

__all__ = [
    "CollectionRecordModel",
    "LedgerDatabase",
    "LedgerSettingModel",
    "LedgerTable",
    "UUIDString",
]
