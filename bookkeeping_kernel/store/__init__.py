"""In-memory entity stores, collection commits and tenancy."""

from bookkeeping_kernel.store.collections import CollectionName, EntityCollections
from bookkeeping_kernel.store.entity_store import EntityStore
from bookkeeping_kernel.store.tenancy import OwnedKind, TenancyIndex

__all__ = [
    "CollectionName",
    "EntityCollections",
    "EntityStore",
    "OwnedKind",
    "TenancyIndex",
]
