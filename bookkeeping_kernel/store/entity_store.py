"""
EntityStore -- one insertion-ordered mapping-by-identifier per entity type.

Responsibility:
    Owns the create/update/delete primitives for a single collection.  It
    is the only component allowed to change what a collection holds.

Architecture position:
    Kernel > Store.  No dependency on modules, engines or services; the
    entity type is a type parameter.

Invariants enforced:
    - Identifiers are never reassigned: ``update`` replaces the entity under
      its existing id and keeps its position in insertion order.
    - Entities are frozen dataclasses, so an entity handed out by ``get``
      or ``list`` cannot be changed without going back through ``update``.

Failure modes:
    - DuplicateEntityError from ``create`` when the id is already stored.
    - EntityNotFoundError from ``update``/``delete``/``get`` when absent.
"""

from __future__ import annotations

from typing import Generic, Iterable, Iterator, Protocol, TypeVar
from uuid import UUID

from bookkeeping_kernel.exceptions import DuplicateEntityError, EntityNotFoundError


class Identified(Protocol):
    @property
    def id(self) -> UUID: ...


E = TypeVar("E", bound=Identified)


class EntityStore(Generic[E]):
    """
    In-memory collection of one entity type.

    Contract:
        All operations are synchronous and total over this collection.  No
        cross-collection transaction guarantee is given; composite
        operations are responsible for leaving every collection consistent.
    """

    def __init__(self, collection: str, entity_type: type[E]):
        self.collection = collection
        self.entity_type = entity_type
        self._entities: dict[UUID, E] = {}

    def create(self, entity: E) -> UUID:
        if entity.id in self._entities:
            raise DuplicateEntityError(self.collection, entity.id)
        self._entities[entity.id] = entity
        return entity.id

    def update(self, entity: E) -> None:
        if entity.id not in self._entities:
            raise EntityNotFoundError(self.collection, entity.id)
        self._entities[entity.id] = entity

    def delete(self, entity_id: UUID) -> E:
        try:
            return self._entities.pop(entity_id)
        except KeyError:
            raise EntityNotFoundError(self.collection, entity_id) from None

    def get(self, entity_id: UUID) -> E:
        try:
            return self._entities[entity_id]
        except KeyError:
            raise EntityNotFoundError(self.collection, entity_id) from None

    def find(self, entity_id: UUID) -> E | None:
        return self._entities.get(entity_id)

    def list(self) -> list[E]:
        """All entities in insertion order."""
        return list(self._entities.values())

    def replace_all(self, entities: Iterable[E]) -> None:
        """Reset the collection to ``entities`` (used when loading)."""
        self._entities = {}
        for entity in entities:
            self.create(entity)

    def __contains__(self, entity_id: object) -> bool:
        return entity_id in self._entities

    def __len__(self) -> int:
        return len(self._entities)

    def __iter__(self) -> Iterator[E]:
        return iter(self.list())
