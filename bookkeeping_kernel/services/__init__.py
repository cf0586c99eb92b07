"""Kernel services: the persistence gateways."""

from bookkeeping_kernel.services.persistence_gateway import (
    InMemoryGateway,
    PersistenceGateway,
    SqlAlchemyGateway,
)

__all__ = ["InMemoryGateway", "PersistenceGateway", "SqlAlchemyGateway"]
