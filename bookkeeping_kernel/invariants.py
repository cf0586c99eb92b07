"""
Kernel Invariants Contract.

These invariants are structural law for the bookkeeping core.  No setting
may switch them off.

This module declares them explicitly and provides the checks tests use to
assert against defects.  Enforcement is distributed across EntityStore,
TenancyIndex, the record codec and the workflow executor.
"""

from enum import Enum, unique
from typing import Any, Iterable

from bookkeeping_kernel.exceptions import TenancyInvariantError


@unique
class KernelInvariant(str, Enum):
    """Non-configurable invariants enforced by the kernel."""

    TENANT_DISJOINTNESS = "tenant_disjointness"
    """An identifier appears in at most one company's owned set per kind.
    Enforced by TenancyIndex.attach."""

    IDENTIFIER_STABILITY = "identifier_stability"
    """Identifiers are assigned at creation and never reassigned.  Enforced
    by EntityStore.update keying on the existing id."""

    DERIVED_NOT_STORED = "derived_not_stored"
    """Balances and totals are re-derived on every read by the engines.
    The expense report running total is the one stored figure, and it has
    an explicit reconciliation step."""

    TERMINAL_STATES = "terminal_states"
    """Rejected, reimbursed and cancelled records never change status
    again.  Enforced by the workflow definitions."""

    ROUND_TRIP = "round_trip"
    """Saving then loading a collection yields deep-equal entities.
    Enforced by the record codec."""


ALL_KERNEL_INVARIANTS: frozenset[KernelInvariant] = frozenset(KernelInvariant)

# The kernel package may not import from these packages.
# This is enforced by tests/architecture/test_layer_boundaries.py.
FORBIDDEN_KERNEL_IMPORTS: tuple[str, ...] = (
    "bookkeeping_engines",
    "bookkeeping_modules",
    "bookkeeping_services",
    "bookkeeping_config",
)


def assert_tenancy_disjoint(companies: Iterable[Any], fields: Iterable[str]) -> None:
    """
    Check that no identifier is owned by two companies.

    Raises:
        TenancyInvariantError: on the first id found in two owned sets.
    """
    companies = list(companies)
    for field in fields:
        seen: dict[Any, Any] = {}
        for company in companies:
            for entity_id in getattr(company, field):
                if entity_id in seen and seen[entity_id] != company.id:
                    raise TenancyInvariantError(
                        field, entity_id, (str(seen[entity_id]), str(company.id)),
                    )
                seen[entity_id] = company.id
