"""
Shared helpers for module services.

Used by bookkeeping_modules/*/service.py to reduce duplication when
converting expected kernel failures into OperationResults, validating
caller input, reaching tenant-scoped entities and committing collections.

Architecture: Modules layer. Imports from bookkeeping_kernel and the
workflow executor in bookkeeping_services.
"""

from __future__ import annotations

import functools
from dataclasses import replace
from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Any, Callable, Iterable, TypeVar
from uuid import UUID

from bookkeeping_kernel.domain.clock import Clock, SystemClock
from bookkeeping_kernel.domain.results import OperationResult
from bookkeeping_kernel.domain.values import DatePeriod, to_decimal
from bookkeeping_kernel.exceptions import (
    EntityNotFoundError,
    InvalidTransitionError,
    NoMatchingDataError,
    ValidationFailedError,
)
from bookkeeping_kernel.logging_config import LogContext, get_logger
from bookkeeping_kernel.store.collections import CollectionName, EntityCollections
from bookkeeping_kernel.store.entity_store import EntityStore
from bookkeeping_kernel.store.tenancy import OwnedKind, TenancyIndex
from bookkeeping_services.workflow_executor import WorkflowExecutor

logger = get_logger("modules.helpers")

F = TypeVar("F", bound=Callable[..., OperationResult])
E = TypeVar("E")


# -----------------------------------------------------------------------------
# Result conversion
# -----------------------------------------------------------------------------


def service_operation(name: str) -> Callable[[F], F]:
    """
    Run a service method under ``LogContext(operation=name)`` and turn the
    expected failure kinds into an ``OperationResult``.

    NotFound, ValidationFailed and NoMatchingData become results.  Anything
    else (including ``TenancyInvariantError``) propagates.
    """

    def decorator(func: F) -> F:
        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> OperationResult:
            with LogContext.bind(operation=name):
                try:
                    return func(*args, **kwargs)
                except (EntityNotFoundError, ValidationFailedError, NoMatchingDataError) as exc:
                    logger.info(
                        "operation_refused",
                        extra={
                            "operation": name,
                            "error_code": exc.code,
                            "reason": str(exc),
                        },
                    )
                    return OperationResult.from_error(exc)

        return wrapper  # type: ignore[return-value]

    return decorator


# -----------------------------------------------------------------------------
# Input validation
# -----------------------------------------------------------------------------


def require_text(value: str | None, field: str) -> str:
    if value is None or not value.strip():
        raise ValidationFailedError(f"{field} must not be empty", field=field)
    return value


def require_amount(value: Any, field: str, *, allow_negative: bool = False) -> Decimal:
    """Coerce to Decimal; refuse floats, junk and (by default) negatives."""
    try:
        amount = to_decimal(value)
    except (TypeError, InvalidOperation) as exc:
        raise ValidationFailedError(f"{field} is not a valid amount: {value!r}", field=field) from exc
    if not amount.is_finite():
        raise ValidationFailedError(f"{field} must be finite", field=field)
    if not allow_negative and amount < 0:
        raise ValidationFailedError(f"{field} must not be negative", field=field)
    return amount


def require_period(start: date, end: date, field: str = "period") -> DatePeriod:
    try:
        return DatePeriod(start, end)
    except ValueError as exc:
        raise ValidationFailedError(str(exc), field=field) from exc


def apply_changes(
    entity: E,
    changes: dict[str, Any],
    editable: Iterable[str],
    collection: str,
) -> E:
    """``dataclasses.replace`` restricted to ``editable`` field names."""
    refused = sorted(set(changes) - set(editable))
    if refused:
        raise ValidationFailedError(
            f"{collection} fields cannot be changed here: {', '.join(refused)}",
            field=refused[0],
        )
    return replace(entity, **changes)


def replace_by_id(items: tuple[E, ...], item: Any, collection: str) -> tuple[E, ...]:
    """Swap the element with ``item.id``; NotFound if no element has that id."""
    if not any(i.id == item.id for i in items):  # type: ignore[attr-defined]
        raise EntityNotFoundError(collection, item.id)
    return tuple(item if i.id == item.id else i for i in items)  # type: ignore[attr-defined]


def find_by_id(items: Iterable[E], item_id: UUID, collection: str) -> E:
    for i in items:
        if i.id == item_id:  # type: ignore[attr-defined]
            return i
    raise EntityNotFoundError(collection, item_id)


# -----------------------------------------------------------------------------
# Base service
# -----------------------------------------------------------------------------


class ModuleService:
    """
    Common plumbing for tenant-scoped services.

    Contract
    --------
    * Every tenant-scoped read or write names its ``company_id``; an entity
      id the company does not own is reported as NotFound, exactly as if
      it did not exist.
    * Creation and attachment happen in the same call; both affected
      collections are committed before the method returns.
    """

    def __init__(
        self,
        collections: EntityCollections,
        clock: Clock | None = None,
        workflow_executor: WorkflowExecutor | None = None,
    ):
        self._collections = collections
        self._clock = clock or SystemClock()
        self._workflow_executor = workflow_executor or WorkflowExecutor()
        self._tenancy = TenancyIndex(collections.store(CollectionName.COMPANIES))

    @property
    def tenancy(self) -> TenancyIndex:
        return self._tenancy

    def _store(self, name: CollectionName) -> EntityStore[Any]:
        return self._collections.store(name)

    def _get_owned(self, company_id: UUID, kind: OwnedKind, entity_id: UUID) -> Any:
        if not self._tenancy.is_owned(company_id, kind, entity_id):
            raise EntityNotFoundError(kind.collection.value, entity_id)
        return self._store(kind.collection).get(entity_id)

    def _list_owned(self, company_id: UUID, kind: OwnedKind) -> list[Any]:
        return self._tenancy.filter_owned(company_id, kind, self._store(kind.collection).list())

    def _create_owned(self, company_id: UUID, kind: OwnedKind, entity: Any) -> None:
        # Fails before anything is stored when the company is unknown.
        self._tenancy.owned_ids(company_id, kind)
        self._store(kind.collection).create(entity)
        self._tenancy.attach(company_id, kind, entity.id)

    def _delete_owned(self, company_id: UUID, kind: OwnedKind, entity_id: UUID) -> Any:
        entity = self._get_owned(company_id, kind, entity_id)
        self._store(kind.collection).delete(entity_id)
        self._tenancy.detach(company_id, kind, entity_id)
        return entity

    def _commit(self, result: OperationResult, *names: CollectionName) -> OperationResult:
        return result.with_persistence_error(self._collections.commit_many(*names))

    def _run_transition(
        self,
        workflow: Any,
        entity_type: str,
        entity_id: UUID,
        current_state: str,
        action: str,
    ) -> tuple[str | None, bool]:
        """
        Execute ``action`` and return ``(new_state, already_applied)``.

        Raises:
            InvalidTransitionError: when the action is illegal and was not
                already applied.
        """
        outcome = self._workflow_executor.execute_transition(
            workflow=workflow,
            entity_type=entity_type,
            entity_id=entity_id,
            current_state=current_state,
            action=action,
        )
        if outcome.success:
            return outcome.new_state, False
        if outcome.already_applied:
            return outcome.new_state, True
        raise InvalidTransitionError(workflow.name, current_state, action)
