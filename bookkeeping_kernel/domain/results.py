"""
Discriminated operation results (``bookkeeping_kernel.domain.results``).

Responsibility
--------------
Every core operation that can fail in an expected way returns an
``OperationResult`` rather than raising.  The status names the taxonomy
kind; ``value`` carries the success payload; ``message`` is human-readable.

A gateway failure does not roll back the in-memory mutation that triggered
it.  Such a result is still ``is_success`` (the mutation happened) but not
``is_durable``; ``persistence_error`` says why.

Architecture position
---------------------
**Kernel domain layer** -- pure value objects.  ZERO I/O.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Generic, TypeVar

from bookkeeping_kernel.exceptions import (
    BookkeepingError,
    EntityNotFoundError,
    NoMatchingDataError,
    ValidationFailedError,
)

T = TypeVar("T")


class OperationStatus(str, Enum):
    """Outcome kind of a core operation."""

    SUCCESS = "success"
    NOT_FOUND = "not_found"
    VALIDATION_FAILED = "validation_failed"
    NO_MATCHING_DATA = "no_matching_data"


@dataclass(frozen=True)
class OperationResult(Generic[T]):
    """Result of a core operation."""

    status: OperationStatus
    value: T | None = None
    message: str | None = None
    error_code: str | None = None
    persistence_error: str | None = None

    @property
    def is_success(self) -> bool:
        return self.status == OperationStatus.SUCCESS

    @property
    def is_durable(self) -> bool:
        """True when the operation succeeded and every save reached the gateway."""
        return self.is_success and self.persistence_error is None

    def unwrap(self) -> T:
        """Return ``value`` or raise ``ValueError`` if the operation failed."""
        if not self.is_success:
            raise ValueError(f"{self.status.value}: {self.message}")
        return self.value  # type: ignore[return-value]

    def with_persistence_error(self, error: str | None) -> OperationResult[T]:
        if error is None:
            return self
        if self.persistence_error:
            error = f"{self.persistence_error}; {error}"
        return replace(self, persistence_error=error)

    # -- constructors ---------------------------------------------------------

    @classmethod
    def ok(cls, value: Any = None, message: str | None = None) -> OperationResult:
        return cls(status=OperationStatus.SUCCESS, value=value, message=message)

    @classmethod
    def not_found(cls, message: str, error_code: str = "NOT_FOUND") -> OperationResult:
        return cls(
            status=OperationStatus.NOT_FOUND,
            message=message,
            error_code=error_code,
        )

    @classmethod
    def validation_failed(
        cls, message: str, error_code: str = "VALIDATION_FAILED",
    ) -> OperationResult:
        return cls(
            status=OperationStatus.VALIDATION_FAILED,
            message=message,
            error_code=error_code,
        )

    @classmethod
    def no_matching_data(cls, message: str) -> OperationResult:
        return cls(
            status=OperationStatus.NO_MATCHING_DATA,
            message=message,
            error_code="NO_MATCHING_DATA",
        )

    @classmethod
    def from_error(cls, error: BookkeepingError) -> OperationResult:
        """
        Map an expected kernel exception onto a result.

        Raises:
            TypeError: for error kinds that are not expected failures
                (``PersistenceError``, ``TenancyInvariantError``).
        """
        if isinstance(error, EntityNotFoundError):
            return cls.not_found(str(error), error.code)
        if isinstance(error, ValidationFailedError):
            return cls.validation_failed(str(error), error.code)
        if isinstance(error, NoMatchingDataError):
            return cls.no_matching_data(str(error))
        raise TypeError(f"{type(error).__name__} is not an expected failure kind")
