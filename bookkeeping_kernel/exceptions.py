"""
Typed Exception Hierarchy for the Bookkeeping Kernel.

===============================================================================
WHY TYPED EXCEPTIONS
===============================================================================

Every failure the core can produce belongs to a small taxonomy:

  - NOT_FOUND          an operation referenced an id absent from a collection
  - VALIDATION_FAILED  caller-supplied data violates an invariant
  - NO_MATCHING_DATA   a report found nothing to produce (not an error per se)
  - PERSISTENCE_FAILED the gateway could not durably save a collection

Kernel primitives (EntityStore, TenancyIndex, gateways) RAISE these typed
exceptions.  Module services catch the expected kinds and convert them into
an ``OperationResult`` (see ``bookkeeping_kernel.domain.results``) so the
presentation layer never has to parse messages:

    try:
        store.update(expense)
    except EntityNotFoundError as e:
        return OperationResult.not_found(str(e))

Defects are different.  ``TenancyInvariantError`` signals that an id ended up
in two companies' owned sets.  It is never converted to a result; it
propagates so tests fail loudly.

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

    BookkeepingError (base)
    |
    +-- EntityNotFoundError
    +-- CompanyNotFoundError
    |
    +-- ValidationFailedError
    |   +-- DuplicateEntityError
    |   +-- LastCompanyDeletionError
    |   +-- InvalidTransitionError
    |
    +-- NoMatchingDataError
    |
    +-- PersistenceError
    |
    +-- TenancyInvariantError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Category      | Code                          | When Raised
--------------|-------------------------------|------------------------------------
Lookup        | NOT_FOUND                     | Entity id absent from a collection
              | COMPANY_NOT_FOUND             | Company id absent (attach/detach)
--------------|-------------------------------|------------------------------------
Validation    | VALIDATION_FAILED             | Bad amount, empty field, bad period
              | DUPLICATE_ENTITY              | create() with an id already stored
              | LAST_COMPANY                  | Deleting the only company
              | INVALID_TRANSITION            | Workflow action illegal from state
--------------|-------------------------------|------------------------------------
Reporting     | NO_MATCHING_DATA              | Statement period has no payments
--------------|-------------------------------|------------------------------------
Persistence   | PERSISTENCE_FAILED            | Gateway save/load failed
--------------|-------------------------------|------------------------------------
Defect        | TENANCY_INVARIANT_VIOLATION   | Id owned by two companies
"""

from uuid import UUID


class BookkeepingError(Exception):
    """
    Base exception for all bookkeeping kernel errors.

    All subclasses carry a ``code`` class attribute for machine-readable
    error identification.
    """

    code: str = "BOOKKEEPING_ERROR"


# Lookup


class EntityNotFoundError(BookkeepingError):
    """Entity with the given id is not in the collection."""

    code: str = "NOT_FOUND"

    def __init__(self, collection: str, entity_id: UUID | str):
        self.collection = collection
        self.entity_id = str(entity_id)
        super().__init__(f"{collection} not found: {entity_id}")


class CompanyNotFoundError(EntityNotFoundError):
    """Company referenced by a tenancy operation does not exist."""

    code: str = "COMPANY_NOT_FOUND"

    def __init__(self, company_id: UUID | str):
        super().__init__("company", company_id)


# Validation


class ValidationFailedError(BookkeepingError):
    """Caller-supplied data violates an invariant."""

    code: str = "VALIDATION_FAILED"

    def __init__(self, message: str, field: str | None = None):
        self.field = field
        super().__init__(message)


class DuplicateEntityError(ValidationFailedError):
    """create() was called with an id that is already stored."""

    code: str = "DUPLICATE_ENTITY"

    def __init__(self, collection: str, entity_id: UUID | str):
        self.collection = collection
        self.entity_id = str(entity_id)
        super().__init__(f"{collection} already exists: {entity_id}")


class LastCompanyDeletionError(ValidationFailedError):
    """The only remaining company cannot be deleted."""

    code: str = "LAST_COMPANY"

    def __init__(self, company_id: UUID | str):
        self.company_id = str(company_id)
        super().__init__(
            f"Company {company_id} is the only company and cannot be deleted"
        )


class InvalidTransitionError(ValidationFailedError):
    """A workflow action is not defined from the entity's current state."""

    code: str = "INVALID_TRANSITION"

    def __init__(self, workflow: str, current_state: str, action: str):
        self.workflow = workflow
        self.current_state = current_state
        self.action = action
        super().__init__(
            f"No transition from '{current_state}' via action '{action}' "
            f"in workflow '{workflow}'"
        )


# Reporting


class NoMatchingDataError(BookkeepingError):
    """A report request matched nothing in the requested period."""

    code: str = "NO_MATCHING_DATA"

    def __init__(self, report: str, reason: str):
        self.report = report
        self.reason = reason
        super().__init__(f"No data for {report}: {reason}")


# Persistence


class PersistenceError(BookkeepingError):
    """The persistence gateway failed to load or save a collection."""

    code: str = "PERSISTENCE_FAILED"

    def __init__(self, collection: str, reason: str):
        self.collection = collection
        self.reason = reason
        super().__init__(f"Persistence failed for {collection}: {reason}")


# Defects


class TenancyInvariantError(BookkeepingError):
    """
    An identifier is owned by more than one company.

    This is a defect, not an expected failure.  It is never converted into
    an ``OperationResult``.
    """

    code: str = "TENANCY_INVARIANT_VIOLATION"

    def __init__(self, kind: str, entity_id: UUID | str, owners: tuple[str, ...]):
        self.kind = kind
        self.entity_id = str(entity_id)
        self.owners = owners
        super().__init__(
            f"{kind} {entity_id} is owned by more than one company: {', '.join(owners)}"
        )
