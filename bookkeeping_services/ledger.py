"""
bookkeeping_services.ledger -- The ledger facade.

Responsibility:
    Wires every module service, the report generator and the personal
    funds linker over one set of entity collections and one persistence
    gateway.  Loads the collections at bootstrap, seeds the default
    company and personal account on first run, and keeps the
    active-company pointer (persisted as the ``active_company_id``
    setting).

Architecture position:
    Services -- the composition root.  This is the only place that reads
    ``bookkeeping_config`` settings; services below receive plain values.

Invariants enforced:
    - After bootstrap at least one company exists and the active company
      id names one of them.
    - Switching the active company moves no entity data; it is a pointer
      change plus one setting save.
    - Deleting the active company first points "active" at another
      company, so the pointer never dangles.

Failure modes:
    - PersistenceError propagates from bootstrap when the gateway cannot
      load (nothing useful runs on a half-loaded ledger).
    - NOT_FOUND from ``switch_active_company`` for an unknown company.
"""

from __future__ import annotations

from uuid import UUID

from bookkeeping_config import LedgerSettings, get_active_settings
from bookkeeping_kernel.domain.clock import Clock, SystemClock
from bookkeeping_kernel.domain.results import OperationResult
from bookkeeping_kernel.exceptions import CompanyNotFoundError, PersistenceError
from bookkeeping_kernel.logging_config import configure_logging, get_logger
from bookkeeping_kernel.services.persistence_gateway import PersistenceGateway, SqlAlchemyGateway
from bookkeeping_kernel.store.collections import CollectionName, EntityCollections
from bookkeeping_modules.account.service import PersonalAccountService
from bookkeeping_modules.client.service import ClientService
from bookkeeping_modules.company.models import Company
from bookkeeping_modules.company.service import CompanyService
from bookkeeping_modules.employee.service import EmployeeService
from bookkeeping_modules.expense.service import ExpenseService
from bookkeeping_modules.registry import COLLECTION_TYPES
from bookkeeping_services.personal_funds import PersonalFundsLinker
from bookkeeping_services.report_generator import ReportGenerator
from bookkeeping_services.workflow_executor import WorkflowExecutor

logger = get_logger("services.ledger")

ACTIVE_COMPANY_SETTING = "active_company_id"


class Ledger:
    """
    One bookkeeping ledger: its collections, services and active company.

    Contract:
        Build with ``Ledger.bootstrap(...)``.  Services are attributes
        (``companies``, ``employees``, ``clients``, ``expenses``,
        ``account``, ``reports``, ``personal_funds``); every
        tenant-scoped call takes an explicit ``company_id``, for which
        ``active_company_id`` is the usual argument.
    """

    def __init__(
        self,
        gateway: PersistenceGateway,
        settings: LedgerSettings,
        clock: Clock | None = None,
    ):
        self.settings = settings
        self.clock = clock or SystemClock()
        self.collections = EntityCollections(COLLECTION_TYPES, gateway)
        executor = WorkflowExecutor()

        def wire(service_cls, **options):
            return service_cls(
                self.collections, clock=self.clock, workflow_executor=executor, **options,
            )

        proration = {"salary_proration_days": settings.salary_proration_days}

        self.companies: CompanyService = wire(CompanyService)
        self.employees: EmployeeService = wire(EmployeeService, **proration)
        self.clients: ClientService = wire(ClientService)
        self.expenses: ExpenseService = wire(ExpenseService)
        self.account: PersonalAccountService = wire(PersonalAccountService)
        self.reports: ReportGenerator = wire(ReportGenerator, **proration)
        self.personal_funds = PersonalFundsLinker(
            companies=self.companies,
            employees=self.employees,
            expenses=self.expenses,
            account=self.account,
            reports=self.reports,
            clock=self.clock,
        )
        self._active_company_id: UUID | None = None
        self.companies.on_before_delete(self._move_active_off)

    @property
    def gateway(self) -> PersistenceGateway:
        return self.collections.gateway

    # ------------------------------------------------------------------
    # Bootstrap
    # ------------------------------------------------------------------

    @classmethod
    def bootstrap(
        cls,
        gateway: PersistenceGateway | None = None,
        settings: LedgerSettings | None = None,
        clock: Clock | None = None,
    ) -> Ledger:
        """
        Load a ledger from ``gateway``.

        Without a gateway, a ``SqlAlchemyGateway`` is opened on
        ``settings.database_url``.  Without settings, the active settings
        are loaded from ``bookkeeping_config``.  Logging is configured at
        ``settings.logging_level`` (the numeric form of ``log_level``)
        unless the process already configured it.
        """
        settings = settings or get_active_settings()
        configure_logging(level=settings.logging_level)
        if gateway is None:
            gateway = SqlAlchemyGateway(settings.database_url)
        ledger = cls(gateway, settings, clock)
        ledger._load()
        return ledger

    def _load(self) -> None:
        self.collections.load_all()

        if not self.companies.list_companies():
            seed = self.settings.default_company
            self.companies.create_company(
                name=seed.name,
                address=seed.address,
                phone=seed.phone,
                email=seed.email,
            )
            logger.info("default_company_seeded", extra={"company_name": seed.name})

        self.account.ensure_account(self.settings.default_account_owner)

        stored = self.gateway.load_setting(ACTIVE_COMPANY_SETTING)
        active = self._parse_company_id(stored)
        if active is None:
            active = self.companies.list_companies()[0].id
            self._persist_active(active)
        self._active_company_id = active

        logger.info(
            "ledger_bootstrapped",
            extra={
                "active_company_id": str(active),
                "company_count": len(self.companies.list_companies()),
                "collections": [n.value for n in self.collections.names()],
            },
        )

    def _parse_company_id(self, raw: object) -> UUID | None:
        if not isinstance(raw, str):
            return None
        try:
            company_id = UUID(raw)
        except ValueError:
            logger.warning("active_company_setting_invalid", extra={"value": raw})
            return None
        if company_id not in self.collections.store(CollectionName.COMPANIES):
            logger.warning("active_company_setting_stale", extra={"company_id": raw})
            return None
        return company_id

    # ------------------------------------------------------------------
    # Active company
    # ------------------------------------------------------------------

    @property
    def active_company_id(self) -> UUID:
        assert self._active_company_id is not None, "Ledger used before bootstrap"
        return self._active_company_id

    @property
    def active_company(self) -> Company:
        return self.collections.store(CollectionName.COMPANIES).get(self.active_company_id)

    def switch_active_company(self, company_id: UUID) -> OperationResult[Company]:
        company = self.collections.store(CollectionName.COMPANIES).find(company_id)
        if company is None:
            return OperationResult.from_error(CompanyNotFoundError(company_id))
        previous = self._active_company_id
        self._active_company_id = company_id
        logger.info(
            "active_company_switched",
            extra={"from_company_id": str(previous), "to_company_id": str(company_id)},
        )
        return OperationResult.ok(company).with_persistence_error(self._persist_active(company_id))

    def delete_company(self, company_id: UUID) -> OperationResult[Company]:
        """Same as ``companies.delete_company``; kept on the facade for callers."""
        return self.companies.delete_company(company_id)

    def _move_active_off(self, company: Company, remaining: list[Company]) -> str | None:
        """Point "active" at the first remaining company before ``company`` goes."""
        if company.id != self._active_company_id or not remaining:
            return None
        return self.switch_active_company(remaining[0].id).persistence_error

    def _persist_active(self, company_id: UUID) -> str | None:
        try:
            self.gateway.save_setting(ACTIVE_COMPANY_SETTING, str(company_id))
        except PersistenceError as exc:
            logger.warning(
                "persistence_save_failed",
                extra={"setting": ACTIVE_COMPANY_SETTING},
                exc_info=True,
            )
            return str(exc)
        return None

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def save_all(self) -> str | None:
        """Save every collection and the active-company setting."""
        errors = [
            e for e in (
                self.collections.commit_all(),
                self._persist_active(self.active_company_id),
            )
            if e is not None
        ]
        return "; ".join(errors) if errors else None
