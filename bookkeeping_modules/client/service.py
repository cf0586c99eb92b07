"""
Client Module Service (``bookkeeping_modules.client.service``).

Responsibility
--------------
Company-scoped client records: client CRUD, contact persons, projects
with their milestones, and the payments received against each project.
Client-level totals are delegated to ``bookkeeping_engines.receivables``.

Architecture position
---------------------
**Modules layer**.  Owns the clients collection.

Invariants enforced
-------------------
* Contract amounts, milestone amounts and payments are non-negative.
* A project's end date, when given, is not before its start date.
* Projects, milestones and contact persons are addressed by id.  An id
  the client does not have is NOT_FOUND and nothing changes.

Failure modes
-------------
* NOT_FOUND for an unknown company, a client the company does not own,
  or an unknown project / milestone / contact person id.
* VALIDATION_FAILED for bad amounts, empty names, inverted dates,
  non-editable fields, or completing a milestone a second time with a
  different completion date.
"""

from __future__ import annotations

from dataclasses import replace
from datetime import date
from decimal import Decimal
from typing import Any
from uuid import UUID, uuid4

from bookkeeping_engines.receivables import ClientTotals
from bookkeeping_engines.receivables import client_totals as compute_client_totals
from bookkeeping_kernel.domain.results import OperationResult
from bookkeeping_kernel.domain.values import Address
from bookkeeping_kernel.exceptions import ValidationFailedError
from bookkeeping_kernel.logging_config import get_logger
from bookkeeping_kernel.store.collections import CollectionName
from bookkeeping_kernel.store.tenancy import OwnedKind
from bookkeeping_modules._service_helpers import (
    ModuleService,
    apply_changes,
    find_by_id,
    replace_by_id,
    require_amount,
    require_period,
    require_text,
    service_operation,
)
from bookkeeping_modules.client.models import (
    BankTransferDetails,
    Client,
    ContactPerson,
    Project,
    ProjectMilestone,
    ProjectPayment,
    ProjectPaymentMethod,
    ProjectPaymentType,
    ProjectStatus,
)

logger = get_logger("modules.client.service")

EDITABLE_FIELDS = frozenset({
    "name", "company", "company_description", "email", "phone",
    "company_address", "gst_number", "tax_identification_number",
    "registration_number", "website", "industry",
})

PROJECT_EDITABLE_FIELDS = frozenset({
    "name", "description", "start_date", "end_date", "contract_amount",
    "project_manager", "contract_reference", "contract_date",
})


def _check_project_dates(start_date: date, end_date: date | None) -> None:
    if end_date is not None:
        require_period(start_date, end_date, field="end_date")


class ClientService(ModuleService):
    """Company-scoped client, project and project-payment operations."""

    # =========================================================================
    # Client CRUD
    # =========================================================================

    @service_operation("create_client")
    def create_client(
        self,
        company_id: UUID,
        *,
        name: str,
        company: str,
        email: str = "",
        phone: str = "",
        company_address: Address | None = None,
        company_description: str | None = None,
        gst_number: str | None = None,
        tax_identification_number: str | None = None,
        registration_number: str | None = None,
        website: str | None = None,
        industry: str | None = None,
    ) -> OperationResult[Client]:
        client = Client(
            id=uuid4(),
            name=require_text(name, "name"),
            company=company,
            email=email,
            phone=phone,
            company_address=company_address or Address(),
            company_description=company_description,
            gst_number=gst_number,
            tax_identification_number=tax_identification_number,
            registration_number=registration_number,
            website=website,
            industry=industry,
        )
        self._create_owned(company_id, OwnedKind.CLIENT, client)
        logger.info(
            "client_created",
            extra={"company_id": str(company_id), "client_id": str(client.id)},
        )
        return self._commit(
            OperationResult.ok(client),
            CollectionName.CLIENTS, CollectionName.COMPANIES,
        )

    @service_operation("update_client")
    def update_client(
        self, company_id: UUID, client_id: UUID, **changes: Any,
    ) -> OperationResult[Client]:
        client = self._get_owned(company_id, OwnedKind.CLIENT, client_id)
        if "name" in changes:
            require_text(changes["name"], "name")
        updated = apply_changes(client, changes, EDITABLE_FIELDS, "client")
        return self._save(updated, "client_updated", fields=sorted(changes))

    @service_operation("delete_client")
    def delete_client(self, company_id: UUID, client_id: UUID) -> OperationResult[Client]:
        client = self._delete_owned(company_id, OwnedKind.CLIENT, client_id)
        logger.info(
            "client_deleted",
            extra={"company_id": str(company_id), "client_id": str(client_id)},
        )
        return self._commit(
            OperationResult.ok(client),
            CollectionName.CLIENTS, CollectionName.COMPANIES,
        )

    @service_operation("get_client")
    def get_client(self, company_id: UUID, client_id: UUID) -> OperationResult[Client]:
        return OperationResult.ok(self._get_owned(company_id, OwnedKind.CLIENT, client_id))

    @service_operation("list_clients")
    def list_clients(self, company_id: UUID) -> OperationResult[list[Client]]:
        return OperationResult.ok(self._list_owned(company_id, OwnedKind.CLIENT))

    # =========================================================================
    # Contact persons
    # =========================================================================

    @service_operation("add_contact_person")
    def add_contact_person(
        self,
        company_id: UUID,
        client_id: UUID,
        *,
        name: str,
        position: str = "",
        phone: str = "",
        email: str = "",
        is_primary: bool = False,
        notes: str | None = None,
    ) -> OperationResult[ContactPerson]:
        client = self._get_owned(company_id, OwnedKind.CLIENT, client_id)
        person = ContactPerson(
            id=uuid4(),
            name=require_text(name, "name"),
            position=position,
            phone=phone,
            email=email,
            is_primary=is_primary,
            notes=notes,
        )
        updated = replace(client, contact_persons=client.contact_persons + (person,))
        return self._save(updated, "contact_person_added", value=person, contact_id=str(person.id))

    @service_operation("update_contact_person")
    def update_contact_person(
        self, company_id: UUID, client_id: UUID, person: ContactPerson,
    ) -> OperationResult[ContactPerson]:
        client = self._get_owned(company_id, OwnedKind.CLIENT, client_id)
        require_text(person.name, "name")
        updated = replace(
            client,
            contact_persons=replace_by_id(client.contact_persons, person, "contact_person"),
        )
        return self._save(updated, "contact_person_updated", value=person, contact_id=str(person.id))

    @service_operation("delete_contact_person")
    def delete_contact_person(
        self, company_id: UUID, client_id: UUID, contact_id: UUID,
    ) -> OperationResult[ContactPerson]:
        client = self._get_owned(company_id, OwnedKind.CLIENT, client_id)
        person = find_by_id(client.contact_persons, contact_id, "contact_person")
        updated = replace(
            client,
            contact_persons=tuple(c for c in client.contact_persons if c.id != contact_id),
        )
        return self._save(updated, "contact_person_deleted", value=person, contact_id=str(contact_id))

    # =========================================================================
    # Projects
    # =========================================================================

    @service_operation("add_project")
    def add_project(
        self,
        company_id: UUID,
        client_id: UUID,
        *,
        name: str,
        description: str = "",
        start_date: date,
        contract_amount: Decimal,
        end_date: date | None = None,
        status: ProjectStatus = ProjectStatus.ACTIVE,
        project_manager: str | None = None,
        contract_reference: str | None = None,
        contract_date: date | None = None,
    ) -> OperationResult[Project]:
        client = self._get_owned(company_id, OwnedKind.CLIENT, client_id)
        _check_project_dates(start_date, end_date)
        project = Project(
            id=uuid4(),
            name=require_text(name, "name"),
            description=description,
            start_date=start_date,
            end_date=end_date,
            contract_amount=require_amount(contract_amount, "contract_amount"),
            status=status,
            project_manager=project_manager,
            contract_reference=contract_reference,
            contract_date=contract_date,
        )
        updated = replace(client, projects=client.projects + (project,))
        return self._save(
            updated, "project_added",
            value=project, project_id=str(project.id),
            contract_amount=str(project.contract_amount),
        )

    @service_operation("update_project")
    def update_project(
        self, company_id: UUID, client_id: UUID, project_id: UUID, **changes: Any,
    ) -> OperationResult[Project]:
        client = self._get_owned(company_id, OwnedKind.CLIENT, client_id)
        project = find_by_id(client.projects, project_id, "project")
        if "name" in changes:
            require_text(changes["name"], "name")
        if "contract_amount" in changes:
            changes["contract_amount"] = require_amount(changes["contract_amount"], "contract_amount")
        updated_project = apply_changes(project, changes, PROJECT_EDITABLE_FIELDS, "project")
        _check_project_dates(updated_project.start_date, updated_project.end_date)
        return self._save_project(client, updated_project, "project_updated", fields=sorted(changes))

    @service_operation("set_project_status")
    def set_project_status(
        self, company_id: UUID, client_id: UUID, project_id: UUID, status: ProjectStatus,
    ) -> OperationResult[Project]:
        client = self._get_owned(company_id, OwnedKind.CLIENT, client_id)
        project = find_by_id(client.projects, project_id, "project")
        if project.status is status:
            return OperationResult.ok(project)
        return self._save_project(
            client, replace(project, status=status), "project_status_changed",
            from_status=project.status.value, to_status=status.value,
        )

    # =========================================================================
    # Milestones
    # =========================================================================

    @service_operation("add_milestone")
    def add_milestone(
        self,
        company_id: UUID,
        client_id: UUID,
        project_id: UUID,
        *,
        title: str,
        description: str = "",
        due_date: date,
        amount: Decimal,
    ) -> OperationResult[ProjectMilestone]:
        client = self._get_owned(company_id, OwnedKind.CLIENT, client_id)
        project = find_by_id(client.projects, project_id, "project")
        milestone = ProjectMilestone(
            id=uuid4(),
            title=require_text(title, "title"),
            description=description,
            due_date=due_date,
            amount=require_amount(amount, "amount"),
        )
        updated = replace(project, milestones=project.milestones + (milestone,))
        return self._save_project(
            client, updated, "milestone_added",
            value=milestone, milestone_id=str(milestone.id),
        )

    @service_operation("complete_milestone")
    def complete_milestone(
        self,
        company_id: UUID,
        client_id: UUID,
        project_id: UUID,
        milestone_id: UUID,
        completion_date: date | None = None,
    ) -> OperationResult[ProjectMilestone]:
        client = self._get_owned(company_id, OwnedKind.CLIENT, client_id)
        project = find_by_id(client.projects, project_id, "project")
        milestone = find_by_id(project.milestones, milestone_id, "milestone")
        completion_date = completion_date or self._clock.today()
        if milestone.is_completed:
            if milestone.completion_date == completion_date:
                return OperationResult.ok(milestone)
            raise ValidationFailedError(
                f"Milestone {milestone_id} was already completed on {milestone.completion_date}",
                field="completion_date",
            )
        done = replace(milestone, is_completed=True, completion_date=completion_date)
        updated = replace(
            project, milestones=replace_by_id(project.milestones, done, "milestone"),
        )
        return self._save_project(
            client, updated, "milestone_completed",
            value=done, milestone_id=str(milestone_id),
        )

    # =========================================================================
    # Project payments
    # =========================================================================

    @service_operation("add_project_payment")
    def add_project_payment(
        self,
        company_id: UUID,
        client_id: UUID,
        project_id: UUID,
        *,
        amount: Decimal,
        date: date,
        notes: str = "",
        payment_type: ProjectPaymentType = ProjectPaymentType.MILESTONE,
        payment_method: ProjectPaymentMethod = ProjectPaymentMethod.BANK_TRANSFER,
        reference_number: str | None = None,
        received_by: str | None = None,
        received_from: str | None = None,
        verified_by: str | None = None,
        invoice_number: str | None = None,
        bank_details: BankTransferDetails | None = None,
    ) -> OperationResult[ProjectPayment]:
        client = self._get_owned(company_id, OwnedKind.CLIENT, client_id)
        project = find_by_id(client.projects, project_id, "project")
        payment = ProjectPayment(
            id=uuid4(),
            amount=require_amount(amount, "amount"),
            date=date,
            notes=notes,
            payment_type=payment_type,
            payment_method=payment_method,
            reference_number=reference_number,
            received_by=received_by,
            received_from=received_from,
            verified_by=verified_by,
            invoice_number=invoice_number,
            bank_details=bank_details,
        )
        updated = replace(project, payments=project.payments + (payment,))
        return self._save_project(
            client, updated, "project_payment_added",
            value=payment, payment_id=str(payment.id), amount=str(payment.amount),
        )

    def add_bank_transfer_payment(
        self,
        company_id: UUID,
        client_id: UUID,
        project_id: UUID,
        *,
        amount: Decimal,
        date: date,
        bank_name: str,
        account_number: str,
        transfer_date: date,
        notes: str = "",
        payment_type: ProjectPaymentType = ProjectPaymentType.MILESTONE,
        branch_code: str | None = None,
        swift_code: str | None = None,
        received_by: str | None = None,
        verified_by: str | None = None,
        invoice_number: str | None = None,
    ) -> OperationResult[ProjectPayment]:
        """A bank-transfer payment with its transfer details attached."""
        return self.add_project_payment(
            company_id,
            client_id,
            project_id,
            amount=amount,
            date=date,
            notes=notes,
            payment_type=payment_type,
            payment_method=ProjectPaymentMethod.BANK_TRANSFER,
            received_by=received_by,
            verified_by=verified_by,
            invoice_number=invoice_number,
            bank_details=BankTransferDetails(
                bank_name=bank_name,
                account_number=account_number,
                transfer_date=transfer_date,
                branch_code=branch_code,
                swift_code=swift_code,
            ),
        )

    # =========================================================================
    # Derived figures
    # =========================================================================

    @service_operation("client_totals")
    def client_totals(self, company_id: UUID, client_id: UUID) -> OperationResult[ClientTotals]:
        client = self._get_owned(company_id, OwnedKind.CLIENT, client_id)
        return OperationResult.ok(compute_client_totals(client.projects))

    # -------------------------------------------------------------------------

    def _save_project(
        self, client: Client, project: Project, event: str, value: Any = None, **log_fields: Any,
    ) -> OperationResult:
        updated = replace(client, projects=replace_by_id(client.projects, project, "project"))
        return self._save(
            updated, event,
            value=project if value is None else value,
            project_id=str(project.id), **log_fields,
        )

    def _save(
        self, client: Client, event: str, value: Any = None, **log_fields: Any,
    ) -> OperationResult:
        self._store(CollectionName.CLIENTS).update(client)
        logger.info(event, extra={"client_id": str(client.id), **log_fields})
        return self._commit(
            OperationResult.ok(client if value is None else value),
            CollectionName.CLIENTS,
        )
