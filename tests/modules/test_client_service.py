"""
Tests for ClientService.

Covers:
- Client CRUD scoped to a company
- Contact persons
- Projects, milestones and status
- Project payments and client totals
"""

from dataclasses import replace
from datetime import timedelta
from decimal import Decimal
from uuid import uuid4

import pytest

from bookkeeping_kernel.domain.results import OperationStatus
from bookkeeping_modules.client import (
    ProjectPaymentMethod,
    ProjectPaymentType,
    ProjectStatus,
)


@pytest.fixture
def project(ledger, company_id, client, today):
    return ledger.clients.add_project(
        company_id, client.id, name="Website", description="Company site",
        start_date=today, contract_amount=Decimal("5000"),
    ).unwrap()


class TestClientCrud:

    def test_create_attaches_to_company(self, ledger, company_id, client):
        assert ledger.companies.get_company(company_id).value.client_ids == (client.id,)
        assert ledger.clients.list_clients(company_id).value == [client]

    def test_blank_name_is_refused(self, ledger, company_id):
        result = ledger.clients.create_client(company_id, name="", company="X")
        assert result.status is OperationStatus.VALIDATION_FAILED

    def test_update_client(self, ledger, company_id, client):
        result = ledger.clients.update_client(company_id, client.id, industry="Retail")
        assert result.value.industry == "Retail"

    def test_projects_are_not_editable_through_update(self, ledger, company_id, client):
        result = ledger.clients.update_client(company_id, client.id, projects=())
        assert result.status is OperationStatus.VALIDATION_FAILED

    def test_other_company_cannot_read_or_delete(self, ledger, second_company_id, client):
        assert ledger.clients.get_client(second_company_id, client.id).status is OperationStatus.NOT_FOUND
        assert ledger.clients.delete_client(second_company_id, client.id).status is OperationStatus.NOT_FOUND

    def test_delete_client(self, ledger, company_id, client):
        assert ledger.clients.delete_client(company_id, client.id).is_success
        assert ledger.clients.list_clients(company_id).value == []


class TestContactPersons:

    def test_add_update_delete(self, ledger, company_id, client):
        person = ledger.clients.add_contact_person(
            company_id, client.id, name="Meera", position="CFO", is_primary=True,
        ).unwrap()

        updated = ledger.clients.update_contact_person(
            company_id, client.id, replace(person, phone="777"),
        ).unwrap()
        assert updated.phone == "777"
        assert ledger.clients.get_client(company_id, client.id).value.contact_persons == (updated,)

        assert ledger.clients.delete_contact_person(company_id, client.id, person.id).is_success
        assert ledger.clients.get_client(company_id, client.id).value.contact_persons == ()

    def test_delete_unknown_contact(self, ledger, company_id, client):
        result = ledger.clients.delete_contact_person(company_id, client.id, uuid4())
        assert result.status is OperationStatus.NOT_FOUND


class TestProjects:

    def test_add_project_defaults(self, project):
        assert project.status is ProjectStatus.ACTIVE
        assert project.payments == ()
        assert project.balance == Decimal("5000")

    def test_end_before_start_is_refused(self, ledger, company_id, client, today):
        result = ledger.clients.add_project(
            company_id, client.id, name="P", start_date=today,
            end_date=today - timedelta(days=1), contract_amount="1",
        )
        assert result.status is OperationStatus.VALIDATION_FAILED

    def test_update_project(self, ledger, company_id, client, project):
        result = ledger.clients.update_project(
            company_id, client.id, project.id, contract_amount="6000", project_manager="Dev",
        )

        assert result.value.contract_amount == Decimal("6000")
        assert result.value.project_manager == "Dev"

    def test_status_is_not_editable_through_update(self, ledger, company_id, client, project):
        result = ledger.clients.update_project(
            company_id, client.id, project.id, status=ProjectStatus.COMPLETED,
        )
        assert result.status is OperationStatus.VALIDATION_FAILED

    def test_set_project_status(self, ledger, company_id, client, project):
        result = ledger.clients.set_project_status(
            company_id, client.id, project.id, ProjectStatus.ON_HOLD,
        )
        assert result.value.status is ProjectStatus.ON_HOLD

    def test_unknown_project(self, ledger, company_id, client):
        result = ledger.clients.set_project_status(
            company_id, client.id, uuid4(), ProjectStatus.ON_HOLD,
        )
        assert result.status is OperationStatus.NOT_FOUND


class TestMilestones:

    def test_complete_milestone_defaults_to_today(self, ledger, company_id, client, project, today):
        milestone = ledger.clients.add_milestone(
            company_id, client.id, project.id, title="Design", due_date=today, amount="1000",
        ).unwrap()

        done = ledger.clients.complete_milestone(company_id, client.id, project.id, milestone.id).unwrap()

        assert done.is_completed
        assert done.completion_date == today

    def test_repeat_completion(self, ledger, company_id, client, project, today):
        milestone = ledger.clients.add_milestone(
            company_id, client.id, project.id, title="Design", due_date=today, amount="1000",
        ).unwrap()
        ledger.clients.complete_milestone(company_id, client.id, project.id, milestone.id, today)

        same = ledger.clients.complete_milestone(company_id, client.id, project.id, milestone.id, today)
        other = ledger.clients.complete_milestone(
            company_id, client.id, project.id, milestone.id, today + timedelta(days=1),
        )

        assert same.is_success
        assert other.status is OperationStatus.VALIDATION_FAILED


class TestProjectPayments:

    def test_payment_reduces_balance(self, ledger, company_id, client, project, today):
        ledger.clients.add_project_payment(
            company_id, client.id, project.id, amount="2000", date=today,
            payment_type=ProjectPaymentType.ADVANCE,
        )

        stored = ledger.clients.get_client(company_id, client.id).value.projects[0]
        assert stored.total_paid == Decimal("2000")
        assert stored.balance == Decimal("3000")

    def test_bank_transfer_payment_carries_details(self, ledger, company_id, client, project, today):
        payment = ledger.clients.add_bank_transfer_payment(
            company_id, client.id, project.id, amount="1000", date=today,
            bank_name="HDFC", account_number="001", transfer_date=today, swift_code="HDFCINBB",
        ).unwrap()

        assert payment.payment_method is ProjectPaymentMethod.BANK_TRANSFER
        assert payment.bank_details.swift_code == "HDFCINBB"

    def test_negative_payment_is_refused(self, ledger, company_id, client, project, today):
        result = ledger.clients.add_project_payment(
            company_id, client.id, project.id, amount="-1", date=today,
        )
        assert result.status is OperationStatus.VALIDATION_FAILED

    def test_client_totals(self, ledger, company_id, client, project, today):
        other = ledger.clients.add_project(
            company_id, client.id, name="App", start_date=today, contract_amount="1000",
        ).unwrap()
        ledger.clients.add_project_payment(company_id, client.id, project.id, amount="2000", date=today)
        ledger.clients.add_project_payment(company_id, client.id, other.id, amount="500", date=today)

        totals = ledger.clients.client_totals(company_id, client.id).value
        assert totals.contract_total == Decimal("6000")
        assert totals.paid_total == Decimal("2500")
        assert totals.balance == Decimal("3500")

        stored = ledger.clients.get_client(company_id, client.id).value
        assert stored.total_balance == totals.balance
