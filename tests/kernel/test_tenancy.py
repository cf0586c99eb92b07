"""
Tests for TenancyIndex.

Covers:
- attach / detach and the owned-id sets
- Cross-company ownership is refused
- Filtering entity lists to one company
- Unknown companies
"""

from dataclasses import replace
from uuid import uuid4

import pytest

from bookkeeping_kernel.exceptions import CompanyNotFoundError, TenancyInvariantError
from bookkeeping_kernel.invariants import assert_tenancy_disjoint
from bookkeeping_kernel.store.collections import CollectionName
from bookkeeping_kernel.store.tenancy import OwnedKind, TenancyIndex


@pytest.fixture
def tenancy(ledger):
    return TenancyIndex(ledger.collections.store(CollectionName.COMPANIES))


class TestAttachDetach:
    """Owned-set maintenance."""

    def test_attach_adds_to_owned_set(self, tenancy, company_id):
        entity_id = uuid4()
        tenancy.attach(company_id, OwnedKind.EMPLOYEE, entity_id)

        assert tenancy.is_owned(company_id, OwnedKind.EMPLOYEE, entity_id)
        assert tenancy.owned_ids(company_id, OwnedKind.EMPLOYEE) == frozenset({entity_id})
        assert tenancy.owner_of(OwnedKind.EMPLOYEE, entity_id) == company_id

    def test_attach_twice_is_a_no_op(self, tenancy, company_id, ledger):
        entity_id = uuid4()
        tenancy.attach(company_id, OwnedKind.CLIENT, entity_id)
        tenancy.attach(company_id, OwnedKind.CLIENT, entity_id)

        company = ledger.companies.get_company(company_id).unwrap()
        assert company.client_ids == (entity_id,)

    def test_attach_to_second_company_is_refused(self, tenancy, company_id, second_company_id):
        entity_id = uuid4()
        tenancy.attach(company_id, OwnedKind.EXPENSE, entity_id)

        with pytest.raises(TenancyInvariantError):
            tenancy.attach(second_company_id, OwnedKind.EXPENSE, entity_id)

        assert not tenancy.is_owned(second_company_id, OwnedKind.EXPENSE, entity_id)

    def test_kinds_are_independent(self, tenancy, company_id):
        entity_id = uuid4()
        tenancy.attach(company_id, OwnedKind.EMPLOYEE, entity_id)

        assert not tenancy.is_owned(company_id, OwnedKind.CLIENT, entity_id)

    def test_detach_reports_whether_present(self, tenancy, company_id):
        entity_id = uuid4()
        tenancy.attach(company_id, OwnedKind.SALARY_SLIP, entity_id)

        assert tenancy.detach(company_id, OwnedKind.SALARY_SLIP, entity_id) is True
        assert tenancy.detach(company_id, OwnedKind.SALARY_SLIP, entity_id) is False
        assert tenancy.owner_of(OwnedKind.SALARY_SLIP, entity_id) is None


class TestFilterOwned:
    """Scoping lists to one company."""

    def test_filter_keeps_only_owned_entities_in_order(
        self, ledger, company_id, second_company_id,
    ):
        ours = [
            ledger.clients.create_client(company_id, name=f"c{i}", company="X").unwrap()
            for i in range(3)
        ]
        theirs = ledger.clients.create_client(
            second_company_id, name="other", company="Y",
        ).unwrap()

        everything = ledger.collections.store(CollectionName.CLIENTS).list()
        tenancy = ledger.clients.tenancy

        assert tenancy.filter_owned(company_id, OwnedKind.CLIENT, everything) == ours
        assert tenancy.filter_owned(second_company_id, OwnedKind.CLIENT, everything) == [theirs]


class TestUnknownCompany:
    """Operations naming a company that does not exist."""

    def test_owned_ids_unknown_company(self, tenancy):
        with pytest.raises(CompanyNotFoundError):
            tenancy.owned_ids(uuid4(), OwnedKind.EMPLOYEE)

    def test_attach_unknown_company(self, tenancy):
        with pytest.raises(CompanyNotFoundError):
            tenancy.attach(uuid4(), OwnedKind.EMPLOYEE, uuid4())


class TestDisjointnessCheck:
    """The whole-ledger disjointness assertion."""

    def test_disjoint_ledger_passes(self, ledger, company_id, second_company_id):
        ledger.employees.create_employee(
            company_id, name="A", position="P", monthly_salary="100",
            join_date=ledger.clock.today(),
        )
        assert_tenancy_disjoint(
            ledger.companies.list_companies(), [k.value for k in OwnedKind],
        )

    def test_shared_id_is_reported(self, ledger, company_id, second_company_id):
        shared = uuid4()
        companies = ledger.collections.store(CollectionName.COMPANIES)
        for cid in (company_id, second_company_id):
            companies.update(replace(companies.get(cid), employee_ids=(shared,)))

        with pytest.raises(TenancyInvariantError):
            assert_tenancy_disjoint(companies.list(), ["employee_ids"])
        with pytest.raises(TenancyInvariantError):
            ledger.employees.tenancy.owner_of(OwnedKind.EMPLOYEE, shared)
