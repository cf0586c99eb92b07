"""
Hypothesis-based property tests.

Properties checked:
- Tenancy: whatever mix of creates, cross-company attempts and deletes
  runs, no id is owned by two companies and no company sees another's
  records.
- Payroll: proration over whole 30-day months is exact, and the employee
  balance always equals earned minus paid minus advances.
- Personal account: net balance equals the sum of amounts, and a
  repeated reimbursement with the same date never saves.
- Codec: an account transaction survives encode/decode unchanged.
"""

from datetime import date, timedelta
from decimal import Decimal
from uuid import uuid4

from hypothesis import HealthCheck, given, settings
from hypothesis import strategies as st

from bookkeeping_engines.payroll import employee_totals, prorated_salary
from bookkeeping_kernel.domain.codec import decode_record, encode_record
from bookkeeping_kernel.domain.results import OperationStatus
from bookkeeping_kernel.domain.values import DatePeriod, PaymentMethod
from bookkeeping_kernel.invariants import assert_tenancy_disjoint
from bookkeeping_kernel.services.persistence_gateway import InMemoryGateway
from bookkeeping_kernel.store.tenancy import OwnedKind
from bookkeeping_modules.account import AccountTransaction, TransactionStatus, TransactionType

FIXTURE_SETTINGS = settings(
    max_examples=40,
    deadline=None,
    suppress_health_check=[HealthCheck.function_scoped_fixture],
)

amounts = st.decimals(
    min_value=Decimal("0"), max_value=Decimal("1000000"), places=2,
    allow_nan=False, allow_infinity=False,
)
signed_amounts = st.decimals(
    min_value=Decimal("-100000"), max_value=Decimal("100000"), places=2,
    allow_nan=False, allow_infinity=False,
)
days = st.dates(min_value=date(2000, 1, 1), max_value=date(2040, 12, 31))


class _Dated:
    def __init__(self, amount: Decimal, day: date):
        self.amount = amount
        self.date = day


# =============================================================================
# Tenancy
# =============================================================================

tenancy_ops = st.lists(
    st.tuples(
        st.sampled_from(["create", "cross_delete", "delete"]),
        st.integers(min_value=0, max_value=1),
    ),
    min_size=1,
    max_size=25,
)


class TestTenancyProperties:

    @FIXTURE_SETTINGS
    @given(ops=tenancy_ops)
    def test_owned_sets_stay_disjoint(self, make_ledger, ops):
        ledger = make_ledger(InMemoryGateway())
        companies = [
            ledger.active_company_id,
            ledger.companies.create_company(name="Other").unwrap().id,
        ]
        owned: dict = {c: set() for c in companies}

        for op, which in ops:
            company_id, other_id = companies[which], companies[1 - which]
            if op == "create":
                employee = ledger.employees.create_employee(
                    company_id, name="E", position="P", monthly_salary="100",
                    join_date=date(2024, 1, 1),
                ).unwrap()
                owned[company_id].add(employee.id)
            elif owned[company_id]:
                target = sorted(owned[company_id])[0]
                if op == "cross_delete":
                    result = ledger.employees.delete_employee(other_id, target)
                    assert result.status is OperationStatus.NOT_FOUND
                else:
                    assert ledger.employees.delete_employee(company_id, target).is_success
                    owned[company_id].discard(target)

        assert_tenancy_disjoint(ledger.companies.list_companies(), [k.value for k in OwnedKind])
        for company_id in companies:
            visible = {e.id for e in ledger.employees.list_employees(company_id).value}
            assert visible == owned[company_id]


# =============================================================================
# Payroll
# =============================================================================


class TestPayrollProperties:

    @given(monthly=amounts, start=days, months=st.integers(min_value=0, max_value=24))
    def test_whole_months_prorate_exactly(self, monthly, start, months):
        period = DatePeriod(start, start + timedelta(days=30 * months))
        assert prorated_salary(monthly_salary=monthly, period=period) == monthly * months

    @given(
        monthly=amounts,
        join=days,
        offset=st.integers(min_value=-400, max_value=400),
        advances=st.lists(amounts, max_size=5),
        payments=st.lists(amounts, max_size=5),
    )
    def test_balance_identity(self, monthly, join, offset, advances, payments):
        totals = employee_totals(
            monthly_salary=monthly,
            join_date=join,
            advances=[_Dated(a, join) for a in advances],
            payments=[_Dated(p, join) for p in payments],
            as_of=join + timedelta(days=offset),
        )

        assert totals.total_earned >= 0
        if offset <= 0:
            assert totals.total_earned == 0
        assert totals.current_balance == (
            totals.total_earned - totals.total_paid - totals.total_advances
        )
        assert totals.total_paid == sum(payments, Decimal("0"))


# =============================================================================
# Personal account
# =============================================================================


class TestAccountProperties:

    @FIXTURE_SETTINGS
    @given(values=st.lists(signed_amounts, min_size=1, max_size=10))
    def test_net_balance_is_sum_of_amounts(self, make_ledger, values):
        ledger = make_ledger(InMemoryGateway())
        for value in values:
            ledger.account.add_transaction(
                amount=value, date=date(2024, 1, 1), description="t", type=TransactionType.OTHER,
            ).unwrap()

        totals = ledger.account.totals().value
        assert totals.net_balance == sum(values, Decimal("0"))
        assert totals.pending == totals.net_balance
        assert totals.reimbursed == 0

    @FIXTURE_SETTINGS
    @given(day=days, repeats=st.integers(min_value=1, max_value=4))
    def test_repeated_reimbursement_is_idempotent(self, make_ledger, day, repeats):
        ledger = make_ledger(InMemoryGateway())
        txn = ledger.account.add_transaction(
            amount="10", date=date(2024, 1, 1), description="t", type=TransactionType.OTHER,
        ).unwrap()
        first = ledger.account.update_transaction_status(txn.id, TransactionStatus.REIMBURSED, day)
        ledger.gateway.save_log.clear()

        for _ in range(repeats):
            again = ledger.account.update_transaction_status(txn.id, TransactionStatus.REIMBURSED, day)
            assert again.value == first.value

        assert ledger.gateway.save_log == []


# =============================================================================
# Codec
# =============================================================================


class TestCodecProperties:

    @given(
        amount=signed_amounts,
        day=days,
        description=st.text(max_size=40),
        status=st.sampled_from(TransactionStatus),
        method=st.one_of(st.none(), st.sampled_from(PaymentMethod)),
        notes=st.one_of(st.none(), st.text(max_size=20)),
    )
    def test_account_transaction_survives_encoding(self, amount, day, description, status, method, notes):
        txn = AccountTransaction(
            id=uuid4(),
            date=day,
            amount=amount,
            description=description,
            type=TransactionType.EXPENSE_PAYMENT,
            status=status,
            payment_method=method,
            notes=notes,
        )
        assert decode_record(AccountTransaction, encode_record(txn)) == txn
