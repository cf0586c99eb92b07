"""
Pytest fixtures for the bookkeeping test suite.

Provides:
- Structured logging configured once per session, plus a capture fixture
- A deterministic clock
- In-memory and SQLite persistence gateways
- A bootstrapped ``Ledger`` factory and the common seed records
"""

import json
import logging
from datetime import date, timedelta
from decimal import Decimal
from io import StringIO

import pytest

from bookkeeping_config import LedgerSettings
from bookkeeping_kernel.domain.clock import DeterministicClock
from bookkeeping_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    reset_logging,
)
from bookkeeping_kernel.services.persistence_gateway import InMemoryGateway, SqlAlchemyGateway
from bookkeeping_services.ledger import Ledger


# =============================================================================
# Logging fixtures
# =============================================================================


@pytest.fixture(autouse=True, scope="session")
def _configure_test_logging():
    """Configure structured logging for the test suite."""
    reset_logging()
    configure_logging(level=logging.DEBUG)
    yield
    reset_logging()


@pytest.fixture(autouse=True)
def _clear_log_context():
    """Clear LogContext between tests to prevent cross-test contamination."""
    LogContext.clear()
    yield
    LogContext.clear()


@pytest.fixture
def captured_logs():
    """
    Capture bookkeeping logs as parsed JSON dicts.

    Usage::

        def test_something(captured_logs, ledger):
            ledger.companies.create_company(name="Acme")
            logs = captured_logs()
            assert any(r["message"] == "company_created" for r in logs)
    """
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    root = logging.getLogger("bookkeeping")
    root.addHandler(handler)

    def _get_records() -> list[dict]:
        lines = stream.getvalue().strip().split("\n")
        return [json.loads(line) for line in lines if line]

    yield _get_records

    root.removeHandler(handler)


# =============================================================================
# Clock and persistence
# =============================================================================


@pytest.fixture
def deterministic_clock():
    """Clock fixed at 2024-01-01 12:00 UTC."""
    return DeterministicClock()


@pytest.fixture
def in_memory_gateway():
    return InMemoryGateway()


@pytest.fixture
def sqlite_gateway(tmp_path):
    """A SQLAlchemy gateway on a throwaway SQLite file."""
    gateway = SqlAlchemyGateway(f"sqlite:///{tmp_path / 'ledger.db'}")
    yield gateway
    gateway.close()


@pytest.fixture
def settings():
    return LedgerSettings()


# =============================================================================
# Ledger fixtures
# =============================================================================


@pytest.fixture
def make_ledger(in_memory_gateway, settings, deterministic_clock):
    """
    Factory for ledgers sharing the test gateway and clock.

    Calling it again bootstraps a second ledger over the same gateway,
    which is how tests check that saved state reloads.
    """

    def _make(gateway=None) -> Ledger:
        return Ledger.bootstrap(
            gateway=gateway or in_memory_gateway,
            settings=settings,
            clock=deterministic_clock,
        )

    return _make


@pytest.fixture
def ledger(make_ledger) -> Ledger:
    return make_ledger()


@pytest.fixture
def company_id(ledger):
    return ledger.active_company_id


@pytest.fixture
def today(deterministic_clock) -> date:
    return deterministic_clock.today()


@pytest.fixture
def employee(ledger, company_id, today):
    """A 3000/month employee who joined 90 days before today."""
    return ledger.employees.create_employee(
        company_id,
        name="Asha Rao",
        position="Engineer",
        monthly_salary=Decimal("3000"),
        join_date=today - timedelta(days=90),
        email="asha@example.com",
    ).unwrap()


@pytest.fixture
def client(ledger, company_id):
    return ledger.clients.create_client(
        company_id,
        name="Ravi Menon",
        company="Menon Traders",
        email="ravi@menon.example",
    ).unwrap()


@pytest.fixture
def second_company_id(ledger):
    return ledger.companies.create_company(name="Second Co").unwrap().id
