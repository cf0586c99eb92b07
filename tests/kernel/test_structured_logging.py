"""
Tests for the structured logging layer.

Covers:
- JSON formatting of records, extras and exceptions
- LogContext binding and restoration
- Domain operations emit their named events
"""

import json
import logging
import sys
from datetime import date
from decimal import Decimal
from uuid import uuid4

from bookkeeping_kernel.exceptions import PersistenceError
from bookkeeping_kernel.logging_config import LogContext, StructuredFormatter, get_logger


def _format(record: logging.LogRecord) -> dict:
    return json.loads(StructuredFormatter().format(record))


def _record(msg: str, **extra) -> logging.LogRecord:
    record = logging.LogRecord("bookkeeping.test", logging.INFO, __file__, 1, msg, (), None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestStructuredFormatter:
    """One JSON object per record."""

    def test_basic_fields(self):
        payload = _format(_record("company_created"))

        assert payload["message"] == "company_created"
        assert payload["level"] == "INFO"
        assert payload["logger"] == "bookkeeping.test"
        assert "ts" in payload

    def test_extras_are_encoded(self):
        entity_id = uuid4()
        payload = _format(
            _record("x", entity_id=entity_id, amount=Decimal("1.10"), day=date(2024, 1, 2))
        )

        assert payload["entity_id"] == str(entity_id)
        assert payload["amount"] == "1.10"
        assert payload["day"] == "2024-01-02"

    def test_context_fields_are_included(self):
        with LogContext.bind(company_id="c-1", operation="probe"):
            payload = _format(_record("x"))

        assert payload["company_id"] == "c-1"
        assert payload["operation"] == "probe"

    def test_exception_fields_are_flattened(self):
        try:
            raise PersistenceError("clients", "disk full")
        except PersistenceError:
            record = logging.LogRecord(
                "bookkeeping.test", logging.WARNING, __file__, 1, "failed", (), sys.exc_info(),
            )
        payload = _format(record)

        assert payload["exc_type"] == "PersistenceError"
        assert payload["exc_code"] == "PERSISTENCE_FAILED"
        assert payload["exc_collection"] == "clients"
        assert "traceback" in payload


class TestLogContext:
    """Context binding."""

    def test_bind_restores_previous_values(self):
        LogContext.set(actor="owner")
        with LogContext.bind(actor="auditor", operation="op"):
            assert LogContext.get_all() == {"actor": "auditor", "operation": "op"}
        assert LogContext.get_all() == {"actor": "owner"}

    def test_clear_removes_everything(self):
        LogContext.set(correlation_id="abc", company_id="c")
        LogContext.clear()
        assert LogContext.get_all() == {}

    def test_logger_namespace(self):
        assert get_logger("modules.client").name == "bookkeeping.modules.client"


class TestDomainEvents:
    """Services log what they did under stable event names."""

    def test_employee_creation_is_logged(self, captured_logs, ledger, company_id, employee):
        events = [r for r in captured_logs() if r["message"] == "employee_created"]
        assert len(events) == 1
        assert events[0]["employee_id"] == str(employee.id)
        assert events[0]["operation"] == "create_employee"

    def test_engine_calls_are_traced(self, captured_logs, ledger, company_id, employee):
        ledger.employees.balance_summary(company_id, employee.id)
        traces = [r for r in captured_logs() if r["message"] == "BOOKKEEPING_ENGINE_TRACE"]
        assert any(t["engine_name"] == "payroll" for t in traces)
