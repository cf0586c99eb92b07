"""
Tests for the engine call tracer.
"""

from datetime import date
from decimal import Decimal

import pytest

from bookkeeping_engines.tracer import TRACE_EVENT, compute_input_fingerprint, traced_engine


@traced_engine("sample", "2.1", fingerprint_fields=("amount", "day"))
def _double(*, amount: Decimal, day: date, note: str = "") -> Decimal:
    if amount < 0:
        raise ValueError("negative")
    return amount * 2


def _traces(captured_logs):
    return [r for r in captured_logs() if r["message"] == TRACE_EVENT]


class TestFingerprint:

    def test_only_named_fields_count(self):
        base = {"amount": Decimal("1"), "day": date(2024, 1, 1)}

        assert compute_input_fingerprint(("amount", "day"), {**base, "note": "a"}) == \
            compute_input_fingerprint(("amount", "day"), {**base, "note": "b"})
        assert compute_input_fingerprint(("amount",), base) != \
            compute_input_fingerprint(("amount",), {"amount": Decimal("2")})

    def test_length(self):
        assert len(compute_input_fingerprint(("x",), {})) == 16


class TestTracedEngine:

    def test_result_passes_through_and_is_traced(self, captured_logs):
        assert _double(amount=Decimal("2.5"), day=date(2024, 1, 1)) == Decimal("5.0")

        trace = _traces(captured_logs)[-1]
        assert trace["engine_name"] == "sample"
        assert trace["engine_version"] == "2.1"
        assert trace["function"] == "_double"
        assert trace["raised"] is None
        assert trace["input_fingerprint"] == compute_input_fingerprint(
            ("amount", "day"), {"amount": Decimal("2.5"), "day": date(2024, 1, 1)},
        )

    def test_exceptions_are_traced_and_propagate(self, captured_logs):
        with pytest.raises(ValueError):
            _double(amount=Decimal("-1"), day=date(2024, 1, 1))

        assert _traces(captured_logs)[-1]["raised"] == "ValueError"

    def test_wrapped_function_keeps_its_name(self):
        assert _double.__name__ == "_double"
