"""
Pure domain layer.

Value objects, results, workflow definitions, clocks and the record codec.
NO dependencies on SQLAlchemy, the database or I/O.
"""

from bookkeeping_kernel.domain.clock import Clock, DeterministicClock, SystemClock
from bookkeeping_kernel.domain.codec import decode_record, encode_record
from bookkeeping_kernel.domain.results import OperationResult, OperationStatus
from bookkeeping_kernel.domain.values import (
    ZERO,
    Address,
    DatePeriod,
    PaymentMethod,
    sum_amounts,
    to_decimal,
)
from bookkeeping_kernel.domain.workflow import Transition, TransitionResult, Workflow

__all__ = [
    "Clock",
    "DeterministicClock",
    "SystemClock",
    "decode_record",
    "encode_record",
    "OperationResult",
    "OperationStatus",
    "ZERO",
    "Address",
    "DatePeriod",
    "PaymentMethod",
    "sum_amounts",
    "to_decimal",
    "Transition",
    "TransitionResult",
    "Workflow",
]
