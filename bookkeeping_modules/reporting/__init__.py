"""Salary slip and client statement snapshots."""

from bookkeeping_modules.reporting.models import (
    ClientStatement,
    PaymentRecord,
    ProjectPaymentSummary,
    SalarySlip,
)

__all__ = ["ClientStatement", "PaymentRecord", "ProjectPaymentSummary", "SalarySlip"]
