"""
Module: bookkeeping_engines
Responsibility:
    Package entrypoint re-exporting the pure calculation engines used by
    the module services and the report generator.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import bookkeeping_kernel.domain, bookkeeping_kernel.logging_config
    and sibling engine modules.
    MUST NOT import bookkeeping_services or bookkeeping_modules.

Invariants enforced:
    - Purity: engines never read the clock; dates are parameters.
    - Decimal-only arithmetic for all monetary amounts.
    - Determinism: identical inputs always produce identical outputs.
"""

from bookkeeping_engines.expense import (
    ReportDrift,
    category_totals,
    expense_report_total,
    report_total_drift,
)
from bookkeeping_engines.payroll import (
    SALARY_PRORATION_DAYS,
    EmployeeTotals,
    SlipFigures,
    advances_in_period,
    current_balance,
    days_in_period,
    duty_days,
    employee_totals,
    leave_days,
    overtime_hours,
    paid_leave_days,
    payments_fully_within_period,
    payments_in_period,
    prorated_salary,
    salary_slip_figures,
    span_days,
)
from bookkeeping_engines.personal_account import AccountTotals, account_totals, statement
from bookkeeping_engines.receivables import (
    ClientTotals,
    StatementSection,
    client_totals,
    project_balance,
    project_total_paid,
    statement_sections,
)

__all__ = [
    "ReportDrift",
    "category_totals",
    "expense_report_total",
    "report_total_drift",
    "SALARY_PRORATION_DAYS",
    "EmployeeTotals",
    "SlipFigures",
    "advances_in_period",
    "current_balance",
    "days_in_period",
    "duty_days",
    "employee_totals",
    "leave_days",
    "overtime_hours",
    "paid_leave_days",
    "payments_fully_within_period",
    "payments_in_period",
    "prorated_salary",
    "salary_slip_figures",
    "span_days",
    "AccountTotals",
    "account_totals",
    "statement",
    "ClientTotals",
    "StatementSection",
    "client_totals",
    "project_balance",
    "project_total_paid",
    "statement_sections",
]
