"""
Employee Module (``bookkeeping_modules.employee``).

Staff records with their salary advances, salary payments, leaves and
duty records.
"""

from bookkeeping_modules.employee.models import (
    DutyRecord,
    EmergencyContact,
    Employee,
    Gender,
    Identification,
    IdentificationType,
    Leave,
    SalaryAdvance,
    SalaryPayment,
)
from bookkeeping_modules.employee.service import EmployeeService, EmployeeSummary

__all__ = [
    "DutyRecord",
    "EmergencyContact",
    "Employee",
    "EmployeeService",
    "EmployeeSummary",
    "Gender",
    "Identification",
    "IdentificationType",
    "Leave",
    "SalaryAdvance",
    "SalaryPayment",
]
