"""
Collection Registry (``bookkeeping_modules.registry``).

Responsibility
--------------
Name the entity type stored in each durable collection.  The kernel's
``EntityCollections`` decodes records with these types, so the kernel
never has to import the modules that define them.

Architecture position
---------------------
**Modules layer** -- utility.  MUST NOT be imported by
``bookkeeping_kernel``.
"""

from types import MappingProxyType

from bookkeeping_kernel.store.collections import CollectionName
from bookkeeping_modules.account.models import AccountBalance
from bookkeeping_modules.client.models import Client
from bookkeeping_modules.company.models import Company
from bookkeeping_modules.employee.models import Employee
from bookkeeping_modules.expense.models import CompanyExpense, ExpenseReport
from bookkeeping_modules.reporting.models import ClientStatement, SalarySlip

COLLECTION_TYPES = MappingProxyType({
    CollectionName.COMPANIES: Company,
    CollectionName.EMPLOYEES: Employee,
    CollectionName.CLIENTS: Client,
    CollectionName.SALARY_SLIPS: SalarySlip,
    CollectionName.CLIENT_STATEMENTS: ClientStatement,
    CollectionName.COMPANY_EXPENSES: CompanyExpense,
    CollectionName.EXPENSE_REPORTS: ExpenseReport,
    CollectionName.ACCOUNT_BALANCE: AccountBalance,
})
