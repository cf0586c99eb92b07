"""
Bookkeeping Modules.

Thin layers over the kernel stores and the engines.  Each module
contains:
- Domain models (the nouns)
- Workflows (state machines), where the records carry a status
- A service with the module's operations

Modules:
- Company: tenants and their owned-id sets
- Employee: staff, salary advances and payments, leaves, duty records
- Client: clients, contact persons, projects, project payments
- Expense: company expenses and expense reports
- Account: the owner's personal-funds account
- Reporting: salary slip and client statement snapshots
"""

from bookkeeping_modules import account, client, company, employee, expense, reporting
from bookkeeping_modules.registry import COLLECTION_TYPES

__all__ = [
    "COLLECTION_TYPES",
    "account",
    "client",
    "company",
    "employee",
    "expense",
    "reporting",
]
