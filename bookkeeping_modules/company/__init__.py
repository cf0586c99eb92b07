"""
Company Module (``bookkeeping_modules.company``).

Companies are the tenants of the ledger.  Each one carries the owned-id
sets through which every other module filters its records.
"""

from bookkeeping_modules.company.models import Company
from bookkeeping_modules.company.service import CompanyService

__all__ = ["Company", "CompanyService"]
