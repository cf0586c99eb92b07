"""
Personal Account Module (``bookkeeping_modules.account``).

The owner's personal-funds ledger of money spent for the company and
reimbursements received.
"""

from bookkeeping_modules.account.models import (
    AccountBalance,
    AccountTransaction,
    TransactionStatus,
    TransactionType,
)
from bookkeeping_modules.account.service import PersonalAccountService

__all__ = [
    "AccountBalance",
    "AccountTransaction",
    "PersonalAccountService",
    "TransactionStatus",
    "TransactionType",
]
