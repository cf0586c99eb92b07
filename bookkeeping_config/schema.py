"""
LedgerSettings schema.

The typed, frozen form of the YAML settings file.  The loader parses YAML
into these types; nothing else reads the YAML.
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, field
from typing import Any

VALID_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


# ---------------------------------------------------------------------------
# Default company
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class DefaultCompany:
    """The company created on first run when the ledger has none."""

    name: str = "My Company"
    address: str = ""
    phone: str = ""
    email: str = ""

    def __post_init__(self) -> None:
        if not self.name.strip():
            raise ValueError("default_company.name must not be empty")


# ---------------------------------------------------------------------------
# Settings
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class LedgerSettings:
    """Process-wide settings for one ledger."""

    database_url: str = "sqlite:///bookkeeping.db"
    default_company: DefaultCompany = field(default_factory=DefaultCompany)
    default_account_owner: str = "My Account"
    log_level: str = "INFO"
    salary_proration_days: int = 30

    def __post_init__(self) -> None:
        if not self.database_url:
            raise ValueError("database_url must not be empty")
        if not self.default_account_owner.strip():
            raise ValueError("default_account_owner must not be empty")
        if self.log_level.upper() not in VALID_LOG_LEVELS:
            raise ValueError(
                f"log_level must be one of {', '.join(VALID_LOG_LEVELS)}, got {self.log_level!r}"
            )
        if not isinstance(self.salary_proration_days, int) or self.salary_proration_days <= 0:
            raise ValueError(
                f"salary_proration_days must be a positive integer, got {self.salary_proration_days!r}"
            )

    @property
    def logging_level(self) -> int:
        return logging.getLevelName(self.log_level.upper())

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)
