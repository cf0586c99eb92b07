"""
bookkeeping_config -- single public entrypoint for ledger settings.

Responsibility:
    Provides the way to obtain settings at runtime through
    ``get_active_settings()``.  Settings come from the packaged
    ``defaults.yaml`` with an optional YAML file merged over it.

Architecture position:
    Configuration -- sits beside the kernel.  The kernel MUST NEVER import
    from ``bookkeeping_config``; the ledger facade in
    ``bookkeeping_services`` reads settings and passes plain values down.

Failure modes:
    - ``FileNotFoundError`` -- the named settings file does not exist.
    - ``ValueError`` -- unknown keys or invalid values.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

from bookkeeping_config.loader import compute_checksum, load_settings
from bookkeeping_config.schema import DefaultCompany, LedgerSettings

_logger = logging.getLogger("bookkeeping.config")

CONFIG_ENV_VAR = "BOOKKEEPING_CONFIG"


def get_active_settings(path: Path | str | None = None) -> LedgerSettings:
    """
    Load the effective settings.

    ``path`` wins over the ``BOOKKEEPING_CONFIG`` environment variable;
    with neither, the packaged defaults are returned.  Every call emits a
    ``BOOKKEEPING_CONFIG_TRACE`` record with the settings checksum.
    """
    source = path or os.environ.get(CONFIG_ENV_VAR) or None
    settings = load_settings(Path(source) if source else None)
    _logger.info(
        "BOOKKEEPING_CONFIG_TRACE",
        extra={
            "trace_type": "BOOKKEEPING_CONFIG_TRACE",
            "source": str(source) if source else "defaults",
            "checksum": compute_checksum(settings),
        },
    )
    return settings


__all__ = [
    "CONFIG_ENV_VAR",
    "DefaultCompany",
    "LedgerSettings",
    "compute_checksum",
    "get_active_settings",
]
