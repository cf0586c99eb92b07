"""
Settings Loader (``bookkeeping_config.loader``).

Responsibility
--------------
Load YAML settings files, merge an override file over the packaged
defaults, and parse the result into a frozen ``LedgerSettings``.  The
public entry point is ``bookkeeping_config.get_active_settings()``.

Architecture position
---------------------
**Config layer**.  No dependency on kernel, engines, modules or services.

Invariants enforced
-------------------
* Unknown keys are refused; a typo never silently falls back to a default.
* ``compute_checksum`` is deterministic for equal settings.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Unknown keys or invalid values  -> ``ValueError``.
"""

from __future__ import annotations

import hashlib
import json
from pathlib import Path
from typing import Any

import yaml

from bookkeeping_config.schema import DefaultCompany, LedgerSettings

DEFAULTS_PATH = Path(__file__).parent / "defaults.yaml"

_SETTINGS_KEYS = frozenset(LedgerSettings.__dataclass_fields__)
_COMPANY_KEYS = frozenset(DefaultCompany.__dataclass_fields__)


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
        ValueError: if the document is not a mapping.
    """
    with open(path) as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"{path}: settings must be a mapping, got {type(data).__name__}")
    return data


def merge_settings(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Merge ``override`` over ``base``; nested mappings merge key by key."""
    merged = dict(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = {**merged[key], **value}
        else:
            merged[key] = value
    return merged


def parse_settings(data: dict[str, Any]) -> LedgerSettings:
    """
    Parse a merged settings dict.

    Raises:
        ValueError: for unknown keys or values ``LedgerSettings`` refuses.
    """
    unknown = sorted(set(data) - _SETTINGS_KEYS)
    if unknown:
        raise ValueError(f"Unknown settings: {', '.join(unknown)}")
    company_data = data.get("default_company") or {}
    unknown = sorted(set(company_data) - _COMPANY_KEYS)
    if unknown:
        raise ValueError(f"Unknown default_company settings: {', '.join(unknown)}")

    kwargs = {k: v for k, v in data.items() if k != "default_company"}
    return LedgerSettings(default_company=DefaultCompany(**company_data), **kwargs)


def load_settings(path: Path | None = None) -> LedgerSettings:
    """Packaged defaults, with ``path`` merged over them when given."""
    data = load_yaml_file(DEFAULTS_PATH)
    if path is not None:
        data = merge_settings(data, load_yaml_file(path))
    return parse_settings(data)


def compute_checksum(settings: LedgerSettings) -> str:
    """SHA-256 of the canonical JSON form of ``settings``."""
    canonical = json.dumps(settings.to_dict(), sort_keys=True, default=str)
    return hashlib.sha256(canonical.encode()).hexdigest()
