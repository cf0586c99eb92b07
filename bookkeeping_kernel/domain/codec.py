"""
Record codec (``bookkeeping_kernel.domain.codec``).

Responsibility
--------------
Encode a single frozen-dataclass entity into a JSON-safe ``dict`` and
decode it back.  This is the "encode/decode a single record" half of the
persistence gateway contract; gateways only ever see plain dicts.

Invariants enforced
-------------------
* Round-trip fidelity: ``decode_record(type(e), encode_record(e)) == e`` for
  every field, including identifiers and absent optionals.
* ``Decimal`` is encoded as its exact string form -- NEVER as ``float``.
* ``datetime`` is checked before ``date`` (it is a ``date`` subclass).

Failure modes
-------------
* ``TypeError`` for a field type the codec does not know.
* ``ValueError`` from the target type's constructor on malformed input.
"""

from __future__ import annotations

import types
from dataclasses import fields, is_dataclass
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from functools import lru_cache
from typing import Any, Union, get_args, get_origin, get_type_hints
from uuid import UUID


def encode_record(entity: Any) -> dict[str, Any]:
    """Encode a dataclass instance into a JSON-safe dict."""
    if not is_dataclass(entity) or isinstance(entity, type):
        raise TypeError(f"Expected a dataclass instance, got {type(entity).__name__}")
    return {f.name: _encode_value(getattr(entity, f.name)) for f in fields(entity)}


def decode_record(cls: type, data: dict[str, Any]) -> Any:
    """
    Decode a dict produced by ``encode_record`` into an instance of ``cls``.

    Keys missing from ``data`` fall back to the field default, so records
    written before a field existed still load.
    """
    hints = _type_hints(cls)
    kwargs: dict[str, Any] = {}
    for f in fields(cls):
        if f.name in data:
            kwargs[f.name] = _decode_value(hints[f.name], data[f.name])
    return cls(**kwargs)


@lru_cache(maxsize=None)
def _type_hints(cls: type) -> dict[str, Any]:
    return get_type_hints(cls)


def _encode_value(value: Any) -> Any:
    if value is None:
        return None
    if is_dataclass(value):
        return encode_record(value)
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, UUID):
        return str(value)
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, (tuple, list)):
        return [_encode_value(v) for v in value]
    if isinstance(value, (frozenset, set)):
        return sorted(_encode_value(v) for v in value)
    if isinstance(value, (str, int, bool)):
        return value
    raise TypeError(f"Cannot encode value of type {type(value).__name__}")


def _decode_value(tp: Any, raw: Any) -> Any:
    if raw is None:
        return None

    origin = get_origin(tp)
    if origin in (Union, types.UnionType):
        args = [a for a in get_args(tp) if a is not type(None)]
        if len(args) != 1:
            raise TypeError(f"Unsupported union type {tp!r}")
        return _decode_value(args[0], raw)
    if origin is tuple:
        item_type = get_args(tp)[0]
        return tuple(_decode_value(item_type, v) for v in raw)
    if origin is frozenset:
        item_type = get_args(tp)[0]
        return frozenset(_decode_value(item_type, v) for v in raw)

    if is_dataclass(tp):
        return decode_record(tp, raw)
    if isinstance(tp, type) and issubclass(tp, Enum):
        return tp(raw)
    if tp is UUID:
        return UUID(raw)
    if tp is Decimal:
        return Decimal(raw)
    if tp is datetime:
        return datetime.fromisoformat(raw)
    if tp is date:
        return date.fromisoformat(raw)
    if tp in (str, int, bool) or tp is Any:
        return raw
    raise TypeError(f"Cannot decode field of type {tp!r}")
