"""
bookkeeping_engines.tracer -- engine call tracing.

Responsibility:
    ``@traced_engine`` wraps a pure engine function and emits one
    BOOKKEEPING_ENGINE_TRACE debug record per call: engine name and
    version, the function, a fingerprint of chosen keyword inputs, the
    duration, and whether the call raised.

Architecture position:
    Engines -- support for the pure calculation layer.  Logging is the
    only side effect; arguments and results pass through untouched.

Invariants enforced:
    - The fingerprint depends only on the named keyword arguments: it is
      the first 16 hex digits of SHA-256 over their canonical JSON form
      (sorted keys; dates, Decimals, UUIDs and dataclasses as strings).
    - A call that raises is still traced, with ``raised`` set to the
      exception type, and the exception propagates unchanged.
"""

from __future__ import annotations

import functools
import hashlib
import json
import time
from collections.abc import Callable, Mapping
from typing import Any, TypeVar

from bookkeeping_kernel.logging_config import get_logger

_logger = get_logger("engines.tracer")

TRACE_EVENT = "BOOKKEEPING_ENGINE_TRACE"

F = TypeVar("F", bound=Callable[..., Any])


def compute_input_fingerprint(fields: tuple[str, ...], kwargs: Mapping[str, Any]) -> str:
    """Fingerprint of ``kwargs`` restricted to ``fields``; absent fields count as null."""
    selected = {name: kwargs.get(name) for name in fields}
    canonical = json.dumps(selected, sort_keys=True, default=str)
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()[:16]


def traced_engine(
    engine_name: str,
    engine_version: str,
    fingerprint_fields: tuple[str, ...] = (),
) -> Callable[[F], F]:
    """Trace every call of the decorated engine function."""

    def decorator(func: F) -> F:
        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            fingerprint = (
                compute_input_fingerprint(fingerprint_fields, kwargs) if fingerprint_fields else ""
            )
            raised: str | None = None
            started = time.perf_counter()
            try:
                return func(*args, **kwargs)
            except Exception as exc:
                raised = type(exc).__name__
                raise
            finally:
                _logger.debug(
                    TRACE_EVENT,
                    extra={
                        "trace_type": TRACE_EVENT,
                        "engine_name": engine_name,
                        "engine_version": engine_version,
                        "function": func.__qualname__,
                        "input_fingerprint": fingerprint,
                        "duration_ms": round((time.perf_counter() - started) * 1000, 3),
                        "raised": raised,
                    },
                )

        return wrapper  # type: ignore[return-value]

    return decorator
