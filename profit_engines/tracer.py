"""
profit_engines.tracer -- ``@traced_engine`` and the PROFIT_ENGINE_TRACE record.

Responsibility:
    Wrap a pure calculator so each call leaves one structured log line
    naming the engine, its version, how long it ran, and a short hash
    of the inputs that determine its result.

Architecture position:
    Engines -- support code for the calculation layer.  The wrapper
    reads arguments and logs; it never touches the return value.

Invariants enforced:
    - Identical selected inputs hash identically across runs: mappings
      are rendered with sorted keys, sequences in order, and the digest
      is the first 16 hex chars of SHA-256.

Usage:
    @traced_engine("job_profit", "1.0", fingerprint_fields=("job", "org"))
    def calculate_job_profit(job, org, schema):
        ...
"""

from __future__ import annotations

import functools
import hashlib
import inspect
import time
from collections.abc import Callable, Mapping
from decimal import Decimal
from typing import Any

from profit_kernel.logging_config import get_logger

_logger = get_logger("engines.tracer")

TRACE_TYPE = "PROFIT_ENGINE_TRACE"
FINGERPRINT_LENGTH = 16


@functools.singledispatch
def _canonicalize(value: Any) -> str:
    # Frozen dataclasses have a field-ordered repr.
    return repr(value)


@_canonicalize.register(type(None))
def _(value) -> str:
    return "null"


@_canonicalize.register(int)
@_canonicalize.register(Decimal)
@_canonicalize.register(str)
def _(value) -> str:
    return str(value)


@_canonicalize.register(Mapping)
def _(value) -> str:
    body = ",".join(f"{key}:{_canonicalize(value[key])}" for key in sorted(value))
    return f"{{{body}}}"


@_canonicalize.register(list)
@_canonicalize.register(tuple)
def _(value) -> str:
    return f"[{','.join(map(_canonicalize, value))}]"


def compute_input_fingerprint(
    fingerprint_fields: tuple[str, ...],
    arguments: Mapping[str, Any],
) -> str:
    """Hash the named arguments; an absent argument hashes like ``None``."""
    canonical = "|".join(
        f"{name}={_canonicalize(arguments.get(name))}" for name in fingerprint_fields
    )
    digest = hashlib.sha256(canonical.encode("utf-8")).hexdigest()
    return digest[:FINGERPRINT_LENGTH]


def traced_engine(
    engine_name: str,
    engine_version: str,
    fingerprint_fields: tuple[str, ...] = (),
) -> Callable[[Callable], Callable]:
    """Decorate an engine entry point with PROFIT_ENGINE_TRACE logging.

    ``fingerprint_fields`` names parameters of the wrapped function; they
    are matched whether the caller passes them positionally or by keyword.
    """

    def decorator(func: Callable) -> Callable:
        bind = inspect.signature(func).bind_partial

        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            fingerprint = (
                compute_input_fingerprint(fingerprint_fields, bind(*args, **kwargs).arguments)
                if fingerprint_fields
                else ""
            )
            started = time.perf_counter()
            result = func(*args, **kwargs)
            elapsed_ms = (time.perf_counter() - started) * 1000

            _logger.info(TRACE_TYPE, extra={
                "trace_type": TRACE_TYPE,
                "engine_name": engine_name,
                "engine_version": engine_version,
                "input_fingerprint": fingerprint,
                "duration_ms": round(elapsed_ms, 2),
                "function": func.__qualname__,
            })
            return result

        return wrapper

    return decorator
