"""
inventory_engines.tracer -- INVENTORY_ENGINE_TRACE records for engine calls.

``@traced_engine`` logs one record per call of a decorated engine method
with engine_name, engine_version, input_fingerprint and duration_ms.

The fingerprint is whatever the ``fingerprint`` callable extracts from
the call's bound arguments (positional and keyword alike, defaults
applied, ``self`` dropped), hashed with the kernel's canonical-JSON
digest.  Engines choose a cheap summary of their input rather than
hashing whole snapshots:

    @traced_engine("duplicates", "1.0",
                   fingerprint=lambda args: args["snapshot"].collection_sizes())
    def scan(self, snapshot): ...

Without a ``fingerprint`` callable the field is the empty string.  The
decorator never mutates arguments; a failing engine call propagates
without a trace record.
"""

from __future__ import annotations

import functools
import inspect
import time
from collections.abc import Callable
from typing import Any

from inventory_kernel.logging_config import get_logger
from inventory_kernel.utils.hashing import short_digest

_logger = get_logger("engines.tracer")

TRACE_TYPE = "INVENTORY_ENGINE_TRACE"

Fingerprint = Callable[[dict[str, Any]], Any]


def bound_arguments(signature: inspect.Signature, args: tuple, kwargs: dict) -> dict[str, Any]:
    """Map a call onto parameter names, defaults filled in, ``self`` removed."""
    bound = signature.bind(*args, **kwargs)
    bound.apply_defaults()
    arguments = dict(bound.arguments)
    arguments.pop("self", None)
    return arguments


def traced_engine(
    engine_name: str,
    engine_version: str,
    fingerprint: Fingerprint | None = None,
) -> Callable:
    def decorator(func: Callable) -> Callable:
        signature = inspect.signature(func)

        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            input_fingerprint = ""
            if fingerprint is not None:
                input_fingerprint = short_digest(
                    fingerprint(bound_arguments(signature, args, kwargs))
                )

            started = time.monotonic()
            result = func(*args, **kwargs)
            _logger.info(TRACE_TYPE, extra={
                "trace_type": TRACE_TYPE,
                "engine_name": engine_name,
                "engine_version": engine_version,
                "input_fingerprint": input_fingerprint,
                "duration_ms": round((time.monotonic() - started) * 1000, 2),
                "function": func.__qualname__,
            })
            return result

        return wrapper

    return decorator
