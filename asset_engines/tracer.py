"""
asset_engines.tracer -- ``@traced_engine`` for the depreciation functions.

Each successful call of a decorated engine function logs one DEBUG record,
``ASSET_ENGINE_TRACE``, carrying the engine name and version, the wrapped
function, how long the call took and a fingerprint of the inputs that
determine its result.  Two calls with the same fingerprint and engine
version must produce the same figures, which is what makes a reported
book value reproducible from the log alone.

The decorator never touches the arguments or the return value.  A call
that raises logs nothing; the exception reaches the caller unchanged.

Fingerprint:
    ``name=value`` pairs for the chosen parameters, joined with ``|``,
    SHA-256 hashed and cut to 16 hex characters.  Values are reduced to
    text by ``_canonicalize``: dataclasses by field, mappings by sorted
    key, sequences in order.  A chosen parameter that was not passed is
    written as ``null``.
"""

from __future__ import annotations

import dataclasses
import functools
import hashlib
import inspect
import time
from collections.abc import Callable, Mapping
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Any

from asset_kernel.logging_config import get_logger

logger = get_logger("engines.tracer")

TRACE_TYPE = "ASSET_ENGINE_TRACE"
FINGERPRINT_LENGTH = 16


def _canonicalize(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, Enum):
        return _canonicalize(value.value)
    if isinstance(value, str):
        return value
    if isinstance(value, (bool, int, float, Decimal)):
        return str(value)
    if isinstance(value, date):
        return value.isoformat()
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return _canonicalize(dataclasses.asdict(value))
    if isinstance(value, Mapping):
        pairs = sorted((str(k), _canonicalize(v)) for k, v in value.items())
        return "{" + ",".join(f"{k}:{v}" for k, v in pairs) + "}"
    if isinstance(value, (list, tuple)):
        return "[" + ",".join(map(_canonicalize, value)) + "]"
    return str(value)


def compute_input_fingerprint(
    fingerprint_fields: tuple[str, ...],
    arguments: Mapping[str, Any],
) -> str:
    """Hash the named arguments; fields absent from ``arguments`` hash as null."""
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
    """
    Decorate an engine function so each call logs ``ASSET_ENGINE_TRACE``.

    ``fingerprint_fields`` names parameters of the wrapped function.  They
    are matched whether passed positionally or by keyword, so
    ``book_value(asset, day)`` and ``book_value(asset=asset, as_of=day)``
    share a fingerprint.
    """

    def decorator(func: Callable) -> Callable:
        signature = inspect.signature(func)

        def _fingerprint(args: tuple, kwargs: dict) -> str:
            if not fingerprint_fields:
                return ""
            try:
                arguments = signature.bind_partial(*args, **kwargs).arguments
            except TypeError:
                # The call itself will fail with the real error.
                arguments = kwargs
            return compute_input_fingerprint(fingerprint_fields, arguments)

        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            fingerprint = _fingerprint(args, kwargs)
            started = time.perf_counter()
            result = func(*args, **kwargs)
            elapsed_ms = (time.perf_counter() - started) * 1000

            logger.debug(
                TRACE_TYPE,
                extra={
                    "trace_type": TRACE_TYPE,
                    "engine_name": engine_name,
                    "engine_version": engine_version,
                    "function": func.__qualname__,
                    "input_fingerprint": fingerprint,
                    "duration_ms": round(elapsed_ms, 2),
                },
            )
            return result

        return wrapper

    return decorator
