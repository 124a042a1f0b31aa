"""
Option validation for both limiter flavours.

Options are validated once, when the middleware is built, and never per
request. Checks run in a fixed order and stop at the first failure, raising
OptionError with a message naming the offending option.

Numeric options accept any real number (60, 60.0, Decimal("60")) and strings
starting with an integer ("60", "60s", "90.9"), truncated to int. Values that
don't parse (None, NaN, "abc", booleans) fail with the same message as an
out-of-range value.
"""

import math
import numbers
import re
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from decimal import Decimal
from typing import Any

from edgelimit.core import handlers
from edgelimit.core.bindings import BindingRef
from edgelimit.core.counter import FixedWindowCounter
from edgelimit.core.errors import OptionError
from edgelimit.core.keys import KeyGenerator

DEFAULT_PREFIX = "ratelimit:"
MIN_PERIOD = 60
LEADING_INT = re.compile(r"\s*[+-]?\d+")


@dataclass(frozen=True)
class ServiceOptions:
    binding: BindingRef
    key_generator: KeyGenerator
    success_handler: Callable[[Any], Any]
    error_handler: Callable[[Any], Any]


@dataclass(frozen=True)
class KVOptions:
    binding: BindingRef
    key_generator: KeyGenerator
    success_handler: Callable[[Any, int, int, int], Any]
    error_handler: Callable[[Any, int, int, int], Any]
    limit: int
    period: int
    interval: int = 0
    prefix: str = DEFAULT_PREFIX
    counter: Callable[..., Any] = FixedWindowCounter


def _check(condition: bool, message: str) -> None:
    if not condition:
        raise OptionError(message)


def _to_int(value: Any) -> int | None:
    """Integer-parse `value`. Returns None when it isn't a number."""
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, (numbers.Real, Decimal)):
        try:
            return int(value) if math.isfinite(value) else None
        except (ValueError, TypeError):
            return None
    if isinstance(value, str):
        match = LEADING_INT.match(value)
        return int(match.group()) if match else None
    return None


def _as_mapping(options: Mapping[str, Any] | None) -> Mapping[str, Any]:
    if options is None:
        return {}
    _check(isinstance(options, Mapping), "options must be a mapping")
    return options


def _check_binding(binding: Any) -> None:
    _check(
        (isinstance(binding, str) and len(binding) > 0) or callable(binding),
        "options.binding must be a string or a function",
    )


def _check_callables(**fields: Any) -> None:
    for name, value in fields.items():
        _check(callable(value), f"options.{name} must be a function")


def validate_service_options(options: Mapping[str, Any] | None) -> ServiceOptions:
    """
    Validate options for the service-backed limiter.

    Required: binding, key_generator.
    Optional: success_handler (no-op), error_handler (raises 429).
    """
    options = _as_mapping(options)
    binding = options.get("binding")
    key_generator = options.get("key_generator")
    success_handler = options.get("success_handler", handlers.service_success_handler)
    error_handler = options.get("error_handler", handlers.service_error_handler)

    _check_binding(binding)
    _check_callables(
        key_generator=key_generator,
        success_handler=success_handler,
        error_handler=error_handler,
    )

    return ServiceOptions(
        binding=binding,
        key_generator=key_generator,
        success_handler=success_handler,
        error_handler=error_handler,
    )


def validate_kv_options(options: Mapping[str, Any] | None) -> KVOptions:
    """
    Validate options for the window-counter limiter.

    Required: binding, limit, period, key_generator.
    Optional: prefix ("ratelimit:"), interval (0), success_handler (sets
    rate limit headers), error_handler (raises 429 with headers), counter
    (FixedWindowCounter).
    """
    options = _as_mapping(options)
    binding = options.get("binding")
    prefix = options.get("prefix", DEFAULT_PREFIX)
    limit = _to_int(options.get("limit"))
    period = _to_int(options.get("period"))
    interval = _to_int(options.get("interval", 0))
    key_generator = options.get("key_generator")
    success_handler = options.get("success_handler", handlers.kv_success_handler)
    error_handler = options.get("error_handler", handlers.kv_error_handler)
    counter = options.get("counter", FixedWindowCounter)

    _check_binding(binding)
    _check(isinstance(prefix, str) and len(prefix) > 0, "options.prefix must be a non-empty string")
    _check(limit is not None and limit >= 1, "options.limit must be >= 1")
    _check(
        period is not None and period >= MIN_PERIOD,
        f"options.period must be >= {MIN_PERIOD} seconds (KV TTL minimum)",
    )
    _check(interval is not None and interval >= 0, "options.interval must be >= 0")
    _check(interval <= period, "options.interval must be <= options.period")
    _check_callables(
        key_generator=key_generator,
        success_handler=success_handler,
        error_handler=error_handler,
        counter=counter,
    )

    return KVOptions(
        binding=binding,
        key_generator=key_generator,
        success_handler=success_handler,
        error_handler=error_handler,
        limit=limit,
        period=period,
        interval=interval,
        prefix=prefix,
        counter=counter,
    )
