"""
Rate limiting middleware core.

`rate_limiter()` and `kv_rate_limiter()` validate their options and return a
RateLimiter, an async callable with the usual middleware shape:

    await limiter(ctx, call_next)

Per request:
1. The key generator runs. A falsy key skips everything else and calls
   `call_next()` directly.
2. The strategy resolves its binding and decides.
3. Denied: the error handler runs and `call_next()` is never called.
4. Allowed: `call_next()` runs, then the success handler runs no matter how
   `call_next()` exited. A downstream exception propagates unchanged once
   the handler is done.
"""

from collections.abc import Awaitable, Callable, Mapping
from typing import Any

import structlog

from edgelimit.core.errors import BindingError
from edgelimit.core.keys import derive_key
from edgelimit.core.options import validate_kv_options, validate_service_options
from edgelimit.core.strategies.base import DecisionStrategy
from edgelimit.core.strategies.service import ServiceStrategy
from edgelimit.core.strategies.window import WindowStrategy

logger = structlog.get_logger()

CallNext = Callable[[], Awaitable[Any]]


class RateLimiter:
    def __init__(self, strategy: DecisionStrategy):
        self.strategy = strategy
        self.options = strategy.options

    async def __call__(self, ctx: Any, call_next: CallNext) -> None:
        key = await derive_key(ctx, self.options.key_generator)

        if key is None:
            logger.debug("rate_limit_skipped", strategy=self.strategy.type)
            await call_next()
            return

        try:
            outcome = await self.strategy.decide(ctx, key)
        except BindingError:
            logger.error("rate_limit_binding_invalid", strategy=self.strategy.type, key=key)
            raise

        logger.info(
            "rate_limit_check",
            strategy=self.strategy.type,
            key=key,
            success=outcome.success,
            remaining=outcome.remaining,
            reset=outcome.reset,
        )

        if not outcome.success:
            logger.warning("rate_limit_denied", strategy=self.strategy.type, key=key, reset=outcome.reset)
            await self.strategy.on_error(ctx, outcome)
            return

        try:
            await call_next()
        finally:
            await self.strategy.on_success(ctx, outcome)


def _merge(options: Mapping[str, Any] | None, overrides: dict[str, Any]) -> Mapping[str, Any] | None:
    if not overrides:
        return options
    if options is None:
        return overrides
    if not isinstance(options, Mapping):
        # let validation report the bad type
        return options
    return {**options, **overrides}


def rate_limiter(options: Mapping[str, Any] | None = None, **overrides: Any) -> RateLimiter:
    """
    Build a limiter that delegates decisions to a rate limiting service binding.

    Example:
        >>> limiter = rate_limiter(binding="RATE_LIMITER", key_generator=key_by_client_ip)
    """
    return RateLimiter(ServiceStrategy(validate_service_options(_merge(options, overrides))))


def kv_rate_limiter(options: Mapping[str, Any] | None = None, **overrides: Any) -> RateLimiter:
    """
    Build a limiter that counts requests in fixed windows on a KV namespace.

    Example:
        >>> limiter = kv_rate_limiter(
        ...     binding="RATE_LIMIT_KV",
        ...     limit=100,
        ...     period=60,
        ...     key_generator=key_by_api_key_or_ip(),
        ... )
    """
    return RateLimiter(WindowStrategy(validate_kv_options(_merge(options, overrides))))
