"""
In-process stand-in for an external rate limiting service.

The service-backed strategy expects a binding exposing a single `limit()`
call, with limit and period configured on the service side rather than in
the middleware. WindowLimiterBinding provides that shape on top of a KV
store so the service strategy can run locally and in tests.
"""

from collections.abc import Mapping
from typing import Any

from edgelimit.core.counter import FixedWindowCounter


class WindowLimiterBinding:
    """
    Rate limiting service binding backed by a fixed window counter.

    Example:
        >>> binding = WindowLimiterBinding(InMemoryKVStore(), limit=10, period=60)
        >>> await binding.limit({"key": "user:123"})
        {'success': True}
    """

    def __init__(
        self,
        store: Any,
        limit: int,
        period: int,
        prefix: str = "ratelimit:svc:",
    ) -> None:
        self._counter = FixedWindowCounter(store=store, prefix=prefix, limit=limit, period=period)

    async def limit(self, options: Mapping[str, Any]) -> dict[str, bool]:
        outcome = await self._counter(options["key"])
        return {"success": outcome.success}
