"""
Fixed window counter over a KV namespace.

This is the counting primitive behind the window-counter strategy. One
counter instance is built per request around the resolved KV binding and
called with the request's rate limit key.

State layout (one entry per prefixed key):
    {"count": <requests seen in the window>, "start": <window start, epoch seconds>}

The window start is stored in the value rather than derived from the KV
expiration, because KV namespaces don't expose the remaining TTL reliably
and enforce a minimum TTL of 60 seconds.

Read-increment-write is not atomic. Two requests racing on the same key may
both be counted once; exact enforcement under contention is the store's
concern.
"""

import json
import math
import time
from collections.abc import Callable
from typing import Any

from edgelimit.core.strategies.base import Outcome

# KV namespaces refuse expirations shorter than a minute
MIN_TTL = 60


class FixedWindowCounter:
    """
    Counts requests per key in fixed windows of `period` seconds.

    Args:
        store: KV namespace exposing `get(key)` and `put(key, value, expiration_ttl)`.
        prefix: Prepended to every key before touching the store.
        limit: Maximum number of requests allowed per window.
        period: Window length in seconds.
        interval: Optional sub-interval in seconds. When > 0 the reported
            reset is rounded to the next sub-interval boundary inside the
            window instead of the window end.
        clock: Returns the current unix time in seconds.

    Example:
        >>> counter = FixedWindowCounter(store=InMemoryKVStore(), prefix="ratelimit:", limit=5, period=60)
        >>> await counter("ip:1.2.3.4")
        Outcome(success=True, remaining=4, reset=60)
    """

    def __init__(
        self,
        store: Any,
        prefix: str,
        limit: int,
        period: int,
        interval: int = 0,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.store = store
        self.prefix = prefix
        self.limit = limit
        self.period = period
        self.interval = interval
        self._clock = clock

    async def __call__(self, key: str) -> Outcome:
        storage_key = f"{self.prefix}{key}"
        now = self._clock()

        state = self._parse(await self.store.get(storage_key))
        if state is None or now >= state["start"] + self.period:
            count, start = 1, now
        else:
            count, start = state["count"] + 1, state["start"]

        expires_in = start + self.period - now
        await self.store.put(
            storage_key,
            json.dumps({"count": count, "start": start}),
            expiration_ttl=max(MIN_TTL, math.ceil(expires_in)),
        )

        reset = self._reset(now - start)
        if count <= self.limit:
            return Outcome(success=True, remaining=self.limit - count, reset=reset)
        return Outcome(success=False, remaining=0, reset=reset)

    def _reset(self, elapsed: float) -> int:
        """Seconds until the window ends, or until the next sub-interval boundary."""
        boundary = self.period
        if self.interval > 0:
            boundary = min(self.period, (math.floor(elapsed / self.interval) + 1) * self.interval)
        return max(0, math.ceil(boundary - elapsed))

    @staticmethod
    def _parse(raw: Any) -> dict[str, float] | None:
        if raw is None:
            return None
        if isinstance(raw, bytes):
            raw = raw.decode()
        try:
            data = json.loads(raw) if isinstance(raw, str) else raw
            return {"count": int(data["count"]), "start": float(data["start"])}
        except (ValueError, TypeError, KeyError):
            # unreadable state is treated as a fresh window
            return None
