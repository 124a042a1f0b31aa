"""
Default outcome handlers.

The service-backed strategy calls its handlers with the request context
only. The window-counter strategy calls them with
`(ctx, limit, remaining, reset)` so they can publish rate limit headers.
"""

import math
import time
from typing import Any

TOO_MANY_REQUESTS = "Too Many Requests"


def rate_limit_headers(limit: int, remaining: int, reset: int) -> dict[str, str]:
    """
    Build the standard rate limit headers.

    X-RateLimit-Reset is an absolute unix timestamp (now + reset seconds),
    rounded up.
    """
    return {
        "X-RateLimit-Limit": str(limit),
        "X-RateLimit-Remaining": str(remaining),
        "X-RateLimit-Reset": str(math.ceil(time.time() + reset)),
    }


def service_success_handler(ctx: Any) -> None:
    # No-op: the service keeps no quota state we could report
    pass


def service_error_handler(ctx: Any) -> None:
    ctx.throw(429, TOO_MANY_REQUESTS)


def kv_success_handler(ctx: Any, limit: int, remaining: int, reset: int) -> None:
    ctx.set_headers(rate_limit_headers(limit, remaining, reset))


def kv_error_handler(ctx: Any, limit: int, remaining: int, reset: int) -> None:
    headers = rate_limit_headers(limit, remaining, reset)
    headers["Retry-After"] = str(reset)
    ctx.throw(429, TOO_MANY_REQUESTS, headers=headers)
