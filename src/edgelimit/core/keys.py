"""
Rate limit key derivation.

A key generator receives the request context and returns the identity the
request is counted against. Returning a falsy value (None, "", False) skips
rate limiting for that request.
"""

from collections.abc import Callable
from typing import Any

from edgelimit.core.utils import maybe_await

KeyGenerator = Callable[[Any], Any]


async def derive_key(ctx: Any, key_generator: KeyGenerator) -> str | None:
    """Run the key generator once. Returns None when the request should bypass the limiter."""
    key = await maybe_await(key_generator(ctx))
    if not key:
        return None
    return str(key)


def _client_host(ctx: Any) -> str | None:
    client = getattr(ctx.request, "client", None)
    return client.host if client else None


def key_by_client_ip(ctx: Any) -> str | None:
    """Key on the peer address. Requests without one are not limited."""
    return _client_host(ctx)


def key_by_header(name: str) -> KeyGenerator:
    """Key on the value of a request header. Requests without it are not limited."""

    def generator(ctx: Any) -> str | None:
        return ctx.request.headers.get(name)

    return generator


def key_by_api_key_or_ip(header: str = "X-API-Key") -> KeyGenerator:
    """
    Key on the API key when present, falling back to the client IP.

    Keys are namespaced so an API key can never collide with an address:
    "api:<key>" or "ip:<host>" ("ip:unknown" without a peer address).
    """

    def generator(ctx: Any) -> str:
        api_key = ctx.request.headers.get(header)
        if api_key:
            return f"api:{api_key}"
        return f"ip:{_client_host(ctx) or 'unknown'}"

    return generator
