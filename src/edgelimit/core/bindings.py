"""
Binding resolution.

A binding is configured either as a name, looked up in the request's
environment mapping, or as a factory called with the request context. This
is the only place that distinguishes the two; strategies just receive
whatever came out.

Nothing is cached: every request that needs a binding resolves it again.
"""

from collections.abc import Callable
from typing import Any

from edgelimit.core.errors import BindingError
from edgelimit.core.utils import maybe_await

BindingRef = str | Callable[[Any], Any]


async def resolve_binding(ctx: Any, binding: BindingRef) -> Any:
    """
    Resolve a configured binding reference into a live handle.

    Args:
        ctx: The request context. Must expose `env` for named bindings.
        binding: Binding name, or factory taking the request context.

    Returns:
        The binding, or None when a name is not present in the environment.
        Factory results are returned verbatim.
    """
    if isinstance(binding, str):
        env = getattr(ctx, "env", None)
        if env is None:
            return None
        return env.get(binding)
    return await maybe_await(binding(ctx))


def require_capabilities(binding: Any, *names: str, message: str) -> Any:
    """
    Check that `binding` exposes a callable for each of `names`.

    Raises:
        BindingError: With `message` when the binding is missing or incomplete.
    """
    if binding is None or not all(callable(getattr(binding, name, None)) for name in names):
        raise BindingError(message)
    return binding
