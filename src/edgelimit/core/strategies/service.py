from collections.abc import Mapping
from typing import Any

from edgelimit.core.bindings import require_capabilities, resolve_binding
from edgelimit.core.errors import BindingError
from edgelimit.core.options import ServiceOptions
from edgelimit.core.strategies.base import DecisionStrategy, Outcome, StrategyType
from edgelimit.core.utils import maybe_await

INVALID_BINDING = (
    "options.binding must be a rate limiter binding name "
    "or return a rate limiter binding exposing limit()"
)
INVALID_RESPONSE = "rate limiter binding limit() must return a result with a success flag"


class ServiceStrategy(DecisionStrategy):
    """
    Delegates the decision to an external rate limiting service.

    Limit and period live in the service's own configuration; this side
    only sends the key and reads back a success flag.
    """

    type = StrategyType.SERVICE

    def __init__(self, options: ServiceOptions):
        self.options = options

    async def decide(self, ctx: Any, key: str) -> Outcome:
        binding = require_capabilities(
            await resolve_binding(ctx, self.options.binding),
            "limit",
            message=INVALID_BINDING,
        )
        response = await maybe_await(binding.limit({"key": key}))
        if isinstance(response, Mapping) and "success" in response:
            success = response["success"]
        elif response is not None and hasattr(response, "success"):
            success = response.success
        else:
            raise BindingError(INVALID_RESPONSE)
        return Outcome(success=bool(success))

    async def on_success(self, ctx: Any, outcome: Outcome) -> None:
        await maybe_await(self.options.success_handler(ctx))

    async def on_error(self, ctx: Any, outcome: Outcome) -> None:
        await maybe_await(self.options.error_handler(ctx))
