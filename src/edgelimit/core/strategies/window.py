from typing import Any

from edgelimit.core.bindings import require_capabilities, resolve_binding
from edgelimit.core.options import KVOptions
from edgelimit.core.strategies.base import DecisionStrategy, Outcome, StrategyType
from edgelimit.core.utils import maybe_await

INVALID_BINDING = (
    "options.binding must be a KV namespace name "
    "or return a KV namespace exposing get() and put()"
)


class WindowStrategy(DecisionStrategy):
    """
    Fixed window counting against a KV namespace.

    A counter is built around the resolved namespace on every request; the
    counter owns the accounting and returns the Outcome.
    """

    type = StrategyType.KV

    def __init__(self, options: KVOptions):
        self.options = options

    async def decide(self, ctx: Any, key: str) -> Outcome:
        options = self.options
        store = require_capabilities(
            await resolve_binding(ctx, options.binding),
            "get",
            "put",
            message=INVALID_BINDING,
        )
        counter = options.counter(
            store=store,
            prefix=options.prefix,
            limit=options.limit,
            period=options.period,
            interval=options.interval,
        )
        return Outcome.coerce(await maybe_await(counter(key)))

    async def on_success(self, ctx: Any, outcome: Outcome) -> None:
        await maybe_await(
            self.options.success_handler(ctx, self.options.limit, outcome.remaining, outcome.reset)
        )

    async def on_error(self, ctx: Any, outcome: Outcome) -> None:
        await maybe_await(
            self.options.error_handler(ctx, self.options.limit, outcome.remaining, outcome.reset)
        )
