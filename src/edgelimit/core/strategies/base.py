"""
Decision strategies shared contract.

A strategy turns a rate limit key into a decision for the current request.
The set of strategies is closed: a service-backed one that asks an external
rate limiting binding, and a window-counter one that counts against a KV
namespace. The middleware core picks one at construction time and talks to
it only through this interface.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import StrEnum
from typing import Any


class StrategyType(StrEnum):
    SERVICE = "service"
    KV = "kv"


@dataclass(frozen=True)
class Outcome:
    """
    Immutable decision for one request.

    Attributes:
        success: True when the request may proceed.
        remaining: Requests left in the current window (0 when denied).
        reset: Seconds until the client should expect the limit to reset.

    The service-backed strategy carries no quota state, so it always
    reports remaining=0 and reset=0 and its handlers never see them.
    """

    success: bool
    remaining: int = 0
    reset: int = 0

    @classmethod
    def coerce(cls, result: Any) -> "Outcome":
        """Accept an Outcome or a mapping with success, remaining and reset."""
        if isinstance(result, cls):
            return result
        return cls(
            success=bool(result.get("success")),
            remaining=int(result.get("remaining", 0)),
            reset=int(result.get("reset", 0)),
        )


class DecisionStrategy(ABC):
    """
    Base class for the two decision strategies.

    Subclasses resolve their binding per request, produce an Outcome and
    know how to call the user's handlers with the right signature.
    """

    type: StrategyType

    @abstractmethod
    async def decide(self, ctx: Any, key: str) -> Outcome:
        """
        Decide whether the request identified by `key` may proceed.

        Args:
            ctx: The request context.
            key: The rate limit key derived for this request.

        Returns:
            Outcome with the decision and its metadata.

        Raises:
            BindingError: If the configured binding is unusable.
        """

    @abstractmethod
    async def on_success(self, ctx: Any, outcome: Outcome) -> None:
        """Invoke the configured success handler."""

    @abstractmethod
    async def on_error(self, ctx: Any, outcome: Outcome) -> None:
        """Invoke the configured error handler."""
