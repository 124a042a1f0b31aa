"""
Exception types raised by the rate limiting layer.

Three families are kept apart on purpose:

- OptionError: invalid middleware options, raised at construction time.
- BindingError: the configured binding resolved to something unusable at
  request time. This is a caller misconfiguration and never a 429.
- RateLimitExceeded: the terminal "too many requests" signal raised by the
  default error handlers through the request context.
"""

from collections.abc import Mapping

from starlette.exceptions import HTTPException


class EdgeLimitError(Exception):
    """Base class for errors raised by edgelimit itself."""


class OptionError(EdgeLimitError, TypeError):
    """Raised when middleware options fail validation."""


class BindingError(EdgeLimitError, TypeError):
    """Raised when a resolved binding lacks the capabilities a strategy needs."""


class RateLimitExceeded(HTTPException):
    """
    HTTP 429 raised when a request is rejected by the rate limiter.

    Carries the rate limit headers so the host can render them on the
    rejection response.
    """

    def __init__(
        self,
        detail: str = "Too Many Requests",
        headers: Mapping[str, str] | None = None,
    ) -> None:
        super().__init__(status_code=429, detail=detail, headers=dict(headers) if headers else None)
