from collections.abc import Mapping
from typing import Any

from fastapi import Request
from starlette.exceptions import HTTPException

from edgelimit.core.errors import RateLimitExceeded


class RequestContext:
    """
    Per-request view handed to key generators, binding factories and handlers.

    Attributes:
        request: The incoming Starlette request.
        response_headers: Headers staged by handlers, copied onto the
            downstream response by RateLimitMiddleware.
    """

    def __init__(self, request: Request):
        self.request = request
        self.response_headers: dict[str, str] = {}

    @property
    def env(self) -> Mapping[str, Any]:
        """Bindings registered on the application, looked up by name."""
        return getattr(self.request.app.state, "bindings", None) or {}

    def set_headers(self, headers: Mapping[str, str]) -> None:
        self.response_headers.update(headers)

    def throw(self, status_code: int, message: str, headers: Mapping[str, str] | None = None) -> None:
        """Terminate the request with `status_code`."""
        if status_code == 429:
            raise RateLimitExceeded(message, headers=headers)
        raise HTTPException(status_code=status_code, detail=message, headers=dict(headers) if headers else None)
