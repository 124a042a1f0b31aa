from fastapi import Request, Response
from starlette.exceptions import HTTPException
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import JSONResponse
import structlog

from edgelimit.api.context import RequestContext
from edgelimit.core.limiter import RateLimiter

logger = structlog.get_logger()


class RateLimitMiddleware(BaseHTTPMiddleware):
    """
    Runs a RateLimiter in front of the application.

    HTTPExceptions raised by the limiter's handlers become JSON error
    responses carrying the exception headers. Binding errors and downstream
    failures are not caught here.
    """

    def __init__(self, app, limiter: RateLimiter):
        super().__init__(app)
        self.limiter = limiter

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(
            path=request.url.path,
            method=request.method,
        )

        ctx = RequestContext(request)
        response: Response | None = None

        async def next_handler() -> None:
            nonlocal response
            response = await call_next(request)

        try:
            await self.limiter(ctx, next_handler)
        except HTTPException as exc:
            return self._error_response(exc)

        if response is None:
            # a custom error handler declined to throw
            response = JSONResponse(
                status_code=429,
                content={"error": "rate_limit_exceeded", "message": "Too Many Requests"},
            )

        for key, value in ctx.response_headers.items():
            response.headers[key] = value

        return response

    @staticmethod
    def _error_response(exc: HTTPException) -> JSONResponse:
        headers = dict(exc.headers or {})
        if exc.status_code == 429:
            content = {"error": "rate_limit_exceeded", "message": exc.detail}
            if headers.get("Retry-After", "").isdigit():
                content["retry_after"] = int(headers["Retry-After"])
        else:
            content = {"error": "http_error", "message": exc.detail}
        return JSONResponse(status_code=exc.status_code, content=content, headers=headers)
