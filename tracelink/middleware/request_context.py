"""
Request Context Middleware

Populates the request context at the HTTP boundary so every log line
written while handling the request carries its url, method, request id
and user.
"""

from collections.abc import Mapping
from uuid import uuid4

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

from ..observability.context import RequestContext, request_scope

REQUEST_ID_HEADER = "X-Request-ID"


def build_request_context(request: Request) -> RequestContext:
    """Build the request context for an inbound request."""
    request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid4())
    user = getattr(request.state, "user", None)
    return RequestContext(
        url=str(request.url),
        method=request.method,
        request_id=request_id,
        user=user if isinstance(user, Mapping) else None,
    )


class RequestContextMiddleware(BaseHTTPMiddleware):
    """
    Middleware that scopes a RequestContext to each request.

    Headers:
    - X-Request-ID: Unique ID for this request (generated if not provided)

    Authentication middleware that runs before this one may put a mapping
    on `request.state.user`; it is carried into the context as-is.
    """

    async def dispatch(self, request: Request, call_next):
        ctx = build_request_context(request)

        # Add to request state for easy access in route handlers
        request.state.request_id = ctx.request_id

        with request_scope(ctx):
            response = await call_next(request)

        response.headers[REQUEST_ID_HEADER] = ctx.request_id
        return response
