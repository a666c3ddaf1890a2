"""
Request Context Store

Holds per-request metadata (url, method, request id, user) for the
logical call chain currently executing.

The store is a ContextVar: every asyncio task runs in a copy of the
context of the code that created it, so a value set while handling one
request is never visible to a concurrently running, unrelated request.
"""

import contextvars
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Dict, Iterator, Mapping, Optional


@dataclass(frozen=True)
class RequestContext:
    """
    Metadata for one inbound request.

    Created once at the request boundary and read by every log call made
    while the request is being handled. All fields are optional and pass
    through unmodified.
    """

    url: Optional[str] = None
    method: Optional[str] = None
    request_id: Optional[str] = None
    user: Optional[Mapping[str, Any]] = None

    def to_dict(self) -> Dict[str, Any]:
        """Snapshot of the set fields, by value."""
        snapshot: Dict[str, Any] = {}
        if self.url is not None:
            snapshot["url"] = self.url
        if self.method is not None:
            snapshot["method"] = self.method
        if self.request_id is not None:
            snapshot["requestId"] = self.request_id
        if self.user is not None:
            snapshot["user"] = dict(self.user)
        return snapshot


_request_context_var: contextvars.ContextVar[Optional[RequestContext]] = contextvars.ContextVar(
    "request_context", default=None
)


def get_request_context() -> Optional[RequestContext]:
    """
    Get the request context of the current call chain.

    Returns None when no request context was set.
    """
    return _request_context_var.get()


def set_request_context(ctx: Optional[RequestContext]) -> contextvars.Token:
    """Set the request context for the current call chain."""
    return _request_context_var.set(ctx)


def reset_request_context(token: contextvars.Token) -> None:
    """Restore the request context that was visible before `token` was issued."""
    _request_context_var.reset(token)


def get_context_dict() -> Dict[str, Any]:
    """Current request context as a dict, empty when none is set."""
    ctx = _request_context_var.get()
    return ctx.to_dict() if ctx is not None else {}


@contextmanager
def request_scope(ctx: RequestContext) -> Iterator[RequestContext]:
    """
    Make `ctx` the request context for the duration of the block.

    Usage:
        with request_scope(RequestContext(url="/deals", method="GET")):
            await handle()
    """
    token = _request_context_var.set(ctx)
    try:
        yield ctx
    finally:
        _request_context_var.reset(token)
