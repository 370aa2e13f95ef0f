"""Request context helpers using ContextVars.

The middleware binds one RequestContext per HTTP request. ContextVars are
task-local (and copied into the threadpool for sync endpoints), so concurrent
requests never see each other's values.
"""

from contextvars import ContextVar, Token
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class RequestContext:
    """Snapshot of the request a handler is serving.

    Empty strings stand in for anything that could not be resolved.
    """
    client_ip: str = ""
    method: str = ""
    path: str = ""
    request_id: Optional[str] = None


# Public ContextVars (names are stable API)
request_id_var: ContextVar[Optional[str]] = ContextVar("request_id", default=None)
request_context_var: ContextVar[Optional[RequestContext]] = ContextVar("request_context", default=None)


def bind_request_context(ctx: RequestContext) -> Token:
    return request_context_var.set(ctx)


def current_request_context() -> RequestContext:
    """Return the bound context, or an empty one outside of a request."""
    ctx = request_context_var.get()
    if ctx is None:
        return RequestContext(request_id=request_id_var.get())
    return ctx


def clear_context() -> None:
    """Reset context variables to defaults."""
    request_id_var.set(None)
    request_context_var.set(None)
