# account_audit/core/context.py

import contextvars
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class RequestContext:
    """Visitor metadata of the request currently being served."""

    ip_address: Optional[str] = None
    user_agent: Optional[str] = None
    request_uri: Optional[str] = None
    request_method: Optional[str] = None
    user_id: Optional[int] = None


correlation_id_ctx = contextvars.ContextVar("correlation_id", default=None)
request_context_ctx: contextvars.ContextVar[Optional[RequestContext]] = contextvars.ContextVar(
    "request_context", default=None
)


def current_request_context() -> RequestContext:
    """Return the ambient request context, or an empty one outside a request."""
    return request_context_ctx.get() or RequestContext()
