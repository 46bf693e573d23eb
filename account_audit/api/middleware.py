"""API middleware: correlation ID and request (visitor) context."""

import logging
import uuid
from typing import Optional

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from account_audit.core.context import (
    RequestContext,
    correlation_id_ctx,
    request_context_ctx,
)
from account_audit.security.exceptions import SecurityError
from account_audit.security.session_tokens import SessionTokenService

logger = logging.getLogger(__name__)

CORRELATION_HEADER = "X-Correlation-ID"
FORWARDED_FOR_HEADER = "X-Forwarded-For"
BEARER_PREFIX = "bearer "


class CorrelationIdMiddleware(BaseHTTPMiddleware):
    """Generate or preserve correlation ID; attach to request.state, response header, and logging context."""

    async def dispatch(self, request: Request, call_next) -> Response:
        correlation_id = request.headers.get(CORRELATION_HEADER) or str(uuid.uuid4())
        request.state.correlation_id = correlation_id
        token = correlation_id_ctx.set(correlation_id)
        try:
            response = await call_next(request)
        finally:
            correlation_id_ctx.reset(token)
        response.headers[CORRELATION_HEADER] = correlation_id
        return response


def client_ip(request: Request) -> Optional[str]:
    """First X-Forwarded-For hop if present, else the socket peer address."""
    forwarded = request.headers.get(FORWARDED_FOR_HEADER)
    if forwarded:
        first = forwarded.split(",")[0].strip()
        if first:
            return first
    return request.client.host if request.client else None


class RequestContextMiddleware(BaseHTTPMiddleware):
    """
    Capture visitor metadata (ip, user agent, uri, method) for audit records.
    With a token service, a valid bearer token also sets the acting user id.
    """

    def __init__(self, app, token_service: Optional[SessionTokenService] = None) -> None:
        super().__init__(app)
        self._token_service = token_service

    async def dispatch(self, request: Request, call_next) -> Response:
        context = RequestContext(
            ip_address=client_ip(request),
            user_agent=request.headers.get("user-agent"),
            request_uri=str(request.url),
            request_method=request.method,
            user_id=await self._user_id(request),
        )
        request.state.request_context = context
        token = request_context_ctx.set(context)
        try:
            return await call_next(request)
        finally:
            request_context_ctx.reset(token)

    async def _user_id(self, request: Request) -> Optional[int]:
        if self._token_service is None:
            return None
        authorization = request.headers.get("authorization", "")
        if not authorization.lower().startswith(BEARER_PREFIX):
            return None
        try:
            identity = await self._token_service.identity(
                authorization[len(BEARER_PREFIX):].strip()
            )
        except SecurityError as e:
            # Context capture only; the request continues as anonymous.
            logger.warning(
                "request_identity_unavailable",
                extra={"error_kind": e.kind, "error": e.message},
            )
            return None
        return identity.account_id if identity is not None else None
