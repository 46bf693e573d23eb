"""Map typed errors to stable JSON responses: {"kind", "detail"}. No tracebacks leave the process."""

import logging

from fastapi import FastAPI
from fastapi.responses import JSONResponse

from account_audit.application.exceptions import ApplicationError
from account_audit.domain.exceptions import (
    DomainError,
    DomainValidationError,
    DuplicateAccountError,
    MissingContextError,
    NotFoundError,
    RoleAlreadyGrantedError,
    RoleNotGrantedError,
)
from account_audit.governance.exceptions import GovernanceError, InvalidFilterCombinationError
from account_audit.security.exceptions import InvalidSessionTokenError, SecurityError

logger = logging.getLogger(__name__)

# Most specific first; the first isinstance match wins.
STATUS_CODES = (
    (DomainValidationError, 400),
    (MissingContextError, 400),
    (InvalidFilterCombinationError, 400),
    (NotFoundError, 404),
    (DuplicateAccountError, 409),
    (RoleAlreadyGrantedError, 409),
    (RoleNotGrantedError, 409),
    (InvalidSessionTokenError, 401),
    (DomainError, 400),
    (GovernanceError, 400),
    (SecurityError, 500),
    (ApplicationError, 500),
)


def status_code_for(exc: Exception) -> int:
    for error_type, status_code in STATUS_CODES:
        if isinstance(exc, error_type):
            return status_code
    return 500


def error_body(exc: Exception) -> dict:
    body = {"kind": exc.kind, "detail": exc.message}
    field = getattr(exc, "field", None)
    if field is not None:
        body["field"] = field
    return body


async def typed_error_handler(request, exc):
    status_code = status_code_for(exc)
    if status_code >= 500:
        logger.error("request_failed", extra={"error_kind": exc.kind, "error": exc.message})
    return JSONResponse(status_code=status_code, content=error_body(exc))


async def unexpected_error_handler(request, exc: Exception):
    logger.exception("unexpected_error")
    return JSONResponse(
        status_code=500,
        content={"kind": "InternalError", "detail": "Internal server error"},
    )


def register_exception_handlers(app: FastAPI) -> None:
    for base in (DomainError, GovernanceError, SecurityError, ApplicationError):
        app.add_exception_handler(base, typed_error_handler)
    app.add_exception_handler(Exception, unexpected_error_handler)
