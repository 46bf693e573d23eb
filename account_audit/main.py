# account_audit/main.py

from typing import Optional

from fastapi import FastAPI

from account_audit.api.dependencies import get_redis_client, get_session_token_service
from account_audit.api.errors import register_exception_handlers
from account_audit.api.middleware import CorrelationIdMiddleware, RequestContextMiddleware
from account_audit.config.logging import configure_logging
from account_audit.config.settings import AppSettings, get_settings
from account_audit.security.session_tokens import SessionTokenService


def create_app(
    settings: Optional[AppSettings] = None,
    token_service: Optional[SessionTokenService] = None,
) -> FastAPI:
    """
    Application shell: request-context middleware and error mapping. Routers are
    mounted by the host application.
    """
    settings = settings or get_settings()
    configure_logging(settings.log_level)
    if token_service is None:
        token_service = get_session_token_service(settings, get_redis_client(settings))

    app = FastAPI(
        title=settings.app_name,
        version=settings.version,
        debug=settings.debug,
    )

    # Middleware order: last added runs first (outermost). Request flow: CorrelationId -> RequestContext.
    app.add_middleware(RequestContextMiddleware, token_service=token_service)
    app.add_middleware(CorrelationIdMiddleware)

    register_exception_handlers(app)
    return app
