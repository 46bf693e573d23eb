"""Dependency providers build services from settings."""

import pytest

from account_audit.api import dependencies
from account_audit.application.authorization_manager import AuthorizationManager
from account_audit.config.settings import AppSettings
from account_audit.governance.audit_models import LogLevel
from account_audit.infrastructure.database.session import build_engine, build_sessionmaker


@pytest.fixture
def settings():
    return AppSettings(
        jwt_secret="test-session-secret-at-least-32-characters",
        audit_enabled=False,
        audit_min_level=2,
        default_page_size=10,
        credential_iterations=1000,
    )


@pytest.fixture
def sessionmaker():
    return build_sessionmaker(build_engine("sqlite+aiosqlite:///:memory:"))


@pytest.mark.asyncio
async def test_audit_logger_honours_gating(settings, sessionmaker):
    audit_logger = dependencies.get_audit_logger(settings, sessionmaker)
    assert await audit_logger.record("svc", "msg", LogLevel.CRITICAL) is None


def test_services_are_built(settings, sessionmaker, fake_redis):
    credentials = dependencies.get_credential_service(settings)
    audit_logger = dependencies.get_audit_logger(settings, sessionmaker)
    manager = dependencies.get_authorization_manager(sessionmaker, audit_logger, credentials)
    tokens = dependencies.get_session_token_service(settings, fake_redis)

    assert isinstance(manager, AuthorizationManager)
    assert credentials.verify_password("secret1", credentials.hash_password("secret1"))
    assert tokens is not None
    assert dependencies.get_log_query_engine(settings, sessionmaker) is not None
    assert dependencies.get_log_triage(sessionmaker) is not None
    assert dependencies.get_account_directory(sessionmaker) is not None
