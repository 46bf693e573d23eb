"""Shared fixtures: in-memory stores, fake Redis revocation backend, request context."""

import pytest

from account_audit.application.account_directory import AccountDirectory
from account_audit.application.authorization_manager import AuthorizationManager
from account_audit.core.context import RequestContext
from account_audit.governance.audit_logger import AuditLogger
from account_audit.governance.log_query_engine import LogQueryEngine
from account_audit.infrastructure.memory.account_repository_memory import (
    InMemoryAccountRepository,
)
from account_audit.infrastructure.memory.log_repository_memory import InMemoryLogRepository
from account_audit.security.credentials import CredentialService
from account_audit.security.session_tokens import SessionTokenService

TEST_SECRET = "test-session-secret-at-least-32-characters"


class FakeRedis:
    """In-memory Redis for unit tests (revocation backend)."""

    def __init__(self):
        self._store: dict[str, str] = {}
        self.ttl: dict[str, int] = {}

    async def set_nx_ex(self, key: str, value: str, ttl: int) -> bool:
        if key in self._store:
            return False
        self._store[key] = value
        self.ttl[key] = ttl
        return True

    async def exists(self, key: str) -> int:
        return 1 if key in self._store else 0


@pytest.fixture
def fake_redis():
    return FakeRedis()


@pytest.fixture
def request_context():
    return RequestContext(
        ip_address="127.0.0.1",
        user_agent="pytest-agent",
        request_uri="http://test/register",
        request_method="POST",
    )


@pytest.fixture
def account_repository():
    return InMemoryAccountRepository()


@pytest.fixture
def log_repository(account_repository):
    return InMemoryLogRepository(accounts=account_repository)


@pytest.fixture
def audit_logger(log_repository):
    return AuditLogger(repository=log_repository)


@pytest.fixture
def credentials():
    # Low iteration count keeps tests fast.
    return CredentialService(iterations=1000)


@pytest.fixture
def directory(account_repository):
    return AccountDirectory(account_repository)


@pytest.fixture
def manager(account_repository, directory, audit_logger, credentials):
    return AuthorizationManager(
        repository=account_repository,
        directory=directory,
        audit_logger=audit_logger,
        credentials=credentials,
    )


@pytest.fixture
def query_engine(log_repository):
    return LogQueryEngine(log_repository)


@pytest.fixture
async def registered(manager, request_context):
    """One registered account: a@x.com / secret1."""
    return await manager.register("a@x.com", "Jo", "Doe", "secret1", context=request_context)


@pytest.fixture
def session_tokens(fake_redis):
    return SessionTokenService(TEST_SECRET, fake_redis)
