"""Request-context and correlation-id middleware on the application shell."""

import pytest
from httpx import ASGITransport, AsyncClient

from account_audit.config.settings import AppSettings
from account_audit.core.context import correlation_id_ctx, current_request_context
from account_audit.domain.models.account import Account
from account_audit.main import create_app
from account_audit.security.session_tokens import SessionTokenService


@pytest.fixture
def settings():
    return AppSettings(
        jwt_secret="test-session-secret-at-least-32-characters",
        environment="test",
    )


@pytest.fixture
def app(settings, session_tokens, manager):
    app = create_app(settings=settings, token_service=session_tokens)

    @app.get("/context")
    async def context():
        ctx = current_request_context()
        return {
            "ip_address": ctx.ip_address,
            "user_agent": ctx.user_agent,
            "request_uri": ctx.request_uri,
            "request_method": ctx.request_method,
            "user_id": ctx.user_id,
            "correlation_id": correlation_id_ctx.get(),
        }

    @app.post("/register")
    async def register():
        account = await manager.register("web@x.com", "Jo", "Doe", "secret1")
        return {"id": account.id, "ip_address": account.ip_address}

    return app


@pytest.fixture
async def client(app):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.mark.asyncio
async def test_correlation_id_generated(client: AsyncClient):
    """When X-Correlation-ID is not sent, response has a generated correlation ID."""
    r = await client.get("/context")
    assert r.status_code == 200
    assert r.headers["X-Correlation-ID"]
    assert r.json()["correlation_id"] == r.headers["X-Correlation-ID"]


@pytest.mark.asyncio
async def test_correlation_id_preserved_when_passed(client: AsyncClient):
    r = await client.get("/context", headers={"X-Correlation-ID": "my-correlation-123"})
    assert r.headers["X-Correlation-ID"] == "my-correlation-123"
    assert r.json()["correlation_id"] == "my-correlation-123"


@pytest.mark.asyncio
async def test_request_context_captured(client: AsyncClient):
    """Visitor ip, user agent, uri and method are available to handlers."""
    r = await client.get("/context?page=2", headers={"User-Agent": "pytest-browser"})
    data = r.json()
    assert data["ip_address"] == "127.0.0.1"
    assert data["user_agent"] == "pytest-browser"
    assert data["request_uri"] == "http://test/context?page=2"
    assert data["request_method"] == "GET"
    assert data["user_id"] is None


@pytest.mark.asyncio
async def test_forwarded_for_first_hop_wins(client: AsyncClient):
    r = await client.get("/context", headers={"X-Forwarded-For": "203.0.113.7, 10.0.0.1"})
    assert r.json()["ip_address"] == "203.0.113.7"


@pytest.mark.asyncio
async def test_bearer_token_sets_acting_user(client: AsyncClient, session_tokens):
    account = Account(email="a@x.com", first_name="Jo", last_name="Doe", credential_hash="h", id=42)
    token = session_tokens.issue(account)
    r = await client.get("/context", headers={"Authorization": f"Bearer {token}"})
    assert r.json()["user_id"] == 42


@pytest.mark.asyncio
async def test_revoked_or_invalid_token_is_anonymous(client: AsyncClient, session_tokens):
    account = Account(email="a@x.com", first_name="Jo", last_name="Doe", credential_hash="h", id=42)
    token = session_tokens.issue(account)
    await session_tokens.invalidate(token)

    revoked = await client.get("/context", headers={"Authorization": f"Bearer {token}"})
    garbage = await client.get("/context", headers={"Authorization": "Bearer nonsense"})
    assert revoked.json()["user_id"] is None
    assert garbage.json()["user_id"] is None


@pytest.mark.asyncio
async def test_registration_uses_request_context(client: AsyncClient, log_repository):
    """Handlers need not pass visitor info; the audit record carries it too."""
    r = await client.post("/register", headers={"User-Agent": "signup-form"})
    assert r.status_code == 200
    assert r.json()["ip_address"] == "127.0.0.1"

    (entry,) = await log_repository.find({}, 0, 10)
    assert entry.message == "new account registered: web@x.com"
    assert entry.user_agent == "signup-form"
    assert entry.request_method == "POST"


class UnavailableRedis:
    async def set_nx_ex(self, key, value, ttl):
        raise ConnectionError("redis down")

    async def exists(self, key):
        raise ConnectionError("redis down")


@pytest.mark.asyncio
async def test_revocation_store_outage_leaves_request_anonymous(settings):
    """A bearer token that cannot be checked does not fail the request."""
    tokens = SessionTokenService(
        "test-session-secret-at-least-32-characters", UnavailableRedis()
    )
    app = create_app(settings=settings, token_service=tokens)

    @app.get("/whoami")
    async def whoami():
        return {"user_id": current_request_context().user_id}

    account = Account(email="a@x.com", first_name="Jo", last_name="Doe", credential_hash="h", id=42)
    token = tokens.issue(account)
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        r = await ac.get("/whoami", headers={"Authorization": f"Bearer {token}"})

    assert r.status_code == 200
    assert r.json() == {"user_id": None}
