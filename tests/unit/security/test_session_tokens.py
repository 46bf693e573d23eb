"""SessionTokenService: issue, identity recovery and idempotent invalidation."""

from datetime import datetime, timedelta, timezone

import jwt
import pytest

from account_audit.domain.models.account import Account
from account_audit.security.exceptions import (
    InvalidSessionTokenError,
    SecurityError,
    SessionStoreError,
)
from account_audit.security.session_tokens import SessionTokenService

TEST_SECRET = "test-session-secret-at-least-32-characters"


def _account(account_id=7):
    return Account(
        email="a@x.com",
        first_name="Jo",
        last_name="Doe",
        credential_hash="h",
        roles={"ROLE_USER", "ROLE_ADMIN"},
        id=account_id,
    )


@pytest.fixture
def tokens(fake_redis):
    return SessionTokenService(TEST_SECRET, fake_redis, ttl_minutes=30)


def test_short_secret_rejected(fake_redis):
    with pytest.raises(SecurityError):
        SessionTokenService("too-short", fake_redis)


def test_issue_requires_saved_account(tokens):
    with pytest.raises(SecurityError):
        tokens.issue(_account(account_id=None))


@pytest.mark.asyncio
async def test_issue_then_identity(tokens):
    token = tokens.issue(_account())
    identity = await tokens.identity(token)

    assert identity is not None
    assert identity.account_id == 7
    assert identity.email == "a@x.com"
    assert identity.roles == ("ROLE_ADMIN", "ROLE_USER")
    assert identity.expires_at > datetime.now(timezone.utc)


@pytest.mark.asyncio
async def test_tokens_are_unique(tokens):
    first = await tokens.identity(tokens.issue(_account()))
    second = await tokens.identity(tokens.issue(_account()))
    assert first.token_id != second.token_id


@pytest.mark.asyncio
async def test_invalidate_revokes_until_expiry(tokens, fake_redis):
    token = tokens.issue(_account())
    await tokens.invalidate(token)

    assert await tokens.identity(token) is None
    (ttl,) = fake_redis.ttl.values()
    assert 0 < ttl <= 30 * 60


@pytest.mark.asyncio
async def test_invalidate_is_idempotent(tokens, fake_redis):
    token = tokens.issue(_account())
    await tokens.invalidate(token)
    await tokens.invalidate(token)
    assert len(fake_redis.ttl) == 1
    assert await tokens.identity(token) is None


@pytest.mark.asyncio
@pytest.mark.parametrize("token", ["", "garbage", "a.b.c"])
async def test_invalidate_unknown_token_is_noop(tokens, fake_redis, token):
    await tokens.invalidate(token)
    assert fake_redis.ttl == {}


@pytest.mark.asyncio
async def test_token_signed_with_other_secret_is_rejected(tokens, fake_redis):
    other = SessionTokenService("another-secret-that-is-32-characters!", fake_redis)
    assert await tokens.identity(other.issue(_account())) is None


@pytest.mark.asyncio
async def test_expired_token_is_rejected(tokens):
    payload = {
        "sub": "7",
        "iat": datetime.now(timezone.utc) - timedelta(hours=2),
        "exp": datetime.now(timezone.utc) - timedelta(hours=1),
        "jti": "expired",
        "type": "session",
    }
    token = jwt.encode(payload, TEST_SECRET, algorithm="HS256")
    assert await tokens.identity(token) is None
    await tokens.invalidate(token)


@pytest.mark.asyncio
async def test_wrong_token_type_is_rejected(tokens):
    now = datetime.now(timezone.utc)
    payload = {"sub": "7", "iat": now, "exp": now + timedelta(minutes=5), "jti": "x", "type": "refresh"}
    token = jwt.encode(payload, TEST_SECRET, algorithm="HS256")
    assert await tokens.identity(token) is None


@pytest.mark.asyncio
async def test_require_identity_raises(tokens):
    with pytest.raises(InvalidSessionTokenError) as exc_info:
        await tokens.require_identity("garbage")
    assert exc_info.value.kind == "InvalidSessionToken"


class BrokenRedis:
    async def set_nx_ex(self, key, value, ttl):
        raise ConnectionError("redis down")

    async def exists(self, key):
        raise ConnectionError("redis down")


@pytest.mark.asyncio
async def test_backend_failure_is_session_store_error():
    tokens = SessionTokenService(TEST_SECRET, BrokenRedis())
    token = tokens.issue(_account())
    with pytest.raises(SessionStoreError):
        await tokens.invalidate(token)
    with pytest.raises(SessionStoreError):
        await tokens.identity(token)
