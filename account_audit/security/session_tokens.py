"""
Session Tokens

Issue, verify and revoke bearer session tokens (signed JWT). Revocation is tracked
by token id in a TTL store so that logout can be retried safely.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional, Protocol, Tuple
from uuid import uuid4

import jwt
from jwt.exceptions import InvalidTokenError

from account_audit.domain.models.account import Account
from account_audit.security.exceptions import (
    InvalidSessionTokenError,
    SecurityError,
    SessionStoreError,
)

REVOKED_PREFIX = "session:revoked:"
TOKEN_TYPE = "session"
MIN_SECRET_LENGTH = 32


class RevocationBackend(Protocol):
    """Minimal Redis operations for token revocation. Injected; no global state."""

    async def set_nx_ex(self, key: str, value: str, ttl: int) -> bool: ...
    async def exists(self, key: str) -> int: ...


@dataclass(frozen=True)
class SessionIdentity:
    """Account identity recovered from a valid session token."""

    account_id: int
    email: str
    roles: Tuple[str, ...]
    token_id: str
    expires_at: datetime


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SessionTokenService:
    """Bearer session tokens bound to an account id. invalidate() is idempotent."""

    def __init__(
        self,
        secret: str,
        backend: RevocationBackend,
        *,
        algorithm: str = "HS256",
        ttl_minutes: int = 60,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        if not secret or len(secret) < MIN_SECRET_LENGTH:
            raise SecurityError(
                f"Session secret is required and must be at least {MIN_SECRET_LENGTH} characters."
            )
        self._secret = secret
        self._backend = backend
        self._algorithm = algorithm
        self._ttl = timedelta(minutes=ttl_minutes)
        self._clock = clock

    def issue(self, account: Account) -> str:
        """
        Create a session token for account.

        Args:
            account: Persisted account (must have an id)

        Returns:
            Encoded JWT
        """
        if account.id is None:
            raise SecurityError("cannot issue a session token for an unsaved account")
        now = self._clock()
        payload = {
            "sub": str(account.id),
            "email": account.email,
            "roles": account.sorted_roles(),
            "iat": now,
            "exp": now + self._ttl,
            "jti": str(uuid4()),
            "type": TOKEN_TYPE,
        }
        return jwt.encode(payload, self._secret, algorithm=self._algorithm)

    async def identity(self, token: str) -> Optional[SessionIdentity]:
        """
        Recover the account identity from token.

        Returns:
            SessionIdentity if the token is valid, unexpired and not revoked, None otherwise
        """
        identity = self._decode(token)
        if identity is None:
            return None
        if await self._is_revoked(identity.token_id):
            return None
        return identity

    async def require_identity(self, token: str) -> SessionIdentity:
        """Like identity(), but raises InvalidSessionTokenError instead of returning None."""
        identity = await self.identity(token)
        if identity is None:
            raise InvalidSessionTokenError("invalid or expired session token")
        return identity

    async def invalidate(self, token: str) -> None:
        """
        Revoke token until it expires. Unknown, malformed, expired or already revoked
        tokens are a no-op.
        """
        identity = self._decode(token)
        if identity is None:
            return
        remaining = int((identity.expires_at - self._clock()).total_seconds())
        if remaining <= 0:
            return
        try:
            await self._backend.set_nx_ex(
                f"{REVOKED_PREFIX}{identity.token_id}", "1", remaining
            )
        except Exception as e:
            raise SessionStoreError(f"Token revocation failed: {e}") from e

    def _decode(self, token: str) -> Optional[SessionIdentity]:
        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[self._algorithm],
                options={"require": ["sub", "exp", "iat", "jti"]},
            )
        except InvalidTokenError:
            return None
        if payload.get("type") != TOKEN_TYPE:
            return None
        try:
            account_id = int(payload["sub"])
        except (TypeError, ValueError):
            return None
        return SessionIdentity(
            account_id=account_id,
            email=payload.get("email", ""),
            roles=tuple(payload.get("roles") or ()),
            token_id=payload["jti"],
            expires_at=datetime.fromtimestamp(payload["exp"], tz=timezone.utc),
        )

    async def _is_revoked(self, token_id: str) -> bool:
        try:
            return bool(await self._backend.exists(f"{REVOKED_PREFIX}{token_id}"))
        except Exception as e:
            raise SessionStoreError(f"Token revocation lookup failed: {e}") from e
