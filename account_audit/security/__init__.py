"""Security: credential hashing, session tokens. No FastAPI."""

from account_audit.security.credentials import CredentialService
from account_audit.security.session_tokens import SessionIdentity, SessionTokenService

__all__ = [
    "CredentialService",
    "SessionIdentity",
    "SessionTokenService",
]
