"""Security-layer exceptions. Typed, no HTTP."""


class SecurityError(Exception):
    """Base for all security-layer errors."""

    kind = "SecurityError"

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class CredentialError(SecurityError):
    """Raised when the credential service is misconfigured or hashing fails."""

    kind = "CredentialError"


class InvalidSessionTokenError(SecurityError):
    """Raised when a session token is malformed, expired, revoked or wrongly signed."""

    kind = "InvalidSessionToken"


class SessionStoreError(SecurityError):
    """Raised when the revocation store cannot be read or written."""

    kind = "SessionStoreError"
