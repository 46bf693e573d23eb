"""Domain-specific exceptions. Pure domain layer, no infrastructure."""

from typing import Optional


class DomainError(Exception):
    """Base for all domain-layer errors. `kind` is the stable machine-readable name."""

    kind = "DomainError"

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class DomainValidationError(DomainError):
    """Raised when input is malformed or out of bounds. Carries the offending field."""

    kind = "ValidationError"

    def __init__(self, message: str, field: Optional[str] = None) -> None:
        self.field = field
        super().__init__(message)


class NotFoundError(DomainError):
    """Raised when a referenced entity does not exist."""

    kind = "NotFound"


class DuplicateAccountError(DomainError):
    """Raised when an email is already registered."""

    kind = "DuplicateAccount"


class RoleAlreadyGrantedError(DomainError):
    """Raised when granting a role the account already holds."""

    kind = "RoleAlreadyGranted"


class RoleNotGrantedError(DomainError):
    """Raised when revoking a role the account does not hold."""

    kind = "RoleNotGranted"


class MissingContextError(DomainError):
    """Raised when required request metadata (ip address, user agent) is absent."""

    kind = "MissingContext"
