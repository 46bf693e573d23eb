"""Domain layer: models, schemas, validators, exceptions. Pure business logic only."""

from account_audit.domain.exceptions import (
    DomainError,
    DomainValidationError,
    DuplicateAccountError,
    MissingContextError,
    NotFoundError,
    RoleAlreadyGrantedError,
    RoleNotGrantedError,
)
from account_audit.domain.models import Account, AccountStatus, Role, normalize_role, parse_status
from account_audit.domain.schemas import AccountInfo
from account_audit.domain.validators import validate_length, validate_registration

__all__ = [
    "Account",
    "AccountInfo",
    "AccountStatus",
    "DomainError",
    "DomainValidationError",
    "DuplicateAccountError",
    "MissingContextError",
    "NotFoundError",
    "Role",
    "RoleAlreadyGrantedError",
    "RoleNotGrantedError",
    "normalize_role",
    "parse_status",
    "validate_length",
    "validate_registration",
]
