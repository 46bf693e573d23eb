"""Domain models. Pure business entities."""

from account_audit.domain.models.account import Account, AccountStatus, parse_status
from account_audit.domain.models.role import ROLE_PREFIX, Role, normalize_role

__all__ = [
    "Account",
    "AccountStatus",
    "ROLE_PREFIX",
    "Role",
    "normalize_role",
    "parse_status",
]
