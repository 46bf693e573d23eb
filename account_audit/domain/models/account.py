"""Domain model for accounts. Pure business semantics, no ORM or infrastructure."""

from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum
from typing import List, Optional, Set

from account_audit.domain.exceptions import DomainValidationError
from account_audit.domain.models.role import Role, normalize_role


class AccountStatus(str, Enum):
    """Account status. Any status may move to any other; each change is audited."""

    ACTIVE = "active"
    INACTIVE = "inactive"
    BANNED = "banned"


def parse_status(value: "AccountStatus | str") -> AccountStatus:
    """Trim and lower-case a status string and map it to AccountStatus."""
    if isinstance(value, AccountStatus):
        return value
    normalized = (value or "").strip().lower()
    try:
        return AccountStatus(normalized)
    except ValueError as e:
        allowed = ", ".join(s.value for s in AccountStatus)
        raise DomainValidationError(
            f"invalid account status '{value}' (allowed: {allowed})", field="status"
        ) from e


@dataclass
class Account:
    """
    Registered identity with credentials, roles and status.
    Roles are normalized tokens and always include ROLE_USER.
    """

    email: str
    first_name: str
    last_name: str
    credential_hash: str
    roles: Set[str] = field(default_factory=lambda: {Role.USER.value})
    status: AccountStatus = AccountStatus.ACTIVE
    registered_at: Optional[datetime] = None
    last_login_at: Optional[datetime] = None
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None
    id: Optional[int] = None

    def has_role(self, role: "Role | str") -> bool:
        return normalize_role(role) in self.roles

    def add_role(self, role: "Role | str") -> None:
        self.roles.add(normalize_role(role))

    def remove_role(self, role: "Role | str") -> None:
        token = normalize_role(role)
        if token == Role.USER.value:
            raise DomainValidationError(
                f"{Role.USER.value} cannot be revoked", field="role"
            )
        self.roles.discard(token)

    def sorted_roles(self) -> List[str]:
        return sorted(self.roles)

    def copy(self) -> "Account":
        """Detached copy; the role set is not shared."""
        return replace(self, roles=set(self.roles))
