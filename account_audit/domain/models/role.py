"""Role tokens. Closed set of known roles plus normalized extension tokens."""

import re
from enum import Enum
from typing import Optional

from account_audit.domain.exceptions import DomainValidationError

ROLE_PREFIX = "ROLE_"
_ROLE_PATTERN = re.compile(r"^ROLE_[A-Z_]+$")


class Role(str, Enum):
    USER = "ROLE_USER"
    ADMIN = "ROLE_ADMIN"
    OWNER = "ROLE_OWNER"

    @classmethod
    def known(cls, token: str) -> Optional["Role"]:
        """Return the matching Role member, or None for an extension token."""
        try:
            return cls(token)
        except ValueError:
            return None


def normalize_role(role: "Role | str") -> str:
    """
    Upper-case and prefix with ROLE_ if missing. Applied before any comparison or storage.
    Raises DomainValidationError when the result is not a ROLE_<UPPERCASE_NAME> token.
    """
    if isinstance(role, Role):
        return role.value
    token = (role or "").strip().upper()
    if not token.startswith(ROLE_PREFIX):
        token = ROLE_PREFIX + token
    if not _ROLE_PATTERN.match(token):
        raise DomainValidationError(f"invalid role: '{role}'", field="role")
    return token
