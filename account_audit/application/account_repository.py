"""Account repository protocol. Application layer depends on this; infrastructure implements it."""

from typing import Optional, Protocol

from account_audit.domain.models.account import Account


class AccountRepository(Protocol):
    """Protocol for persisting and retrieving accounts. Returned accounts are detached copies."""

    async def get(self, account_id: int) -> Optional[Account]:
        """Return account by id, or None if not found."""
        ...

    async def get_by_email(self, email: str) -> Optional[Account]:
        """Return account by exact (case-sensitive) email, or None if not found."""
        ...

    async def add(self, account: Account) -> Account:
        """Insert a new account and return it with its assigned id. Raises DuplicateAccountError."""
        ...

    async def save(self, account: Account) -> Account:
        """Write every mutable field of an existing account. Raises NotFoundError if it is gone."""
        ...

    async def delete(self, account_id: int) -> None:
        """Hard delete."""
        ...
