"""In-memory account repository. For local runs and tests; implements AccountRepository."""

import asyncio
import itertools
from typing import Dict, Optional

from account_audit.domain.exceptions import DuplicateAccountError, NotFoundError
from account_audit.domain.models.account import Account


class InMemoryAccountRepository:
    """Stores detached copies so callers never share state with the store."""

    def __init__(self) -> None:
        self._accounts: Dict[int, Account] = {}
        self._ids = itertools.count(1)
        self._lock = asyncio.Lock()

    async def get(self, account_id: int) -> Optional[Account]:
        account = self._accounts.get(account_id)
        return account.copy() if account is not None else None

    async def get_by_email(self, email: str) -> Optional[Account]:
        for account in self._accounts.values():
            if account.email == email:
                return account.copy()
        return None

    async def add(self, account: Account) -> Account:
        async with self._lock:
            if any(a.email == account.email for a in self._accounts.values()):
                raise DuplicateAccountError(f"account: {account.email} already exists")
            stored = account.copy()
            stored.id = next(self._ids)
            self._accounts[stored.id] = stored
            return stored.copy()

    async def save(self, account: Account) -> Account:
        async with self._lock:
            if account.id not in self._accounts:
                raise NotFoundError(f"account not found with id: {account.id}")
            if any(
                a.email == account.email and a.id != account.id
                for a in self._accounts.values()
            ):
                raise DuplicateAccountError(f"account: {account.email} already exists")
            self._accounts[account.id] = account.copy()
            return account.copy()

    async def delete(self, account_id: int) -> None:
        async with self._lock:
            self._accounts.pop(account_id, None)
