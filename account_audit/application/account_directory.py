"""Account lookups and the account-info read boundary. Absence is a value, not an error."""

from typing import Optional

from account_audit.application.account_repository import AccountRepository
from account_audit.domain.exceptions import NotFoundError
from account_audit.domain.models.account import Account
from account_audit.domain.schemas.account import DISPLAY_TIME_FORMAT, AccountInfo


class AccountDirectory:
    """Find accounts by id or email. The *_by_* helpers raise NotFoundError for callers that need a value."""

    def __init__(self, repository: AccountRepository) -> None:
        self._repository = repository

    async def find_by_id(self, account_id: int) -> Optional[Account]:
        return await self._repository.get(account_id)

    async def find_by_email(self, email: str) -> Optional[Account]:
        return await self._repository.get_by_email(email)

    async def email_registered(self, email: str) -> bool:
        return await self.find_by_email(email) is not None

    async def get(self, account_id: int) -> Account:
        account = await self.find_by_id(account_id)
        if account is None:
            raise NotFoundError(f"account not found with id: {account_id}")
        return account

    async def id_by_email(self, email: str) -> int:
        account = await self.find_by_email(email)
        if account is None or account.id is None:
            raise NotFoundError(f"account not found with email: {email}")
        return account.id

    async def email_by_id(self, account_id: int) -> str:
        return (await self.get(account_id)).email

    async def get_status(self, account_id: int) -> str:
        account = await self.get(account_id)
        if not account.status:
            raise NotFoundError(f"account id: {account_id} status not found")
        return account.status.value

    async def account_info(self, account_id: int) -> AccountInfo:
        """
        Account info for display. All-or-nothing: if any field is unresolved
        the whole response is NotFoundError.
        """
        account = await self.get(account_id)
        fields = (
            account.email,
            account.first_name,
            account.last_name,
            account.roles,
            account.registered_at,
            account.last_login_at,
            account.ip_address,
            account.user_agent,
            account.status,
        )
        if any(value is None for value in fields):
            raise NotFoundError(f"account id: {account_id} info not found")
        return AccountInfo(
            email=account.email,
            first_name=account.first_name,
            last_name=account.last_name,
            roles=account.sorted_roles(),
            register_time=account.registered_at.strftime(DISPLAY_TIME_FORMAT),
            last_login_time=account.last_login_at.strftime(DISPLAY_TIME_FORMAT),
            ip_address=account.ip_address,
            user_agent=account.user_agent,
            status=account.status.value,
        )
