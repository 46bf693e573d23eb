"""DB-backed account repository. Persists accounts to the accounts table."""

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from account_audit.application.exceptions import PersistenceError
from account_audit.domain.exceptions import DuplicateAccountError, NotFoundError
from account_audit.domain.models.account import Account, AccountStatus
from account_audit.infrastructure.database.models import AccountModel


def _as_utc(value: Optional[datetime]) -> Optional[datetime]:
    # SQLite returns naive datetimes; values are always written in UTC.
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _to_domain(orm: AccountModel) -> Account:
    return Account(
        id=orm.id,
        email=orm.email,
        first_name=orm.first_name,
        last_name=orm.last_name,
        credential_hash=orm.password,
        roles=set(orm.roles or []),
        status=AccountStatus(orm.status),
        registered_at=_as_utc(orm.register_time),
        last_login_at=_as_utc(orm.last_login_time),
        ip_address=orm.ip_address,
        user_agent=orm.user_agent,
    )


def _apply(orm: AccountModel, account: Account) -> None:
    orm.email = account.email
    orm.first_name = account.first_name
    orm.last_name = account.last_name
    orm.password = account.credential_hash
    orm.roles = account.sorted_roles()
    orm.status = account.status.value
    orm.register_time = account.registered_at
    orm.last_login_time = account.last_login_at
    orm.ip_address = account.ip_address
    orm.user_agent = account.user_agent


class DbAccountRepository:
    """Implements AccountRepository. One session (and transaction) per call."""

    def __init__(self, sessionmaker: async_sessionmaker[AsyncSession]) -> None:
        self._sessionmaker = sessionmaker

    async def get(self, account_id: int) -> Optional[Account]:
        try:
            async with self._sessionmaker() as session:
                orm = await session.get(AccountModel, account_id)
                return _to_domain(orm) if orm is not None else None
        except SQLAlchemyError as e:
            raise PersistenceError(f"error to load account: {account_id}") from e

    async def get_by_email(self, email: str) -> Optional[Account]:
        try:
            async with self._sessionmaker() as session:
                result = await session.execute(
                    select(AccountModel).where(AccountModel.email == email)
                )
                orm = result.scalar_one_or_none()
                return _to_domain(orm) if orm is not None else None
        except SQLAlchemyError as e:
            raise PersistenceError(f"error to load account: {email}") from e

    async def add(self, account: Account) -> Account:
        orm = AccountModel()
        _apply(orm, account)
        try:
            async with self._sessionmaker() as session:
                session.add(orm)
                await session.commit()
                await session.refresh(orm)
                return _to_domain(orm)
        except IntegrityError as e:
            raise DuplicateAccountError(f"account: {account.email} already exists") from e
        except SQLAlchemyError as e:
            raise PersistenceError(f"error to register account: {account.email}") from e

    async def save(self, account: Account) -> Account:
        try:
            async with self._sessionmaker() as session:
                orm = await session.get(AccountModel, account.id)
                if orm is None:
                    raise NotFoundError(f"account not found with id: {account.id}")
                _apply(orm, account)
                await session.commit()
                await session.refresh(orm)
                return _to_domain(orm)
        except IntegrityError as e:
            raise DuplicateAccountError(f"account: {account.email} already exists") from e
        except SQLAlchemyError as e:
            raise PersistenceError(f"error to update account: {account.id}") from e

    async def delete(self, account_id: int) -> None:
        try:
            async with self._sessionmaker() as session:
                await session.execute(delete(AccountModel).where(AccountModel.id == account_id))
                await session.commit()
        except SQLAlchemyError as e:
            raise PersistenceError(f"error to delete account: {account_id}") from e
