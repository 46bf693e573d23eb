"""DB-backed audit log and triage repositories (logs, log_triage tables)."""

from datetime import datetime, timezone
from typing import Any, List, Mapping, Optional

from sqlalchemy import delete, func, insert, literal, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from account_audit.application.exceptions import PersistenceError
from account_audit.governance.audit_models import (
    AuditRecord,
    IdentityLogRow,
    LogEntry,
    LogLevel,
    LogStatus,
)
from account_audit.infrastructure.database.models import (
    AccountModel,
    LogModel,
    LogTriageModel,
)

_effective_status = func.coalesce(LogTriageModel.status, LogStatus.UNREADED.value)


def _as_utc(value: Optional[datetime]) -> Optional[datetime]:
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _where(stmt, criteria: Mapping[str, Any]):
    for field, value in criteria.items():
        if field == "status":
            stmt = stmt.where(_effective_status == value)
        else:
            stmt = stmt.where(getattr(LogModel, field) == value)
    return stmt


class DbLogRepository:
    """Implements LogRepository. Ids come from the table's autoincrement key."""

    def __init__(self, sessionmaker: async_sessionmaker[AsyncSession]) -> None:
        self._sessionmaker = sessionmaker

    async def append(self, record: AuditRecord) -> LogEntry:
        orm = LogModel(
            name=record.name,
            message=record.message,
            time=record.time,
            level=int(record.level),
            user_id=record.user_id,
            ip_address=record.ip_address,
            user_agent=record.user_agent,
            request_uri=record.request_uri,
            request_method=record.request_method,
        )
        try:
            async with self._sessionmaker() as session:
                session.add(orm)
                await session.commit()
                return LogEntry.from_record(orm.id, record)
        except SQLAlchemyError as e:
            raise PersistenceError(f"error to save log: {record.name}") from e

    async def find(
        self, criteria: Mapping[str, Any], offset: int, limit: int
    ) -> List[LogEntry]:
        stmt = (
            select(LogModel, _effective_status.label("effective_status"))
            .outerjoin(LogTriageModel, LogTriageModel.log_id == LogModel.id)
            .order_by(LogModel.id.desc())
            .offset(offset)
            .limit(limit)
        )
        stmt = _where(stmt, criteria)
        try:
            async with self._sessionmaker() as session:
                result = await session.execute(stmt)
                rows = result.all()
        except SQLAlchemyError as e:
            raise PersistenceError("error to load logs") from e
        return [
            LogEntry(
                id=orm.id,
                name=orm.name,
                message=orm.message,
                time=_as_utc(orm.time),
                level=LogLevel(orm.level),
                user_id=orm.user_id,
                ip_address=orm.ip_address,
                user_agent=orm.user_agent,
                request_uri=orm.request_uri,
                request_method=orm.request_method,
                status=status,
            )
            for orm, status in rows
        ]

    async def find_with_identity(
        self, criteria: Mapping[str, Any], offset: int, limit: int
    ) -> List[IdentityLogRow]:
        stmt = (
            select(
                LogModel.id,
                LogModel.name,
                LogModel.message,
                LogModel.time,
                LogModel.ip_address,
                AccountModel.email.label("username"),
            )
            .outerjoin(AccountModel, LogModel.user_id == AccountModel.id)
            .outerjoin(LogTriageModel, LogTriageModel.log_id == LogModel.id)
            .order_by(LogModel.id.desc())
            .offset(offset)
            .limit(limit)
        )
        stmt = _where(stmt, criteria)
        try:
            async with self._sessionmaker() as session:
                result = await session.execute(stmt)
                rows = result.all()
        except SQLAlchemyError as e:
            raise PersistenceError("error to load logs") from e
        return [
            IdentityLogRow(
                id=row.id,
                name=row.name,
                message=row.message,
                time=_as_utc(row.time),
                ip_address=row.ip_address,
                username=row.username,
            )
            for row in rows
        ]

    async def truncate(self) -> None:
        try:
            async with self._sessionmaker() as session:
                await session.execute(delete(LogTriageModel))
                await session.execute(delete(LogModel))
                await session.commit()
        except SQLAlchemyError as e:
            raise PersistenceError("error truncating logs") from e


class DbTriageRepository:
    """Implements TriageRepository over the log_triage table."""

    def __init__(self, sessionmaker: async_sessionmaker[AsyncSession]) -> None:
        self._sessionmaker = sessionmaker

    async def get_status(self, log_id: int) -> Optional[str]:
        try:
            async with self._sessionmaker() as session:
                orm = await session.get(LogTriageModel, log_id)
                return orm.status if orm is not None else None
        except SQLAlchemyError as e:
            raise PersistenceError(f"error to load log status: {log_id}") from e

    async def set_status(self, log_id: int, status: str) -> bool:
        try:
            async with self._sessionmaker() as session:
                if await session.get(LogModel, log_id) is None:
                    return False
                await session.merge(LogTriageModel(log_id=log_id, status=status))
                await session.commit()
                return True
        except SQLAlchemyError as e:
            raise PersistenceError(f"error to update log status: {log_id}") from e

    async def set_all(self, status: str) -> None:
        try:
            async with self._sessionmaker() as session:
                await session.execute(delete(LogTriageModel))
                await session.execute(
                    insert(LogTriageModel).from_select(
                        ["log_id", "status"],
                        select(LogModel.id, literal(status)),
                    )
                )
                await session.commit()
        except SQLAlchemyError as e:
            raise PersistenceError("error to update log statuses") from e

    async def count(self, status: str) -> int:
        stmt = (
            select(func.count(LogModel.id))
            .outerjoin(LogTriageModel, LogTriageModel.log_id == LogModel.id)
            .where(_effective_status == status)
        )
        try:
            async with self._sessionmaker() as session:
                return (await session.execute(stmt)).scalar_one()
        except SQLAlchemyError as e:
            raise PersistenceError("error to count logs") from e
