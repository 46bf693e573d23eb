"""In-memory audit log and triage repositories. For local runs and tests."""

import asyncio
import dataclasses
from typing import Any, Dict, List, Mapping, Optional

from account_audit.governance.audit_models import (
    AuditRecord,
    IdentityLogRow,
    LogEntry,
    LogStatus,
)
from account_audit.infrastructure.memory.account_repository_memory import (
    InMemoryAccountRepository,
)


class InMemoryLogRepository:
    """
    Implements LogRepository. Id assignment and append happen under one lock, so
    concurrent appends never share an id.
    """

    def __init__(self, accounts: Optional[InMemoryAccountRepository] = None) -> None:
        self._entries: Dict[int, LogEntry] = {}
        self._last_id = 0
        self._lock = asyncio.Lock()
        self._accounts = accounts
        self.triage = InMemoryTriageRepository(self)

    async def append(self, record: AuditRecord) -> LogEntry:
        async with self._lock:
            self._last_id += 1
            entry = LogEntry.from_record(self._last_id, record)
            self._entries[entry.id] = entry
            return entry

    async def find(
        self, criteria: Mapping[str, Any], offset: int, limit: int
    ) -> List[LogEntry]:
        return self._matching(criteria)[offset:offset + limit]

    async def find_with_identity(
        self, criteria: Mapping[str, Any], offset: int, limit: int
    ) -> List[IdentityLogRow]:
        rows = []
        for entry in self._matching(criteria)[offset:offset + limit]:
            username = None
            if self._accounts is not None and entry.user_id is not None:
                account = await self._accounts.get(entry.user_id)
                username = account.email if account is not None else None
            rows.append(
                IdentityLogRow(
                    id=entry.id,
                    name=entry.name,
                    message=entry.message,
                    time=entry.time,
                    ip_address=entry.ip_address,
                    username=username,
                )
            )
        return rows

    async def truncate(self) -> None:
        async with self._lock:
            self._entries.clear()
            self.triage.clear()

    def exists(self, log_id: int) -> bool:
        return log_id in self._entries

    def ids(self) -> List[int]:
        return list(self._entries)

    def _matching(self, criteria: Mapping[str, Any]) -> List[LogEntry]:
        result = []
        for log_id in sorted(self._entries, reverse=True):
            entry = dataclasses.replace(
                self._entries[log_id], status=self.triage.effective(log_id)
            )
            if all(getattr(entry, field) == value for field, value in criteria.items()):
                result.append(entry)
        return result


class InMemoryTriageRepository:
    """Implements TriageRepository for an InMemoryLogRepository."""

    def __init__(self, logs: InMemoryLogRepository) -> None:
        self._logs = logs
        self._status: Dict[int, str] = {}

    async def get_status(self, log_id: int) -> Optional[str]:
        return self._status.get(log_id)

    async def set_status(self, log_id: int, status: str) -> bool:
        if not self._logs.exists(log_id):
            return False
        self._status[log_id] = status
        return True

    async def set_all(self, status: str) -> None:
        self._status = {log_id: status for log_id in self._logs.ids()}

    async def count(self, status: str) -> int:
        return sum(1 for log_id in self._logs.ids() if self.effective(log_id) == status)

    def effective(self, log_id: int) -> str:
        return self._status.get(log_id, LogStatus.UNREADED.value)

    def clear(self) -> None:
        self._status.clear()
