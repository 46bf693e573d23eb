"""Read/unread triage of audit entries. Only the triage state changes, never the record."""

from account_audit.domain.exceptions import NotFoundError
from account_audit.governance.audit_models import LogStatus, normalize_log_status
from account_audit.governance.audit_repository import TriageRepository


class LogTriage:
    """Mark audit entries read or unread and count them by status."""

    def __init__(self, repository: TriageRepository) -> None:
        self._repository = repository

    async def mark_read(self, log_id: int) -> None:
        await self._set(log_id, LogStatus.READED)

    async def mark_unread(self, log_id: int) -> None:
        await self._set(log_id, LogStatus.UNREADED)

    async def mark_all_read(self) -> None:
        await self._repository.set_all(LogStatus.READED.value)

    async def status_of(self, log_id: int) -> str:
        """Effective status; entries never triaged are UNREADED."""
        status = await self._repository.get_status(log_id)
        return status or LogStatus.UNREADED.value

    async def count_by_status(self, status: "LogStatus | str") -> int:
        return await self._repository.count(normalize_log_status(status))

    async def _set(self, log_id: int, status: LogStatus) -> None:
        if not await self._repository.set_status(log_id, status.value):
            raise NotFoundError(f"log not found with id: {log_id}")
