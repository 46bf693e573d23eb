"""Audit log repository protocols. Governance layer depends on these; infrastructure implements them."""

from typing import Any, List, Mapping, Optional, Protocol

from account_audit.governance.audit_models import AuditRecord, IdentityLogRow, LogEntry

# Log fields that may be used as equality criteria. "status" is the effective triage status.
FILTERABLE_FIELDS = frozenset(
    {
        "name",
        "level",
        "user_id",
        "ip_address",
        "user_agent",
        "request_uri",
        "request_method",
        "status",
    }
)


class LogRepository(Protocol):
    """Append-only store for audit records. Must never modify a stored record."""

    async def append(self, record: AuditRecord) -> LogEntry:
        """Persist record, assigning the next id atomically. Returns the stored entry."""
        ...

    async def find(
        self, criteria: Mapping[str, Any], offset: int, limit: int
    ) -> List[LogEntry]:
        """Entries matching all criteria (exact equality), ordered by id descending."""
        ...

    async def find_with_identity(
        self, criteria: Mapping[str, Any], offset: int, limit: int
    ) -> List[IdentityLogRow]:
        """Like find, left-outer joined with accounts on user_id; ordered by id descending."""
        ...

    async def truncate(self) -> None:
        """Administrative bulk removal of every entry and its triage state."""
        ...


class TriageRepository(Protocol):
    """Mutable triage state keyed by log id, kept apart from the immutable records."""

    async def get_status(self, log_id: int) -> Optional[str]:
        ...

    async def set_status(self, log_id: int, status: str) -> bool:
        """Set triage status. Returns False if no log with log_id exists."""
        ...

    async def set_all(self, status: str) -> None:
        ...

    async def count(self, status: str) -> int:
        """Number of entries whose effective status equals status."""
        ...
