"""Filtered, paginated audit log retrieval. Read-only; most recent first. No FastAPI."""

from typing import Any, List, Mapping, Optional

from account_audit.domain.exceptions import DomainValidationError
from account_audit.governance.audit_models import IdentityLogRow, LogEntry, normalize_log_status
from account_audit.governance.audit_repository import FILTERABLE_FIELDS, LogRepository
from account_audit.governance.exceptions import InvalidFilterCombinationError

DEFAULT_PAGE_SIZE = 50


def page_offset(page: int, page_size: int) -> int:
    """Offset for a 1-based page. Pages below 1 read from the start."""
    return max(0, (page - 1) * page_size)


class LogQueryEngine:
    """
    Single-predicate retrieval over the audit log (status, user or ip), ordered by id
    descending. Zero or several predicates are rejected before the store is touched.
    query_with_identity is the lower-level primitive and accepts several criteria.
    """

    def __init__(self, repository: LogRepository, default_page_size: int = DEFAULT_PAGE_SIZE) -> None:
        self._repository = repository
        self._default_page_size = default_page_size

    async def query(
        self,
        *,
        status: Optional[str] = None,
        user_id: Optional[int] = None,
        ip: Optional[str] = None,
        page: int = 1,
        page_size: Optional[int] = None,
    ) -> List[LogEntry]:
        """Run exactly one of the status / user / ip filters."""
        filters = {
            "status": normalize_log_status(status) if status is not None else None,
            "user_id": user_id,
            "ip_address": ip,
        }
        active = {k: v for k, v in filters.items() if v is not None}
        if len(active) != 1:
            raise InvalidFilterCombinationError(
                f"exactly one filter (status, user or ip) is required, got {len(active)}"
            )
        size = self._page_size(page_size)
        return await self._repository.find(active, page_offset(page, size), size)

    async def query_by_status(
        self, status: str, page: int = 1, page_size: Optional[int] = None
    ) -> List[LogEntry]:
        return await self.query(status=status, page=page, page_size=page_size)

    async def query_by_user(
        self, user_id: int, page: int = 1, page_size: Optional[int] = None
    ) -> List[LogEntry]:
        return await self.query(user_id=user_id, page=page, page_size=page_size)

    async def query_by_ip(
        self, ip: str, page: int = 1, page_size: Optional[int] = None
    ) -> List[LogEntry]:
        return await self.query(ip=ip, page=page, page_size=page_size)

    async def query_with_identity(
        self,
        criteria: Mapping[str, Any],
        page: int = 1,
        page_size: Optional[int] = None,
    ) -> List[IdentityLogRow]:
        """
        Entries matching every field=value criterion, each joined with the email of the
        referenced account. username is None when the account is missing or deleted.
        """
        unknown = set(criteria) - FILTERABLE_FIELDS
        if unknown:
            raise DomainValidationError(
                f"unknown log filter field(s): {', '.join(sorted(unknown))}",
                field="criteria",
            )
        criteria = dict(criteria)
        if criteria.get("status") is not None:
            criteria["status"] = normalize_log_status(criteria["status"])
        size = self._page_size(page_size)
        return await self._repository.find_with_identity(
            criteria, page_offset(page, size), size
        )

    def _page_size(self, page_size: Optional[int]) -> int:
        size = self._default_page_size if page_size is None else page_size
        if size < 1:
            raise DomainValidationError("page size must be positive", field="page_size")
        return size
