"""Append-only audit logging for account traceability. No FastAPI."""

import logging
from datetime import datetime, timezone
from typing import Callable, Optional

from account_audit.core.context import RequestContext, current_request_context
from account_audit.domain.exceptions import DomainValidationError
from account_audit.governance.audit_models import AuditRecord, LogEntry, LogLevel
from account_audit.governance.audit_repository import LogRepository
from account_audit.governance.exceptions import AuditWriteDegradedError

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AuditLogger:
    """
    Writes immutable audit records via repository. Id and timestamp are assigned here
    (id by the store's atomic increment, time in UTC).
    A failed write never fails the caller: it is reported as AuditWriteDegradedError on the
    operational channel (this module's logger and the optional on_degraded callback).
    """

    def __init__(
        self,
        repository: LogRepository,
        *,
        enabled: bool = True,
        min_level: LogLevel = LogLevel.INFO,
        on_degraded: Optional[Callable[[AuditWriteDegradedError], None]] = None,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._repository = repository
        self._enabled = enabled
        self._min_level = LogLevel(min_level)
        self._on_degraded = on_degraded
        self._clock = clock

    async def record(
        self,
        name: str,
        message: str,
        level: LogLevel = LogLevel.INFO,
        user_id: Optional[int] = None,
        context: Optional[RequestContext] = None,
    ) -> Optional[LogEntry]:
        """
        Append one audit record. Returns the stored entry, or None when audit logging is
        disabled, the level is below the configured threshold, or the write failed.
        Missing request fields are taken from the ambient request context.
        """
        try:
            level = LogLevel(level)
        except ValueError as e:
            raise DomainValidationError(f"invalid log level: {level}", field="level") from e

        if not self._enabled or level > self._min_level:
            return None

        ctx = context or current_request_context()
        record = AuditRecord(
            name=name,
            message=message,
            level=level,
            time=self._clock(),
            user_id=user_id if user_id is not None else ctx.user_id,
            ip_address=ctx.ip_address,
            user_agent=ctx.user_agent,
            request_uri=ctx.request_uri,
            request_method=ctx.request_method,
        )
        try:
            entry = await self._repository.append(record)
        except Exception as e:
            self._report(AuditWriteDegradedError(f"audit write failed: {name}: {e}", cause=e))
            return None
        return entry

    async def truncate(self) -> None:
        """Administrative bulk delete of the whole log. Errors propagate to the caller."""
        await self._repository.truncate()
        logger.warning("audit_log_truncated")

    def _report(self, error: AuditWriteDegradedError) -> None:
        logger.error(
            "audit_write_degraded",
            extra={"error_kind": error.kind, "error": error.message},
        )
        if self._on_degraded is not None:
            try:
                self._on_degraded(error)
            except Exception:
                logger.exception("audit_degraded_callback_failed")
