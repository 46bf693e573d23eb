"""Governance: append-only audit logging, log retrieval and triage. No FastAPI."""

from account_audit.governance.audit_logger import AuditLogger
from account_audit.governance.audit_models import (
    AuditRecord,
    IdentityLogRow,
    LogEntry,
    LogLevel,
    LogStatus,
    normalize_log_status,
)
from account_audit.governance.exceptions import (
    AuditWriteDegradedError,
    GovernanceError,
    InvalidFilterCombinationError,
)
from account_audit.governance.log_query_engine import LogQueryEngine
from account_audit.governance.log_triage import LogTriage

__all__ = [
    "AuditLogger",
    "AuditRecord",
    "AuditWriteDegradedError",
    "GovernanceError",
    "IdentityLogRow",
    "InvalidFilterCombinationError",
    "LogEntry",
    "LogLevel",
    "LogQueryEngine",
    "LogStatus",
    "LogTriage",
    "normalize_log_status",
]
