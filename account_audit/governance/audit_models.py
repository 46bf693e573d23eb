"""Immutable audit log models. Domain-level immutability."""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum, IntEnum
from typing import Any, Dict, Optional

TIME_FORMAT = "%Y-%m-%d %H:%M:%S"
TIME_NOT_AVAILABLE = "N/A"


class LogLevel(IntEnum):
    """Severity ordinal. Lower is more severe."""

    CRITICAL = 1
    WARNING = 2
    NOTICE = 3
    INFO = 4


class LogStatus(str, Enum):
    """Triage status. Entries without triage state are UNREADED."""

    UNREADED = "UNREADED"
    READED = "READED"


_STATUS_ALIASES = {
    "OPEN": LogStatus.UNREADED.value,
    "UNREAD": LogStatus.UNREADED.value,
    "READ": LogStatus.READED.value,
}


def normalize_log_status(status: "LogStatus | str") -> str:
    """Trim and upper-case a triage status; OPEN and UNREAD mean UNREADED, READ means READED."""
    if isinstance(status, LogStatus):
        return status.value
    value = status.strip().upper()
    return _STATUS_ALIASES.get(value, value)


def format_time(value: Optional[datetime]) -> str:
    return value.strftime(TIME_FORMAT) if value is not None else TIME_NOT_AVAILABLE


@dataclass(frozen=True)
class AuditRecord:
    """
    Event content handed to the store. Has no id yet; the store assigns it.
    """

    name: str
    message: str
    level: LogLevel
    time: Optional[datetime]
    user_id: Optional[int] = None
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None
    request_uri: Optional[str] = None
    request_method: Optional[str] = None


@dataclass(frozen=True)
class LogEntry:
    """
    Stored audit event. Id defines the canonical ordering.
    `status` is the triage status observed when the entry was read.
    """

    id: int
    name: str
    message: str
    time: Optional[datetime]
    level: LogLevel
    user_id: Optional[int] = None
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None
    request_uri: Optional[str] = None
    request_method: Optional[str] = None
    status: str = LogStatus.UNREADED.value

    @classmethod
    def from_record(cls, log_id: int, record: AuditRecord) -> "LogEntry":
        return cls(
            id=log_id,
            name=record.name,
            message=record.message,
            time=record.time,
            level=record.level,
            user_id=record.user_id,
            ip_address=record.ip_address,
            user_agent=record.user_agent,
            request_uri=record.request_uri,
            request_method=record.request_method,
        )

    def formatted_time(self) -> str:
        return format_time(self.time)

    def to_dict(self) -> Dict[str, Any]:
        """Structured representation for JSON output."""
        return {
            "id": self.id,
            "name": self.name,
            "message": self.message,
            "time": self.time.isoformat() if self.time else None,
            "level": int(self.level),
            "user_id": self.user_id,
            "ip_address": self.ip_address,
            "user_agent": self.user_agent,
            "request_uri": self.request_uri,
            "request_method": self.request_method,
            "status": self.status,
        }


@dataclass(frozen=True)
class IdentityLogRow:
    """Log row joined with the display identity (account email) of its user_id."""

    id: int
    name: str
    message: str
    time: Optional[datetime]
    ip_address: Optional[str]
    username: Optional[str]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "message": self.message,
            "time": self.time.isoformat() if self.time else None,
            "ip_address": self.ip_address,
            "username": self.username,
        }
