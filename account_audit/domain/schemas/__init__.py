"""Domain schemas. Response shapes for read boundaries."""

from account_audit.domain.schemas.account import DISPLAY_TIME_FORMAT, AccountInfo

__all__ = [
    "AccountInfo",
    "DISPLAY_TIME_FORMAT",
]
