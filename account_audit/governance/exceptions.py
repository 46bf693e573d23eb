"""Governance-layer exceptions. Typed, no HTTP."""

from typing import Optional


class GovernanceError(Exception):
    """Base for all governance-layer errors."""

    kind = "GovernanceError"

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class InvalidFilterCombinationError(GovernanceError):
    """Raised when a log query supplies zero or more than one filter predicate."""

    kind = "InvalidFilterCombination"


class AuditWriteDegradedError(GovernanceError):
    """
    Non-fatal: an audit record could not be stored.
    Reported to operators only; never raised into the business operation.
    """

    kind = "AuditWriteDegraded"

    def __init__(self, message: str, cause: Optional[BaseException] = None) -> None:
        self.cause = cause
        super().__init__(message)
