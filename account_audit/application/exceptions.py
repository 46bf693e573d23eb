"""Application-layer exceptions. Do not reuse domain exceptions."""


class ApplicationError(Exception):
    """Base for all application-layer errors."""

    kind = "ApplicationError"

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class PersistenceError(ApplicationError):
    """Raised when the storage layer fails. The underlying error is chained as __cause__."""

    kind = "PersistenceError"
