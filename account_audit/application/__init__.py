# Application layer: services that orchestrate domain, governance and infrastructure.

from account_audit.application.account_directory import AccountDirectory
from account_audit.application.account_repository import AccountRepository
from account_audit.application.authorization_manager import AuthorizationManager
from account_audit.application.exceptions import ApplicationError, PersistenceError

__all__ = [
    "AccountDirectory",
    "AccountRepository",
    "ApplicationError",
    "AuthorizationManager",
    "PersistenceError",
]
