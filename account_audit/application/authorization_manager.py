"""Account authorization service: registration, roles, status and credentials. Every change is audited."""

import asyncio
import logging
from datetime import datetime, timezone
from typing import Awaitable, Callable, Optional, TypeVar

from account_audit.application.account_directory import AccountDirectory
from account_audit.application.account_repository import AccountRepository
from account_audit.application.exceptions import PersistenceError
from account_audit.core.context import RequestContext, current_request_context
from account_audit.domain.exceptions import (
    DomainError,
    DuplicateAccountError,
    MissingContextError,
    NotFoundError,
    RoleAlreadyGrantedError,
    RoleNotGrantedError,
)
from account_audit.domain.models.account import Account, AccountStatus, parse_status
from account_audit.domain.models.role import Role, normalize_role
from account_audit.domain.validators.account_validator import validate_registration
from account_audit.governance.audit_logger import AuditLogger
from account_audit.governance.audit_models import LogLevel
from account_audit.security.credentials import SECRET_LENGTH, CredentialService

AUDIT_SOURCE = "account-manager"
UNKNOWN = "Unknown"

T = TypeVar("T")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _roles(roles) -> str:
    return ", ".join(sorted(roles))


class AuthorizationManager:
    """
    Mutates account authorization state. Every operation follows the same order:
    validate and look up (no state change on failure), mutate, persist, then emit one
    audit event. Audit emission happens only after the write succeeded, so the log
    reflects committed state.

    has_role followed by grant_role/revoke_role is not atomic across concurrent callers;
    two simultaneous grants of the same role can both pass the check.
    """

    def __init__(
        self,
        repository: AccountRepository,
        directory: AccountDirectory,
        audit_logger: AuditLogger,
        credentials: CredentialService,
        logger: Optional[logging.Logger] = None,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._repository = repository
        self._directory = directory
        self._audit = audit_logger
        self._credentials = credentials
        self._logger = logger or logging.getLogger(__name__)
        self._clock = clock

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def register(
        self,
        email: str,
        first_name: str,
        last_name: str,
        password: str,
        context: Optional[RequestContext] = None,
    ) -> Account:
        """
        Register a new account with role ROLE_USER and status active.
        Raises DomainValidationError, DuplicateAccountError, MissingContextError, PersistenceError.
        """
        email = (email or "").strip()
        first_name = (first_name or "").strip()
        last_name = (last_name or "").strip()
        password = (password or "").strip()

        # Step 1: Validate input before touching state
        validate_registration(email, first_name, last_name, password)
        if await self._directory.email_registered(email):
            raise DuplicateAccountError(f"account: {email} already exists")

        ctx = context or current_request_context()
        if not ctx.ip_address or not ctx.user_agent:
            raise MissingContextError(
                "invalid visitor info: ip address or user agent is missing"
            )

        # Step 2: Build and persist
        credential_hash = await asyncio.to_thread(self._credentials.hash_password, password)
        now = self._clock()
        account = Account(
            email=email,
            first_name=first_name,
            last_name=last_name,
            credential_hash=credential_hash,
            roles={Role.USER.value},
            status=AccountStatus.ACTIVE,
            registered_at=now,
            last_login_at=now,
            ip_address=ctx.ip_address,
            user_agent=ctx.user_agent,
        )
        account = await self._persist("register account", email, self._repository.add(account))

        # Step 3: Audit
        self._logger.info("account_registered", extra={"account_id": account.id})
        await self._audit.record(
            AUDIT_SOURCE, f"new account registered: {email}", LogLevel.INFO, context=ctx
        )
        return account

    async def delete_account(self, account_id: int) -> None:
        """Hard delete. The audit event names the email resolved before removal."""
        account = await self._directory.get(account_id)
        await self._persist("delete account", account.email, self._repository.delete(account_id))

        self._logger.info("account_deleted", extra={"account_id": account_id})
        await self._audit.record(AUDIT_SOURCE, f"account deleted: {account.email}", LogLevel.INFO)

    async def update_status(self, account_id: int, new_status: "AccountStatus | str") -> Account:
        """Any status may move to any other. The audit event records old and new status."""
        status = parse_status(new_status)
        account = await self._directory.get(account_id)
        old_status = account.status

        account.status = status
        account = await self._persist("update status", account.email, self._repository.save(account))

        self._logger.info("account_status_updated", extra={"account_id": account_id})
        await self._audit.record(
            AUDIT_SOURCE,
            f"account: {account.email} updated status to: {status.value} "
            f"old status was: {old_status.value}",
            LogLevel.INFO,
        )
        return account

    async def reset_credential(self, account_id: int) -> str:
        """
        Replace the credential with a fresh random secret and return it in plaintext.
        The secret is returned exactly once and never logged.
        """
        account = await self._directory.get(account_id)

        secret = self._credentials.generate_secret(SECRET_LENGTH)
        account.credential_hash = await asyncio.to_thread(self._credentials.hash_password, secret)
        await self._persist("reset credential", account.email, self._repository.save(account))

        self._logger.info("account_credential_reset", extra={"account_id": account_id})
        await self._audit.record(
            AUDIT_SOURCE, f"account credential reset: {account.email}", LogLevel.INFO
        )
        return secret

    async def verify_credential(self, email: str, password: str) -> bool:
        """True if email belongs to an account whose credential matches password."""
        account = await self._directory.find_by_email((email or "").strip())
        if account is None:
            return False
        return await asyncio.to_thread(
            self._credentials.verify_password, (password or "").strip(), account.credential_hash
        )

    async def record_login(
        self, identifier: str, context: Optional[RequestContext] = None
    ) -> Account:
        """
        Stamp a successful login on the account identified by email.
        Missing visitor info is stored as "Unknown".
        """
        account = await self._directory.find_by_email(identifier)
        if account is None:
            raise NotFoundError(f"account not found with identifier: {identifier}")

        ctx = context or current_request_context()
        account.last_login_at = self._clock()
        account.ip_address = ctx.ip_address or UNKNOWN
        account.user_agent = ctx.user_agent or UNKNOWN
        account = await self._persist("record login", identifier, self._repository.save(account))

        await self._audit.record(
            AUDIT_SOURCE, f"account logged in: {account.email}", LogLevel.INFO,
            user_id=account.id, context=ctx,
        )
        return account

    # ------------------------------------------------------------------
    # Roles
    # ------------------------------------------------------------------

    async def has_role(self, account_id: int, role: "Role | str") -> bool:
        """Raises NotFoundError if the account does not exist."""
        token = normalize_role(role)
        account = await self._directory.get(account_id)
        return account.has_role(token)

    async def grant_role(self, account_id: int, role: "Role | str") -> Account:
        token = normalize_role(role)
        if await self.has_role(account_id, token):
            raise RoleAlreadyGrantedError(f"account already has role: {token}")

        account = await self._directory.get(account_id)
        old_roles = set(account.roles)
        account.add_role(token)
        account = await self._persist("grant role", account.email, self._repository.save(account))

        self._logger.info("account_role_granted", extra={"account_id": account_id})
        await self._audit.record(
            AUDIT_SOURCE,
            f"account role added: {account.email} - {token} "
            f"(roles: [{_roles(old_roles)}] -> [{_roles(account.roles)}])",
            LogLevel.INFO,
        )
        return account

    async def revoke_role(self, account_id: int, role: "Role | str") -> Account:
        token = normalize_role(role)
        if not await self.has_role(account_id, token):
            raise RoleNotGrantedError(f"account does not have role: {token}")

        account = await self._directory.get(account_id)
        old_roles = set(account.roles)
        account.remove_role(token)
        account = await self._persist("revoke role", account.email, self._repository.save(account))

        self._logger.info("account_role_revoked", extra={"account_id": account_id})
        await self._audit.record(
            AUDIT_SOURCE,
            f"account role removed: {account.email} - {token} "
            f"(roles: [{_roles(old_roles)}] -> [{_roles(account.roles)}])",
            LogLevel.INFO,
        )
        return account

    # ------------------------------------------------------------------

    async def _persist(self, action: str, subject: str, write: Awaitable[T]) -> T:
        """
        Await a repository write. Domain errors pass through; any other failure is
        audited and surfaces as PersistenceError with the original chained. Not retried.
        """
        try:
            return await write
        except DomainError:
            raise
        except Exception as e:
            self._logger.error(
                "account_persistence_failed",
                extra={"error_kind": PersistenceError.kind, "error": str(e)},
            )
            await self._audit.record(
                AUDIT_SOURCE, f"error to {action}: {subject}", LogLevel.CRITICAL
            )
            if isinstance(e, PersistenceError):
                raise
            raise PersistenceError(f"error to {action}: {subject}") from e
