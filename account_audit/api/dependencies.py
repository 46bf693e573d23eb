"""FastAPI dependency injection: storage, Redis, audit and account services."""

import logging
from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from account_audit.application.account_directory import AccountDirectory
from account_audit.application.authorization_manager import AuthorizationManager
from account_audit.config.settings import AppSettings, get_settings
from account_audit.governance.audit_logger import AuditLogger
from account_audit.governance.audit_models import LogLevel
from account_audit.governance.log_query_engine import LogQueryEngine
from account_audit.governance.log_triage import LogTriage
from account_audit.infrastructure.cache.redis_client import RedisClient
from account_audit.infrastructure.database.account_repository_db import DbAccountRepository
from account_audit.infrastructure.database.log_repository_db import (
    DbLogRepository,
    DbTriageRepository,
)
from account_audit.infrastructure.database.session import build_engine, build_sessionmaker
from account_audit.security.credentials import CredentialService
from account_audit.security.session_tokens import SessionTokenService

_sessionmaker: async_sessionmaker[AsyncSession] | None = None
_redis_client: RedisClient | None = None

SettingsDep = Annotated[AppSettings, Depends(get_settings)]


def get_sessionmaker(settings: SettingsDep) -> async_sessionmaker[AsyncSession]:
    """Return singleton sessionmaker bound to the configured database."""
    global _sessionmaker
    if _sessionmaker is None:
        _sessionmaker = build_sessionmaker(build_engine(settings.database_url))
    return _sessionmaker


def get_redis_client(settings: SettingsDep) -> RedisClient:
    """Return singleton Redis client."""
    global _redis_client
    if _redis_client is None:
        _redis_client = RedisClient(settings.redis_url)
    return _redis_client


SessionmakerDep = Annotated[async_sessionmaker[AsyncSession], Depends(get_sessionmaker)]


def get_audit_logger(settings: SettingsDep, sessionmaker: SessionmakerDep) -> AuditLogger:
    return AuditLogger(
        DbLogRepository(sessionmaker),
        enabled=settings.audit_enabled,
        min_level=LogLevel(settings.audit_min_level),
    )


def get_log_query_engine(settings: SettingsDep, sessionmaker: SessionmakerDep) -> LogQueryEngine:
    return LogQueryEngine(DbLogRepository(sessionmaker), settings.default_page_size)


def get_log_triage(sessionmaker: SessionmakerDep) -> LogTriage:
    return LogTriage(DbTriageRepository(sessionmaker))


def get_account_directory(sessionmaker: SessionmakerDep) -> AccountDirectory:
    return AccountDirectory(DbAccountRepository(sessionmaker))


def get_credential_service(settings: SettingsDep) -> CredentialService:
    return CredentialService(iterations=settings.credential_iterations)


def get_session_token_service(
    settings: SettingsDep,
    redis: Annotated[RedisClient, Depends(get_redis_client)],
) -> SessionTokenService:
    return SessionTokenService(
        settings.jwt_secret,
        redis,
        algorithm=settings.jwt_algorithm,
        ttl_minutes=settings.session_ttl_minutes,
    )


def get_authorization_manager(
    sessionmaker: SessionmakerDep,
    audit_logger: Annotated[AuditLogger, Depends(get_audit_logger)],
    credentials: Annotated[CredentialService, Depends(get_credential_service)],
) -> AuthorizationManager:
    """Build AuthorizationManager with injected repository, directory, audit logger, credentials."""
    repository = DbAccountRepository(sessionmaker)
    return AuthorizationManager(
        repository=repository,
        directory=AccountDirectory(repository),
        audit_logger=audit_logger,
        credentials=credentials,
        logger=logging.getLogger("account_audit.accounts"),
    )
