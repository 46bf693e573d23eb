"""AppSettings: environment loading and validation."""

import json
import logging

import pytest
from pydantic import ValidationError

from account_audit.config.logging import JsonFormatter, configure_logging
from account_audit.config.settings import AppSettings, StorageSettings, get_settings
from account_audit.core.context import RequestContext, correlation_id_ctx, request_context_ctx

SECRET = "test-session-secret-at-least-32-characters"


def test_defaults(monkeypatch):
    monkeypatch.setenv("JWT_SECRET", SECRET)
    settings = AppSettings()
    assert settings.default_page_size == 50
    assert settings.audit_enabled is True
    assert settings.audit_min_level == 4
    assert settings.database_url.startswith("sqlite+aiosqlite")


def test_env_overrides(monkeypatch):
    monkeypatch.setenv("JWT_SECRET", SECRET)
    monkeypatch.setenv("AUDIT_ENABLED", "false")
    monkeypatch.setenv("AUDIT_MIN_LEVEL", "2")
    monkeypatch.setenv("DATABASE_URL", "postgresql+asyncpg://u:p@db/audit")
    settings = AppSettings()
    assert settings.audit_enabled is False
    assert settings.audit_min_level == 2
    assert settings.database_url == "postgresql+asyncpg://u:p@db/audit"


def test_short_jwt_secret_rejected(monkeypatch):
    monkeypatch.setenv("JWT_SECRET", "short")
    with pytest.raises(ValidationError):
        AppSettings()


@pytest.mark.parametrize("level", ["0", "5"])
def test_audit_level_bounds(monkeypatch, level):
    monkeypatch.setenv("JWT_SECRET", SECRET)
    monkeypatch.setenv("AUDIT_MIN_LEVEL", level)
    with pytest.raises(ValidationError):
        AppSettings()


def test_get_settings_is_cached(monkeypatch):
    monkeypatch.setenv("JWT_SECRET", SECRET)
    get_settings.cache_clear()
    try:
        assert get_settings() is get_settings()
    finally:
        get_settings.cache_clear()


def test_json_formatter_includes_context_and_extras():
    record = logging.LogRecord("account_audit", logging.INFO, __file__, 1, "account_deleted", None, None)
    record.account_id = 9
    cid = correlation_id_ctx.set("corr-1")
    ctx = request_context_ctx.set(RequestContext(ip_address="10.0.0.5"))
    try:
        data = json.loads(JsonFormatter().format(record))
    finally:
        request_context_ctx.reset(ctx)
        correlation_id_ctx.reset(cid)

    assert data["message"] == "account_deleted"
    assert data["level"] == "INFO"
    assert data["correlation_id"] == "corr-1"
    assert data["ip_address"] == "10.0.0.5"
    assert data["account_id"] == 9


def test_configure_logging_installs_one_handler():
    root = logging.getLogger()
    before = list(root.handlers)
    level = root.level
    try:
        configure_logging("INFO")
        configure_logging("WARNING")
        json_handlers = [h for h in root.handlers if isinstance(h.formatter, JsonFormatter)]
        assert len(json_handlers) == 1
        assert root.level == logging.WARNING
    finally:
        root.handlers[:] = before
        root.setLevel(level)


def test_storage_settings_do_not_need_session_secret(monkeypatch):
    monkeypatch.delenv("JWT_SECRET", raising=False)
    monkeypatch.setenv("DATABASE_URL", "sqlite+aiosqlite:///logs.db")
    settings = StorageSettings()
    assert settings.database_url == "sqlite+aiosqlite:///logs.db"
    assert settings.default_page_size == 50
    with pytest.raises(ValidationError):
        AppSettings()
