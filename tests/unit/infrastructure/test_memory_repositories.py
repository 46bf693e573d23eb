"""In-memory repositories: detached copies and lock-serialized ids."""

import asyncio

import pytest

from account_audit.domain.exceptions import DuplicateAccountError, NotFoundError
from account_audit.domain.models.account import Account
from account_audit.governance.audit_models import AuditRecord, LogLevel


def _account(email="a@x.com"):
    return Account(email=email, first_name="Jo", last_name="Doe", credential_hash="h")


@pytest.mark.asyncio
async def test_stored_accounts_are_detached(account_repository):
    stored = await account_repository.add(_account())
    stored.add_role("admin")
    assert (await account_repository.get(stored.id)).roles == {"ROLE_USER"}


@pytest.mark.asyncio
async def test_duplicate_and_missing(account_repository):
    await account_repository.add(_account())
    with pytest.raises(DuplicateAccountError):
        await account_repository.add(_account())
    ghost = _account("b@x.com")
    ghost.id = 41
    with pytest.raises(NotFoundError):
        await account_repository.save(ghost)


@pytest.mark.asyncio
async def test_account_ids_never_reused(account_repository):
    first = await account_repository.add(_account("a@x.com"))
    await account_repository.delete(first.id)
    second = await account_repository.add(_account("b@x.com"))
    assert second.id == first.id + 1


@pytest.mark.asyncio
async def test_concurrent_log_appends_get_unique_ids(log_repository):
    records = [
        AuditRecord(name="svc", message=f"m{i}", level=LogLevel.INFO, time=None)
        for i in range(100)
    ]
    entries = await asyncio.gather(*(log_repository.append(r) for r in records))
    assert sorted(e.id for e in entries) == list(range(1, 101))


@pytest.mark.asyncio
async def test_triage_ignores_unknown_ids(log_repository):
    assert await log_repository.triage.set_status(3, "READED") is False
    assert await log_repository.triage.count("UNREADED") == 0
