"""Audit log reader CLI implemented with Typer. Exactly one filter per invocation."""

from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager
from typing import AsyncContextManager, AsyncIterator, Callable, Optional

import typer

from account_audit.config.settings import get_storage_settings
from account_audit.governance.audit_models import LogEntry
from account_audit.governance.exceptions import InvalidFilterCombinationError
from account_audit.governance.log_query_engine import LogQueryEngine
from account_audit.infrastructure.database.log_repository_db import DbLogRepository
from account_audit.infrastructure.database.session import build_engine, build_sessionmaker

SUCCESS_EXIT_CODE = 0
ERROR_EXIT_CODE = 1
INVALID_EXIT_CODE = 2

TABLE_HEADERS = ["#", "Name", "Message", "Time", "Ip Address", "User"]


@asynccontextmanager
async def open_query_engine(database_url: str, page_size: int) -> AsyncIterator[LogQueryEngine]:
    """Query engine over the configured database. The engine is disposed on exit."""
    engine = build_engine(database_url)
    try:
        yield LogQueryEngine(DbLogRepository(build_sessionmaker(engine)), page_size)
    finally:
        await engine.dispose()


# Replaced in tests.
query_engine_factory: Callable[[str, int], AsyncContextManager[LogQueryEngine]] = open_query_engine


async def fetch_all(
    query_engine: LogQueryEngine,
    *,
    status: Optional[str],
    user: Optional[int],
    ip: Optional[str],
    page_size: int,
) -> list[LogEntry]:
    """Read every page for the filter, newest first."""
    entries: list[LogEntry] = []
    page = 1
    while True:
        batch = await query_engine.query(
            status=status, user_id=user, ip=ip, page=page, page_size=page_size
        )
        entries.extend(batch)
        if len(batch) < page_size:
            return entries
        page += 1


async def read_all(
    database_url: str,
    *,
    status: Optional[str],
    user: Optional[int],
    ip: Optional[str],
    page_size: int,
) -> list[LogEntry]:
    async with query_engine_factory(database_url, page_size) as query_engine:
        return await fetch_all(
            query_engine, status=status, user=user, ip=ip, page_size=page_size
        )


def _row(entry: LogEntry) -> list[str]:
    return [
        str(entry.id),
        entry.name,
        entry.message,
        entry.formatted_time(),
        entry.ip_address or "",
        "" if entry.user_id is None else str(entry.user_id),
    ]


def render_table(headers: list[str], rows: list[list[str]]) -> str:
    """Render rows as a plain-text table with a header rule."""
    widths = [len(h) for h in headers]
    for row in rows:
        for i, cell in enumerate(row):
            widths[i] = max(widths[i], len(cell))

    def line(cells: list[str]) -> str:
        return "  ".join(cell.ljust(widths[i]) for i, cell in enumerate(cells)).rstrip()

    rule = "  ".join("-" * w for w in widths)
    return "\n".join([rule, line(headers), rule, *(line(r) for r in rows), rule])


def read_logs(
    status: Optional[str] = typer.Option(
        None, "--status", help="Filter by status (READED, UNREADED; also read, open)"
    ),
    user: Optional[int] = typer.Option(None, "--user", help="Filter by user (account id)"),
    ip: Optional[str] = typer.Option(None, "--ip", help="Filter by IP address (192.168.1.1)"),
    database_url: Optional[str] = typer.Option(
        None, "--database-url", envvar="DATABASE_URL", help="Overrides the configured database"
    ),
) -> None:
    """
    Read audit logs matching one filter, oldest first.

    Only one of --status, --user or --ip can be used at a time.
    """
    status = status.strip().upper() if status and status.strip() else None
    ip = ip.strip() if ip and ip.strip() else None
    if status is None and user is None and ip is None:
        typer.echo("error: You must specify one parameter (--status, --user, or --ip).", err=True)
        raise typer.Exit(code=INVALID_EXIT_CODE)

    settings = get_storage_settings()
    page_size = settings.default_page_size
    try:
        entries = asyncio.run(
            read_all(
                database_url or settings.database_url,
                status=status, user=user, ip=ip, page_size=page_size,
            )
        )
    except InvalidFilterCombinationError as exc:
        typer.echo(f"error: You can only use one parameter at a time. ({exc.message})", err=True)
        raise typer.Exit(code=ERROR_EXIT_CODE) from exc

    if not entries:
        typer.echo("error: No logs found for your specified filter.", err=True)
        raise typer.Exit(code=INVALID_EXIT_CODE)

    # Storage order is newest first; display oldest first.
    rows = [_row(entry) for entry in reversed(entries)]
    typer.echo(render_table(TABLE_HEADERS, rows))
    raise typer.Exit(code=SUCCESS_EXIT_CODE)


app = typer.Typer(help="Audit log tools")


@app.callback()
def main() -> None:
    """Audit log tools."""


app.command("read")(read_logs)
