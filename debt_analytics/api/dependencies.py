"""Dependency injection for FastAPI endpoints"""

from datetime import date, datetime, timezone
from typing import Generator
from fastapi import Depends, Header, Query, Request
from sqlalchemy.orm import Session
from debt_analytics.config import LedgerBackend, settings
from debt_analytics.domain.ledger import LedgerReader
from debt_analytics.domain.reports import ReportOptions
from debt_analytics.infrastructure.clients.ledger import LedgerClient
from debt_analytics.infrastructure.database.repositories import SqlLedgerSource
from debt_analytics.infrastructure.database.session import get_db


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def get_owner_id(x_owner_id: str = Header(..., min_length=1, description="Authenticated owner identifier")) -> str:
    """Caller identity, established upstream by the auth layer"""
    return x_owner_id


def get_as_of(as_of: date | None = Query(None, description="Reporting date, defaults to today (UTC)")) -> date:
    """The only place the clock is read; the engine receives the date explicitly"""
    return as_of or datetime.now(timezone.utc).date()


def get_ledger_reader(db: Session = Depends(get_db)) -> Generator[LedgerReader, None, None]:
    """Provide a ledger reader over the configured backend for the duration of one request"""
    if settings.ledger_backend == LedgerBackend.SERVICE:
        with LedgerClient() as client:
            yield LedgerReader(client)
    else:
        yield LedgerReader(SqlLedgerSource(db))


def get_report_options() -> ReportOptions:
    """Provide analytics tunables from settings"""
    return settings.report_options()
