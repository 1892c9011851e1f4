"""Database engine and read-only sessions for ledger snapshots"""

from typing import Any, Dict, Generator
from sqlalchemy import create_engine
from sqlalchemy.engine import make_url
from sqlalchemy.orm import sessionmaker, Session
from debt_analytics.config import settings


def engine_options(database_url: str) -> Dict[str, Any]:
    """
    Pooling for server databases; SQLite (local runs) gets a single-thread-safe connection instead.

    Server databases read at REPEATABLE READ: a report issues one query for the
    accounts and one per account for its ledger, and every one of them must see
    the same committed state.
    """
    if make_url(database_url).get_backend_name() == "sqlite":
        return {"connect_args": {"check_same_thread": False}}
    return {
        "isolation_level": "REPEATABLE READ",
        "pool_pre_ping": True,
        "pool_size": settings.db_pool_size,
        "max_overflow": settings.db_max_overflow,
        "pool_recycle": settings.db_pool_recycle_seconds,
    }


engine = create_engine(settings.database_url, **engine_options(settings.database_url))

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db() -> Generator[Session, None, None]:
    """
    One session per report, so every read for the report shares a transaction
    and, with the engine's isolation level, a single view of the ledger.

    Reports never write; the transaction is rolled back rather than committed.
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.rollback()
        db.close()
