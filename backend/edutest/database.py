"""
Database connection and session management module.

Uses SQLAlchemy for ORM operations. Supports PostgreSQL (production)
and SQLite (local development and tests).
The engine and session factory are built from the Settings passed to
`create_app()` and live on `app.state`; routes get sessions through `get_db`.
Services wrap their writes in `run_in_transaction`.
"""

import logging
from typing import Callable

from fastapi import Request
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker, DeclarativeBase
from sqlalchemy.pool import StaticPool

from edutest.config import Settings
from edutest.errors import EduTestError, PersistenceError
from edutest.logging_config import get_logger, log_with_context

logger = get_logger("db")


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy ORM models."""
    pass


def _is_memory_sqlite(url: str) -> bool:
    return url in ("sqlite://", "sqlite:///:memory:") or ":memory:" in url


def make_engine(settings: Settings) -> Engine:
    """
    Create the SQLAlchemy engine for the configured database URL.

    SQLite does not support pool_size, max_overflow, or pool_pre_ping,
    and an in-memory database must share one connection across threads.
    """
    url = settings.DATABASE_URL
    engine_kwargs = {"echo": False}

    if url.startswith("postgresql"):
        engine_kwargs.update({
            "pool_size": 10,
            "max_overflow": 20,
            "pool_pre_ping": True,
        })
    elif url.startswith("sqlite"):
        engine_kwargs["connect_args"] = {"check_same_thread": False}
        if _is_memory_sqlite(url):
            engine_kwargs["poolclass"] = StaticPool

    engine = create_engine(url, **engine_kwargs)

    if url.startswith("sqlite"):
        @event.listens_for(engine, "connect")
        def set_sqlite_pragma(dbapi_connection, connection_record):
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA journal_mode=WAL")
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

    return engine


def make_session_factory(engine: Engine) -> sessionmaker:
    """Session factory bound to the given engine."""
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db(request: Request):
    """
    FastAPI dependency that provides a database session.

    Yields a session and ensures proper cleanup after request completion,
    so connections are returned to the pool even if the handler raises.
    """
    db = request.app.state.session_factory()
    try:
        yield db
    finally:
        db.close()


def create_tables(engine: Engine):
    """
    Create all database tables directly (used for SQLite and tests).
    For PostgreSQL, use Alembic migrations instead.
    """
    # Importing the package registers every model with Base.metadata
    import edutest.models  # noqa: F401

    Base.metadata.create_all(bind=engine)
    log_with_context(logger, "INFO", "Tables created",
                     extra_data={"tables": sorted(Base.metadata.tables)})


def run_in_transaction(db: Session, work: Callable, logger: logging.Logger,
                       context: dict = None, retries: int = 1):
    """
    Run `work()` and commit, as one all-or-nothing unit.

    Any failure rolls the whole unit back, so a caller retrying the request
    never finds partial rows. A unique-constraint conflict (two requests
    racing for the same rows) re-runs `work()` up to `retries` times; `work`
    must therefore re-read whatever it checks. Other database errors are
    logged and surface as PersistenceError.
    """
    last_error = None
    for attempt in range(1, retries + 1):
        try:
            result = work()
            db.commit()
            return result
        except IntegrityError as e:
            db.rollback()
            last_error = e
            log_with_context(logger, "WARNING",
                "Write conflict, retrying ({}/{})".format(attempt, retries),
                context=context, extra_data={"error": str(e.orig)})
        except EduTestError:
            db.rollback()
            raise
        except SQLAlchemyError as e:
            db.rollback()
            log_with_context(logger, "ERROR", "Transaction rolled back: {}".format(e),
                             context=context, exc_info=True)
            raise PersistenceError() from e

    log_with_context(logger, "ERROR", "Giving up after {} write conflicts".format(retries),
                     context=context)
    raise PersistenceError() from last_error
