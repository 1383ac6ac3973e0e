"""
Database engine lifecycle and session management.

The engine is created explicitly by init_db() (application lifespan, CLI)
and disposed by close_db(); nothing connects at import time.
"""

import os
from collections.abc import Generator
from contextlib import contextmanager

from sqlalchemy import Engine, create_engine, text
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from pos_shared.config.logging import get_logger
from pos_shared.config.settings import settings
from pos_shared.utils.exceptions import DatabaseError

logger = get_logger(__name__)

_engine: Engine | None = None
SessionLocal = sessionmaker(autoflush=False, autocommit=False, expire_on_commit=False)


def _calculate_pool_size() -> int:
    """(2 * CPU cores) + 1, capped at 20."""
    cores = os.cpu_count() or 4
    return min(cores * 2 + 1, 20)


def _engine_options(database_url: str) -> dict:
    if database_url.startswith("sqlite"):
        options: dict = {"connect_args": {"check_same_thread": False}}
        if ":memory:" in database_url or database_url.rstrip("/") == "sqlite:":
            options["poolclass"] = StaticPool
        return options
    return {
        "pool_pre_ping": True,
        "pool_size": _calculate_pool_size(),
        "max_overflow": 15,
        "pool_timeout": 30,
        "pool_recycle": 1800,
        "connect_args": {"connect_timeout": 10},
    }


def init_db(database_url: str | None = None) -> Engine:
    """
    Create the engine and bind the session factory to it.

    Calling it again with an engine already open returns the existing one.
    """
    global _engine
    if _engine is not None:
        return _engine

    url = database_url or settings.database_url
    _engine = create_engine(url, echo=settings.database_echo, **_engine_options(url))
    SessionLocal.configure(bind=_engine)
    logger.info("Database engine initialized", dialect=_engine.dialect.name)
    return _engine


def close_db() -> None:
    """Dispose the engine and its pooled connections."""
    global _engine
    if _engine is None:
        return
    _engine.dispose()
    _engine = None
    SessionLocal.configure(bind=None)
    logger.info("Database engine disposed")


def get_engine() -> Engine:
    if _engine is None:
        raise RuntimeError("Database not initialized; call init_db() first")
    return _engine


def get_db() -> Generator[Session, None, None]:
    """
    FastAPI dependency for database sessions.

    Usage:
        @router.get("/tables")
        def list_tables(db: Session = Depends(get_db)):
            ...

    The session is closed after the request completes.
    """
    db = SessionLocal(bind=get_engine())
    try:
        yield db
    finally:
        db.close()


@contextmanager
def get_db_context() -> Generator[Session, None, None]:
    """
    Context manager for database sessions outside of FastAPI.

    Usage:
        with get_db_context() as db:
            UserRepository(db).find_by_email(email)
    """
    db = SessionLocal(bind=get_engine())
    try:
        yield db
    finally:
        db.close()


def safe_commit(db: Session) -> None:
    """
    Commit with automatic rollback on failure.

    Integrity errors are re-raised unchanged so callers can translate them
    into domain conflicts; anything else becomes a DatabaseError.
    """
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise
    except SQLAlchemyError as exc:
        db.rollback()
        raise DatabaseError("commit", error=str(exc)) from exc


def ping(db: Session) -> bool:
    """Round-trip a trivial query; used by the health endpoint."""
    try:
        db.execute(text("SELECT 1"))
        return True
    except SQLAlchemyError:
        logger.warning("Database ping failed", exc_info=True)
        return False
