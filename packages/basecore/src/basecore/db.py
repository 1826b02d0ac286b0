"""
Database session factory.

The engine and sessionmaker are created lazily from DATABASE_URL so importing
this module has no side effects.
"""

import functools
from collections.abc import Iterator
from contextlib import contextmanager

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from basecore.settings import get_settings


@functools.lru_cache()
def get_engine() -> Engine:
    """
    Get SQLAlchemy engine (cached).

    SQLite URLs (local runs) are opened with check_same_thread disabled so the
    gateway's worker threads can share the connection.
    """
    url = get_settings().DATABASE_URL
    connect_args = {"check_same_thread": False} if url.startswith("sqlite") else {}
    return create_engine(url, pool_pre_ping=True, echo=False, connect_args=connect_args)


@functools.lru_cache()
def get_sessionmaker() -> sessionmaker:
    """Get SQLAlchemy sessionmaker (cached)."""
    return sessionmaker(autocommit=False, autoflush=False, bind=get_engine())


def get_db() -> Iterator[Session]:
    """
    Dependency generator for FastAPI to get database session.

    Yields a database session and ensures it's closed after use.
    Routes own the transaction and commit explicitly.
    """
    db = get_sessionmaker()()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def session_scope() -> Iterator[Session]:
    """
    Session for scripts and CLI commands.

    Rolls back on error; callers commit.
    """
    db = get_sessionmaker()()
    try:
        yield db
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()
