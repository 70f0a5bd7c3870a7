# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Database connection management using SQLAlchemy.

This module owns the engine and sessionmaker used by the SQL stores.
Training sessions are driven synchronously, so the stores use the
SQLAlchemy 2.0 synchronous API; SQLite is the default backend.

Example:
    from src.infrastructure.storage.connection import init_database, get_session

    # Initialize at application startup
    init_database(settings)
    create_schema()

    with get_session() as session:
        rows = session.scalars(select(PerformanceRow)).all()
"""

from contextlib import contextmanager
from typing import TYPE_CHECKING, Iterator, Optional

from sqlalchemy import Engine, create_engine, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from src.infrastructure.storage.base import StorageError
from src.infrastructure.storage.models import Base

if TYPE_CHECKING:
    from src.core.config.settings import Settings

# Module-level state for the default connection
_engine: Optional[Engine] = None
_sessionmaker: Optional[sessionmaker[Session]] = None


def create_database_engine(url: str, echo: bool = False) -> Engine:
    """Create an engine for ``url``.

    In-memory SQLite databases share a single connection so that every
    session sees the same data.

    Raises:
        StorageError: If the engine cannot be created.
    """
    kwargs: dict = {"echo": echo}
    if url.startswith("sqlite"):
        kwargs["connect_args"] = {"check_same_thread": False}
        if url in ("sqlite://", "sqlite:///:memory:"):
            kwargs["poolclass"] = StaticPool
    else:
        kwargs["pool_pre_ping"] = True

    try:
        return create_engine(url, **kwargs)
    except (SQLAlchemyError, ValueError) as e:
        raise StorageError("Failed to create database engine", e) from e


def create_session_factory(engine: Engine) -> sessionmaker[Session]:
    """Create a sessionmaker bound to ``engine``."""
    return sessionmaker(bind=engine, expire_on_commit=False, autoflush=False)


def init_database(settings: "Settings") -> None:
    """Initialize the default database connection.

    Args:
        settings: Application settings containing storage configuration.

    Raises:
        StorageError: If engine creation fails.
    """
    global _engine, _sessionmaker

    _engine = create_database_engine(settings.storage.url, echo=settings.storage.echo)
    _sessionmaker = create_session_factory(_engine)


def close_database() -> None:
    """Dispose of the default connection pool."""
    global _engine, _sessionmaker

    if _engine is not None:
        _engine.dispose()
        _engine = None
        _sessionmaker = None


def get_engine() -> Engine:
    """Get the default engine.

    Raises:
        StorageError: If the database has not been initialized.
    """
    if _engine is None:
        raise StorageError("Database not initialized. Call init_database() first.")
    return _engine


def get_sessionmaker() -> sessionmaker[Session]:
    """Get the default sessionmaker.

    Raises:
        StorageError: If the database has not been initialized.
    """
    if _sessionmaker is None:
        raise StorageError("Database not initialized. Call init_database() first.")
    return _sessionmaker


def create_schema(engine: Engine | None = None) -> None:
    """Create all store tables that do not exist yet.

    Raises:
        StorageError: If table creation fails.
    """
    try:
        Base.metadata.create_all(engine or get_engine())
    except SQLAlchemyError as e:
        raise StorageError("Failed to create schema", e) from e


@contextmanager
def session_scope(factory: sessionmaker[Session]) -> Iterator[Session]:
    """Open a session that commits on success and rolls back on error.

    Yields:
        Session for database operations.

    Raises:
        StorageError: If a database operation fails.
    """
    with factory() as session:
        try:
            yield session
            session.commit()
        except SQLAlchemyError as e:
            session.rollback()
            raise StorageError("Database operation failed", e) from e
        except Exception:
            session.rollback()
            raise


@contextmanager
def get_session() -> Iterator[Session]:
    """Open a session on the default database.

    Example:
        with get_session() as session:
            session.add(row)
    """
    with session_scope(get_sessionmaker()) as session:
        yield session


def check_database_connection() -> bool:
    """Check if the default database is reachable."""
    if _engine is None:
        return False

    try:
        with _engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        return True
    except SQLAlchemyError:
        return False
