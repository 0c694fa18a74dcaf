"""
Database Configuration Module

This module sets up SQLAlchemy 2.0 for the Bookshelf API.

We use SYNCHRONOUS SQLAlchemy with psycopg2: each request runs in its own
worker thread with its own session, so a slow statement only ever blocks the
request that issued it.

Session Management Pattern
==========================
We use the "session per request" pattern:
1. Request arrives → create a new session
2. Use session for all database operations in that request
3. Commit on success, rollback on failure
4. Close session when request ends

Store Call Timeout
==================
Every statement is bounded by settings.db_query_timeout. On PostgreSQL the
server enforces it through statement_timeout, and waiting for a pooled
connection is bounded by pool_timeout. A timed-out statement raises an
OperationalError, which the book store reports as a generic store error.
"""

import math
from collections.abc import Generator

from sqlalchemy import create_engine
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker

from bookshelf.config import get_settings

settings = get_settings()

# Expression indexes that exist only in migrations, not on the models
MIGRATION_ONLY_INDEXES = frozenset({"ix_books_title_fts"})


def build_connect_args(database_url: str, timeout_ms: int) -> dict:
    """
    DBAPI connect arguments that bound each statement to timeout_ms.

    Only PostgreSQL understands the statement_timeout option; other
    backends (SQLite in tests) get no extra arguments.
    """
    if not database_url.startswith("postgresql"):
        return {}
    return {
        "options": f"-c statement_timeout={timeout_ms}",
        "connect_timeout": max(1, math.ceil(timeout_ms / 1000)),
    }


# =============================================================================
# Database Engine
# =============================================================================
# - pool_size / max_overflow: connection pool sizing
# - pool_timeout: how long a request may wait for a free connection
# - pool_pre_ping: test connection health before using
# - echo: log SQL statements in debug mode

engine = create_engine(
    settings.database_url,
    pool_size=settings.db_pool_size,
    max_overflow=settings.db_max_overflow,
    pool_timeout=settings.db_query_timeout,
    pool_pre_ping=True,
    echo=settings.debug,
    connect_args=build_connect_args(
        settings.database_url, settings.db_query_timeout_ms
    ),
)


# =============================================================================
# Session Factory
# =============================================================================
SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine,
)


# =============================================================================
# Base Model Class
# =============================================================================
class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy models.

    Alembic uses Base.metadata to discover tables for migrations.
    """
    pass


# =============================================================================
# Dependency Injection
# =============================================================================
def get_db() -> Generator[Session, None, None]:
    """
    Database session dependency for FastAPI.

    Code before yield creates the session, the route handler uses it, and
    the finally block closes it even if the handler raised.

    Yields:
        SQLAlchemy Session instance
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


# =============================================================================
# Utility Functions
# =============================================================================
def create_tables() -> None:
    """
    Create all database tables.

    Useful for development and tests. In production, use Alembic migrations.
    """
    Base.metadata.create_all(bind=engine)


def include_in_autogenerate(obj, name, type_, reflected, compare_to) -> bool:
    """
    Alembic include_object hook.

    Indexes created only by raw SQL in a migration (the full-text title
    index) have no model counterpart; without this hook autogenerate would
    emit a DROP INDEX for them.
    """
    if type_ == "index" and reflected and compare_to is None:
        return name not in MIGRATION_ONLY_INDEXES
    return True


def drop_tables() -> None:
    """
    Drop all database tables.

    DANGER: This deletes all data! Never use in production.
    """
    Base.metadata.drop_all(bind=engine)
