"""
pytest Fixtures for Bookshelf API Tests

Shared fixtures used across all test files.

For database tests, we use:
- session scope for the engine (expensive to create)
- function scope for sessions, each wrapped in a transaction that is rolled
  back after the test, so tests never see each other's data
"""

# =============================================================================
# TEST ENVIRONMENT SETUP
# =============================================================================
# IMPORTANT: Set environment variables BEFORE importing the app.
# Rate limiting and API key checks are off unless a test turns them on.
import os

os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["API_KEY_ENABLED"] = "false"

from collections.abc import Generator

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from bookshelf.database import Base, get_db
from bookshelf.main import app
from bookshelf.models import Book
from bookshelf.services.book_store import BookStore

# =============================================================================
# DATABASE FIXTURES
# =============================================================================
# SQLite in-memory keeps tests fast and self-contained. PostgreSQL-only
# behaviour (full-text title search, statement_timeout) is not exercised here.


@pytest.fixture(scope="session")
def engine():
    """
    Create a SQLite in-memory database engine.

    StaticPool keeps the single connection alive for the whole session;
    without it the in-memory database would vanish between connections.
    """
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    Base.metadata.create_all(bind=engine)

    yield engine

    Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def db_session(engine) -> Generator[Session, None, None]:
    """
    Create a fresh database session for each test.

    The session is wrapped in a transaction that's rolled back,
    ensuring test isolation without needing to recreate tables.
    """
    TestSessionLocal = sessionmaker(
        autocommit=False,
        autoflush=False,
        bind=engine,
    )

    connection = engine.connect()
    transaction = connection.begin()
    session = TestSessionLocal(bind=connection)

    yield session

    session.close()
    transaction.rollback()
    connection.close()


@pytest.fixture(scope="function")
def client(db_session: Session) -> Generator[TestClient, None, None]:
    """
    Create a test client with the test database.

    get_db is overridden to hand out the test session.
    """

    def override_get_db():
        """Provide test database session instead of real one."""
        try:
            yield db_session
        finally:
            # A real request closes its session, dropping unsaved changes
            db_session.expire_all()

    app.dependency_overrides[get_db] = override_get_db

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


@pytest.fixture
def store(db_session: Session) -> BookStore:
    """Book store bound to the test session."""
    return BookStore(db_session)


# =============================================================================
# SAMPLE DATA FIXTURES
# =============================================================================


@pytest.fixture
def sample_book(db_session: Session) -> Book:
    """Create a sample book for testing."""
    book = Book(title="Fahrenheit 451", year=1953, pages=158)
    db_session.add(book)
    db_session.commit()
    db_session.refresh(book)
    return book


@pytest.fixture
def multiple_books(db_session: Session) -> list[Book]:
    """Create books with mixed years and titles for list tests."""
    data = [
        ("The Time Machine", 1895, 118),
        ("Nineteen Eighty-Four", 1949, 328),
        ("Animal Farm", 1945, 112),
        ("The Catcher in the Rye", 1951, 277),
        ("Brave New World", 1932, 311),
        ("The Old Man and the Sea", 1952, 127),
        ("The Hobbit", 1937, 310),
        ("The Grapes of Wrath", 1939, 464),
        ("Catch-22", 1961, 453),
        ("The Sea-Wolf", 1904, 366),
        ("Rebecca", 1938, 449),
        ("The Great Gatsby", 1925, 180),
    ]
    books = [Book(title=title, year=year, pages=pages) for title, year, pages in data]
    db_session.add_all(books)
    db_session.commit()
    for book in books:
        db_session.refresh(book)

    return books
