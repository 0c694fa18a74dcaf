"""
Book Store

Persistence operations for books. The store is constructed with the
request's database session, so tests can hand it any session (an in-memory
SQLite one, for instance) and nothing is shared between requests.

Error Classification
====================
Every SQLAlchemy error is caught here and re-raised as one of:
- RecordNotFoundError: no row for the id
- EditConflictError: the row's version moved on since it was read
- StoreError: anything else (constraint violation, lost connection,
  statement timeout)

Callers only ever deal with those three.

Optimistic Concurrency
======================
update() writes with

    UPDATE books SET ..., version = version + 1
    WHERE id = :id AND version = :version
    RETURNING version

If another request updated the book first, no row matches and the update is
reported as an edit conflict. The client is expected to fetch the book again
and retry; the store never retries on its own.
"""

import logging
from collections.abc import Iterator
from contextlib import contextmanager

from sqlalchemy import delete, func, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from bookshelf.errors import EditConflictError, RecordNotFoundError, StoreError
from bookshelf.filters import Filters, calculate_metadata
from bookshelf.models import Book
from bookshelf.schemas.book import Metadata

logger = logging.getLogger(__name__)

# Year filter value meaning "any year"
ANY_YEAR = -1

books_table = Book.__table__


class BookStore:
    """
    CRUD access to the books table.

    Usage:
        store = BookStore(db)
        store.insert(book)
        book = store.get(book.id)
    """

    def __init__(self, db: Session) -> None:
        self.db = db

    @contextmanager
    def _guard(self, operation: str) -> Iterator[None]:
        """Roll back and re-raise database failures as StoreError."""
        try:
            yield
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.error(f"Book store {operation} failed: {exc}")
            raise StoreError(f"{operation} failed") from exc

    def insert(self, book: Book) -> Book:
        """
        Insert a new book.

        The database assigns id, created_at and version (1); they are loaded
        back into book.
        """
        with self._guard("insert"):
            self.db.add(book)
            self.db.commit()
            self.db.refresh(book)

        logger.info(f"Inserted book {book.id}")
        return book

    def get(self, book_id: int) -> Book:
        """
        Fetch a book by id.

        Raises:
            RecordNotFoundError: If book_id < 1 (no query is made) or no
                book has that id
        """
        if book_id < 1:
            raise RecordNotFoundError(f"book {book_id} not found")

        # populate_existing discards unsaved changes on an already-loaded book
        stmt = (
            select(Book)
            .where(Book.id == book_id)
            .execution_options(populate_existing=True)
        )
        with self._guard("get"):
            book = self.db.execute(stmt).scalar_one_or_none()

        if book is None:
            raise RecordNotFoundError(f"book {book_id} not found")
        return book

    def update(self, book: Book) -> Book:
        """
        Write book's fields if its version is still the stored version.

        book.version must be the version read earlier in the same request.
        On success book.version is the new, incremented version.

        Raises:
            EditConflictError: If the stored version differs (or the book
                was deleted in the meantime)
        """
        stmt = (
            update(books_table)
            .where(
                books_table.c.id == book.id,
                books_table.c.version == book.version,
            )
            .values(
                title=book.title,
                year=book.year,
                pages=book.pages,
                version=books_table.c.version + 1,
            )
            .returning(books_table.c.version)
        )
        with self._guard("update"):
            new_version = self.db.execute(stmt).scalar_one_or_none()

            if new_version is None:
                # Nothing was written; drop the pending in-memory changes too
                self.db.expire(book)
                logger.info(f"Edit conflict on book {book.id}")
                raise EditConflictError(f"book {book.id} was modified concurrently")

            # Fields are already written; commit must flush nothing more
            self.db.expire(book)
            self.db.commit()
            self.db.refresh(book)

        logger.info(f"Updated book {book.id} to version {new_version}")
        return book

    def delete(self, book_id: int) -> None:
        """
        Delete a book by id.

        Raises:
            RecordNotFoundError: If book_id < 1 or nothing was deleted
        """
        if book_id < 1:
            raise RecordNotFoundError(f"book {book_id} not found")

        stmt = delete(books_table).where(books_table.c.id == book_id)
        with self._guard("delete"):
            result = self.db.execute(stmt)
            if result.rowcount == 0:
                raise RecordNotFoundError(f"book {book_id} not found")
            self.db.commit()

        logger.info(f"Deleted book {book_id}")

    def get_all(
        self,
        title: str,
        year: int,
        filters: Filters,
    ) -> tuple[list[Book], Metadata]:
        """
        List books matching title and year, one page at a time.

        Args:
            title: Text to match in the title; "" matches every book.
                PostgreSQL uses full-text matching, other databases a
                case-insensitive substring match.
            year: Exact year, or ANY_YEAR (-1) for no year filter
            filters: Validated page, page size and sort

        Returns:
            Tuple of (books on this page, pagination metadata). The total is
            counted in the same statement with count(*) OVER ().
        """
        stmt = select(func.count().over().label("total_records"), Book)

        if title:
            stmt = stmt.where(self._title_matches(title))
        if year != ANY_YEAR:
            stmt = stmt.where(Book.year == year)

        sort_column = books_table.c[filters.sort_column]
        if filters.sort_direction == "DESC":
            stmt = stmt.order_by(sort_column.desc(), Book.id.asc())
        else:
            stmt = stmt.order_by(sort_column.asc(), Book.id.asc())

        stmt = stmt.limit(filters.limit).offset(filters.offset)

        with self._guard("get_all"):
            rows = self.db.execute(stmt).all()

        total_records = rows[0].total_records if rows else 0
        books = [row.Book for row in rows]
        return books, calculate_metadata(total_records, filters.page, filters.page_size)

    def _title_matches(self, title: str):
        if self.db.get_bind().dialect.name == "postgresql":
            return func.to_tsvector("simple", Book.title).bool_op("@@")(
                func.plainto_tsquery("simple", title)
            )
        return Book.title.icontains(title, autoescape=True)
