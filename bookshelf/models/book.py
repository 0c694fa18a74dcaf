"""
Book Model

The single resource served by the API, plus the rules a book must satisfy
before it is written.

Optimistic Concurrency
======================
version starts at 1 and the store increments it by exactly one on every
successful update. An update only succeeds if the version the client read is
still the stored version, so two racing writers cannot silently overwrite
each other. Clients never set version themselves.
"""

from datetime import datetime

from sqlalchemy import BigInteger, DateTime, Integer, String, func, text
from sqlalchemy.orm import Mapped, mapped_column

from bookshelf.database import Base
from bookshelf.validator import Validator

TITLE_MAX_BYTES = 500
EARLIEST_YEAR = 1888


class Book(Base):
    """
    Book model.

    Table: books

    Fields:
    - title: Book title (required, at most 500 bytes)
    - year: Year of publication
    - pages: Number of pages
    - created_at: Set by the database on insert, never changed
    - version: Concurrency token, set to 1 on insert

    Example:
        book = Book(title="Fahrenheit 451", year=1953, pages=158)
    """

    __tablename__ = "books"

    # -------------------------------------------------------------------------
    # Primary Key
    # -------------------------------------------------------------------------
    # SQLite only auto-increments INTEGER PRIMARY KEY columns
    id: Mapped[int] = mapped_column(
        BigInteger().with_variant(Integer, "sqlite"),
        primary_key=True,
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )

    # -------------------------------------------------------------------------
    # Basic Fields
    # -------------------------------------------------------------------------
    title: Mapped[str] = mapped_column(
        String(TITLE_MAX_BYTES),
        nullable=False,
        comment="Book title"
    )

    year: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        index=True,
        comment="Year of publication"
    )

    pages: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        comment="Number of pages"
    )

    version: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=1,
        server_default=text("1"),
        comment="Optimistic concurrency token"
    )

    def __repr__(self) -> str:
        return f"Book(id={self.id}, title='{self.title}', version={self.version})"


def validate_book(v: Validator, book: Book) -> None:
    """
    Record every rule the book breaks on v.

    All checks run so the client sees every bad field at once; the first
    message per field is kept.
    """
    title = book.title or ""
    v.check(title != "", "title", "must be provided")
    v.check(
        len(title.encode("utf-8")) <= TITLE_MAX_BYTES,
        "title",
        "must not be more than 500 bytes long",
    )

    year = book.year or 0
    v.check(year != 0, "year", "must be provided")
    v.check(year >= EARLIEST_YEAR, "year", "must be greater than 1888")
    v.check(year <= datetime.now().year, "year", "must not be in the future")

    pages = book.pages or 0
    v.check(pages != 0, "pages", "must be provided")
    v.check(pages > 0, "pages", "must be a positive integer")
