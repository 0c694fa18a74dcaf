"""
FastAPI Dependencies Module

Dependencies are reusable components injected into route handlers.
FastAPI's Depends() function manages their lifecycle.

Provided here:
- DbSession / Store: per-request database session and book store
- BookId: path id parsing (a malformed id is a 404, not a 400)
- BookListParams: list query parameters, validated into Filters
- RequireBooksRead / RequireBooksWrite: permission checks
"""

from typing import Annotated

from fastapi import Depends, Header, HTTPException, Query, status
from sqlalchemy.orm import Session

from bookshelf.config import get_settings
from bookshelf.database import get_db
from bookshelf.errors import FailedValidationError, RecordNotFoundError
from bookshelf.filters import Filters, validate_filters
from bookshelf.models import APIKey
from bookshelf.schemas.book import INT32_MAX, INT32_MIN
from bookshelf.services.auth import BOOKS_READ, BOOKS_WRITE, validate_api_key
from bookshelf.services.book_store import ANY_YEAR, BookStore
from bookshelf.validator import Validator

INT64_MAX = 2**63 - 1

DbSession = Annotated[Session, Depends(get_db)]


def get_book_store(db: DbSession) -> BookStore:
    """Book store bound to this request's session."""
    return BookStore(db)


Store = Annotated[BookStore, Depends(get_book_store)]


# =============================================================================
# Path Parameters
# =============================================================================
def get_book_id(book_id: str) -> int:
    """
    Parse the {book_id} path segment.

    Anything other than plain ASCII digits naming a positive 64-bit integer
    is treated as a book that does not exist ("+3", "1_0" and " 7 " too).

    Raises:
        RecordNotFoundError: If book_id is not a positive integer
    """
    if not (book_id.isascii() and book_id.isdigit()):
        raise RecordNotFoundError(f"invalid book id {book_id!r}")

    value = int(book_id)
    if value < 1 or value > INT64_MAX:
        raise RecordNotFoundError(f"invalid book id {book_id!r}")
    return value


BookId = Annotated[int, Depends(get_book_id)]


# =============================================================================
# List Parameters
# =============================================================================
BOOK_SORT_SAFELIST = ("id", "title", "year", "-id", "-title", "-year")


def read_int(raw: str | None, default: int, key: str, v: Validator) -> int:
    """
    Parse an integer query value.

    Returns default when the parameter is absent or empty; records
    "must be an integer value" on v when it does not parse.
    """
    if raw is None or raw == "":
        return default

    try:
        return int(raw)
    except ValueError:
        v.add_error(key, "must be an integer value")
        return default


class BookListParams:
    """
    Filter, sort and pagination parameters for GET /books.

    Query values arrive as raw strings so that a bad value becomes a field
    message in a 422 response instead of a framework error.

    Usage:
        GET /v1/books?title=fahrenheit&year=1953&page=2&page_size=10&sort=-year

    Raises:
        FailedValidationError: If any parameter is invalid; the store is not
            called in that case
    """

    def __init__(
        self,
        title: str = Query(
            default="",
            description="Words to match in the title (empty = all books)",
            examples=["fahrenheit"],
        ),
        year: str | None = Query(
            default=None,
            description="Exact publication year",
            examples=["1953"],
        ),
        page: str | None = Query(
            default=None,
            description="Page number (1-indexed, default 1)",
            examples=["1", "2"],
        ),
        page_size: str | None = Query(
            default=None,
            description="Items per page (1 to 100, default 20)",
            examples=["20"],
        ),
        sort: str = Query(
            default="id",
            description=f"One of {', '.join(BOOK_SORT_SAFELIST)}",
            examples=["-year"],
        ),
    ) -> None:
        v = Validator()

        self.title = title
        self.year = read_int(year, ANY_YEAR, "year", v)
        if not INT32_MIN <= self.year <= INT32_MAX:
            v.add_error("year", "must be an integer value")
            self.year = ANY_YEAR

        # An empty sort falls back to the default like an absent one
        self.filters = Filters(
            page=read_int(page, 1, "page", v),
            page_size=read_int(page_size, 20, "page_size", v),
            sort=sort or "id",
            sort_safelist=BOOK_SORT_SAFELIST,
        )

        validate_filters(v, self.filters)
        if not v.valid():
            raise FailedValidationError(v.errors)


BookListing = Annotated[BookListParams, Depends()]


# =============================================================================
# API Key Authentication
# =============================================================================
def get_api_key(
    db: DbSession,
    x_api_key: str | None = Header(None, alias="X-API-Key"),
) -> APIKey | None:
    """
    Extract and validate the API key from the request header.

    Returns None when authentication is disabled in settings.

    Raises:
        HTTPException: 401 if the key is missing or invalid
    """
    settings = get_settings()
    if not settings.api_key_enabled:
        return None

    if not x_api_key:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="you must be authenticated to access this resource",
            headers={"WWW-Authenticate": "ApiKey"},
        )

    api_key = validate_api_key(db, x_api_key)
    if api_key is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="invalid or expired API key",
            headers={"WWW-Authenticate": "ApiKey"},
        )

    return api_key


def require_permission(code: str):
    """
    Build a dependency that lets the request through only if the caller's
    API key carries the permission code.

    Usage:
        @router.get("/books")
        def list_books(_: Annotated[APIKey | None,
                                    Depends(require_permission("books:read"))]):
            ...
    """

    def check_permission(
        api_key: APIKey | None = Depends(get_api_key),
    ) -> APIKey | None:
        if api_key is not None and not api_key.has_permission(code):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="your API key doesn't have the necessary permissions "
                       "to access this resource",
            )
        return api_key

    return check_permission


RequireBooksRead = Annotated[APIKey | None, Depends(require_permission(BOOKS_READ))]
RequireBooksWrite = Annotated[APIKey | None, Depends(require_permission(BOOKS_WRITE))]
