"""
Books Router

CRUD endpoints for books.

Each handler follows the same steps:
1. Decode the request (FastAPI rejects malformed bodies with 400)
2. Validate the record about to be written, or the list parameters (422)
3. Call the book store
4. Wrap the result in a {"books": ...} envelope

Store errors are not caught here: RecordNotFoundError, EditConflictError
and StoreError are turned into 404, 409 and 500 responses by the exception
handlers registered in bookshelf.main.
"""

from fastapi import APIRouter, Header, Request, Response, status

from bookshelf.config import get_settings
from bookshelf.dependencies import (
    BookId,
    BookListing,
    RequireBooksRead,
    RequireBooksWrite,
    Store,
)
from bookshelf.errors import EditConflictError, FailedValidationError
from bookshelf.models import Book, validate_book
from bookshelf.schemas import (
    BookCreate,
    BookEnvelope,
    BookListEnvelope,
    BookResponse,
    BookUpdate,
    MessageResponse,
)
from bookshelf.services.rate_limiter import limiter
from bookshelf.validator import Validator

settings = get_settings()

router = APIRouter(
    prefix="/books",
    tags=["Books"],
    responses={
        404: {"description": "Book not found"},
    },
)


def ensure_valid(book: Book) -> None:
    """
    Run the book rules and stop the request if any fail.

    Raises:
        FailedValidationError: With every failing field
    """
    v = Validator()
    validate_book(v, book)
    if not v.valid():
        raise FailedValidationError(v.errors)


@router.post(
    "",
    response_model=BookEnvelope,
    status_code=status.HTTP_201_CREATED,
    summary="Create a new book",
    description="Create a book. Requires the books:write permission.",
)
@limiter.limit(settings.rate_limit_write)
def create_book(
    request: Request,
    response: Response,
    book_data: BookCreate,
    store: Store,
    _: RequireBooksWrite,
) -> BookEnvelope:
    """
    Create a new book.

    The new book starts at version 1. The Location header points at it.
    """
    book = Book(
        title=book_data.title,
        year=book_data.year,
        pages=book_data.pages,
    )
    ensure_valid(book)

    store.insert(book)

    response.headers["Location"] = f"/{settings.api_version}/books/{book.id}"
    return BookEnvelope(books=BookResponse.model_validate(book))


@router.get(
    "",
    response_model=BookListEnvelope,
    summary="List books",
    description="Filter by title and year, sort, and paginate. "
                "Requires the books:read permission.",
)
@limiter.limit(settings.rate_limit_default)
def list_books(
    request: Request,
    _: RequireBooksRead,
    params: BookListing,
    store: Store,
) -> BookListEnvelope:
    """
    List books with filtering, sorting and pagination.

    Examples:
        GET /v1/books?title=fahrenheit
        GET /v1/books?year=1949&sort=-title&page=2&page_size=5
    """
    books, metadata = store.get_all(params.title, params.year, params.filters)

    return BookListEnvelope(
        books=[BookResponse.model_validate(book) for book in books],
        metadata=metadata,
    )


@router.get(
    "/{book_id}",
    response_model=BookEnvelope,
    summary="Get a book by ID",
    description="Requires the books:read permission.",
)
@limiter.limit(settings.rate_limit_default)
def get_book(
    request: Request,
    _: RequireBooksRead,
    book_id: BookId,
    store: Store,
) -> BookEnvelope:
    book = store.get(book_id)
    return BookEnvelope(books=BookResponse.model_validate(book))


@router.patch(
    "/{book_id}",
    response_model=BookEnvelope,
    summary="Update a book",
    description="Partially update a book. Send X-Expected-Version to make "
                "the update conditional. Requires the books:write permission.",
    responses={
        409: {"description": "The book was modified by someone else"},
    },
)
@limiter.limit(settings.rate_limit_write)
def update_book(
    request: Request,
    _: RequireBooksWrite,
    book_id: BookId,
    book_data: BookUpdate,
    store: Store,
    expected_version: str | None = Header(None, alias="X-Expected-Version"),
) -> BookEnvelope:
    """
    Update an existing book.

    Only fields present (and not null) in the body are changed; the rest
    keep their stored values. The merged book is validated, then written
    only if nobody else updated it since it was read. A 409 means the
    client should fetch the book again and retry.
    """
    book = store.get(book_id)

    if expected_version and expected_version != str(book.version):
        raise EditConflictError(
            f"book {book.id} is at version {book.version}, "
            f"expected {expected_version}"
        )

    for field, value in book_data.model_dump(exclude_none=True).items():
        setattr(book, field, value)

    ensure_valid(book)

    store.update(book)

    return BookEnvelope(books=BookResponse.model_validate(book))


@router.delete(
    "/{book_id}",
    response_model=MessageResponse,
    summary="Delete a book",
    description="Permanently delete a book. Requires the books:write permission.",
)
@limiter.limit(settings.rate_limit_write)
def delete_book(
    request: Request,
    _: RequireBooksWrite,
    book_id: BookId,
    store: Store,
) -> MessageResponse:
    store.delete(book_id)
    return MessageResponse(message="book successfully deleted")
