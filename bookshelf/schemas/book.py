"""
Book Pydantic Schemas

Request bodies are decoded strictly: unknown keys and values of the wrong
JSON type are rejected by FastAPI before the route runs (400 Bad Request).
Field RULES (title length, year range, positive pages) are not expressed
here; they are checked by bookshelf.models.book.validate_book on the record
that is about to be written, so a partial update is validated after it has
been merged into the stored book.
"""

from pydantic import BaseModel, ConfigDict, Field

# year and pages are 32-bit integer columns; larger values are rejected
# while decoding, like any other value of the wrong JSON type
INT32_MIN = -(2**31)
INT32_MAX = 2**31 - 1


class BookCreate(BaseModel):
    """
    Schema for creating a new book.

    Missing fields decode to their zero value and are then reported by the
    validator as "must be provided".

    Example request body:
    {
        "title": "Fahrenheit 451",
        "year": 1953,
        "pages": 158
    }
    """

    title: str = Field(
        default="",
        description="Book title (1 to 500 bytes)",
        examples=["Fahrenheit 451"],
    )

    year: int = Field(
        default=0,
        ge=INT32_MIN,
        le=INT32_MAX,
        description="Year of publication (1888 to the current year)",
        examples=[1953, 1949],
    )

    pages: int = Field(
        default=0,
        ge=INT32_MIN,
        le=INT32_MAX,
        description="Number of pages",
        examples=[158, 328],
    )

    model_config = ConfigDict(extra="forbid", strict=True)


class BookUpdate(BaseModel):
    """
    Schema for a partial update.

    A field that is absent (or null) keeps the stored value; a field that is
    present replaces it.
    """

    title: str | None = Field(default=None, description="Book title")
    year: int | None = Field(
        default=None, ge=INT32_MIN, le=INT32_MAX, description="Year of publication"
    )
    pages: int | None = Field(
        default=None, ge=INT32_MIN, le=INT32_MAX, description="Number of pages"
    )

    model_config = ConfigDict(extra="forbid", strict=True)


class BookResponse(BaseModel):
    """
    Schema for a single book in responses.

    version is the optimistic-concurrency token: send it back as the
    X-Expected-Version header to make an update conditional.
    """

    id: int = Field(..., description="Unique identifier")
    title: str = Field(..., description="Book title")
    year: int = Field(..., description="Year of publication")
    pages: int = Field(..., description="Number of pages")
    version: int = Field(..., description="Incremented on every update")

    model_config = ConfigDict(
        from_attributes=True,
        json_schema_extra={
            "example": {
                "id": 1,
                "title": "Fahrenheit 451",
                "year": 1953,
                "pages": 158,
                "version": 1,
            }
        },
    )


class Metadata(BaseModel):
    """
    Pagination metadata for list responses.

    Every field is zero when the query matched no records.
    """

    current_page: int = Field(default=0, ge=0)
    page_size: int = Field(default=0, ge=0)
    first_page: int = Field(default=0, ge=0)
    last_page: int = Field(default=0, ge=0)
    total_records: int = Field(default=0, ge=0)


class BookEnvelope(BaseModel):
    """Single-book response: {"books": {...}}."""

    books: BookResponse


class BookListEnvelope(BaseModel):
    """
    Paginated list response.

    Example:
    {
        "books": [...],
        "metadata": {"current_page": 1, "page_size": 20, "first_page": 1,
                     "last_page": 3, "total_records": 42}
    }
    """

    books: list[BookResponse]
    metadata: Metadata


class MessageResponse(BaseModel):
    """Plain message envelope."""

    message: str
