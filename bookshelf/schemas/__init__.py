"""
Pydantic Schemas Package

This package contains Pydantic models for request/response validation.

Schema Naming Convention:
- XxxCreate: Body accepted when creating a record
- XxxUpdate: Body accepted for a partial update (all fields optional)
- XxxResponse: A record as returned to clients
- XxxEnvelope: Top-level response body wrapping a payload under a key
"""

from bookshelf.schemas.book import (
    BookCreate,
    BookEnvelope,
    BookListEnvelope,
    BookResponse,
    BookUpdate,
    MessageResponse,
    Metadata,
)

__all__ = [
    "BookCreate",
    "BookUpdate",
    "BookResponse",
    "BookEnvelope",
    "BookListEnvelope",
    "Metadata",
    "MessageResponse",
]
