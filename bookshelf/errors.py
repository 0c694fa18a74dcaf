"""
Error Classes

The book store reports failures with a small, closed set of exceptions.
Routers never look at raw SQLAlchemy errors: the store converts them into
one of these classes, and the exception handlers in bookshelf.main turn each
class into an HTTP response.

    StoreError            -> 500 (logged, opaque to the client)
    RecordNotFoundError   -> 404
    EditConflictError     -> 409 (client should re-fetch and retry)
    FailedValidationError -> 422 with the field → message mapping

Malformed request bodies are reported by FastAPI as RequestValidationError
and rendered as 400 Bad Request; describe_decode_error() builds the message.
"""

from collections.abc import Sequence
from typing import Any


class StoreError(Exception):
    """A store call failed for a reason the client cannot fix."""


class RecordNotFoundError(StoreError):
    """No record exists for the requested id."""


class EditConflictError(StoreError):
    """The record's version changed since it was read."""


class FailedValidationError(Exception):
    """Input was well-formed but broke one or more field rules."""

    def __init__(self, errors: dict[str, str]) -> None:
        super().__init__(f"validation failed: {errors}")
        self.errors = errors


def describe_decode_error(errors: Sequence[dict[str, Any]]) -> str:
    """
    Turn FastAPI's request validation errors into one client message.

    Only the first error is described, which is enough for the client to
    fix the request body.
    """
    if not errors:
        return "body contains badly-formed JSON"

    error = errors[0]
    error_type = error.get("type", "")
    loc = [str(part) for part in error.get("loc", ()) if part != "body"]
    field = ".".join(loc)

    if error_type == "json_invalid":
        return "body contains badly-formed JSON"
    if error_type == "extra_forbidden":
        return f'body contains unknown key "{field}"'
    if error_type == "missing" and not field:
        return "body must not be empty"
    if field:
        return f'body contains incorrect JSON type for field "{field}"'
    return "body must contain a single JSON object"
