"""
Field Validator

Collects human-readable validation failures keyed by field name, so a
request that breaks several rules gets all of them back in one response.

Usage:
    v = Validator()
    v.check(book.title != "", "title", "must be provided")
    if not v.valid():
        raise FailedValidationError(v.errors)

The first failure recorded for a field wins; later checks on the same field
do not overwrite it. Create a fresh Validator for every object you validate.
"""

from typing import Any


class Validator:
    """Accumulates field → message validation failures."""

    def __init__(self) -> None:
        self.errors: dict[str, str] = {}

    def valid(self) -> bool:
        """True if no failure has been recorded."""
        return not self.errors

    def add_error(self, field: str, message: str) -> None:
        """Record a failure for field unless one is already present."""
        if field not in self.errors:
            self.errors[field] = message

    def check(self, ok: bool, field: str, message: str) -> None:
        """Record message under field when ok is false."""
        if not ok:
            self.add_error(field, message)


def permitted_value(value: Any, *permitted: Any) -> bool:
    """Check that value is one of the permitted values."""
    return value in permitted
