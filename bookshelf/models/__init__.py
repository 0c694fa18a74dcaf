"""
SQLAlchemy Models Package

Import all models here to:
1. Make them available as: from bookshelf.models import Book, APIKey
2. Ensure Alembic discovers them for migrations
"""

from bookshelf.models.api_key import APIKey
from bookshelf.models.book import Book, validate_book

__all__ = [
    "APIKey",
    "Book",
    "validate_book",
]
