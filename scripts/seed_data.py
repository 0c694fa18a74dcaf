#!/usr/bin/env python3
"""
Database Seed Script

Populates the database with sample books for development and testing, and
optionally mints an API key.

USAGE:
    # From the project root with the venv activated
    python scripts/seed_data.py
    python scripts/seed_data.py --keep-existing
    python scripts/seed_data.py --api-key "Local dev" --permissions books:read books:write

This script:
1. Connects to the database using bookshelf settings
2. Clears existing books (unless --keep-existing)
3. Inserts sample books through the book store, so they are validated and
   versioned exactly like books created over the API
4. Optionally creates an API key and prints it once
"""

import argparse
import sys
from pathlib import Path

# Add project root to Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from sqlalchemy import delete
from sqlalchemy.orm import Session

from bookshelf.database import SessionLocal, create_tables
from bookshelf.models import Book, validate_book
from bookshelf.services.auth import ALL_PERMISSIONS, create_api_key
from bookshelf.services.book_store import BookStore
from bookshelf.validator import Validator

BOOKS_DATA = [
    {"title": "The Hound of the Baskervilles", "year": 1902, "pages": 256},
    {"title": "The Time Machine", "year": 1895, "pages": 118},
    {"title": "Ulysses", "year": 1922, "pages": 730},
    {"title": "The Great Gatsby", "year": 1925, "pages": 180},
    {"title": "Brave New World", "year": 1932, "pages": 311},
    {"title": "Nineteen Eighty-Four", "year": 1949, "pages": 328},
    {"title": "The Catcher in the Rye", "year": 1951, "pages": 277},
    {"title": "The Fellowship of the Ring", "year": 1954, "pages": 423},
    {"title": "To Kill a Mockingbird", "year": 1960, "pages": 281},
    {"title": "One Hundred Years of Solitude", "year": 1967, "pages": 417},
    {"title": "The Left Hand of Darkness", "year": 1969, "pages": 304},
    {"title": "Beloved", "year": 1987, "pages": 324},
]


def clear_data(db: Session) -> None:
    """Clear all existing books."""
    print("Clearing existing books...")
    db.execute(delete(Book))
    db.commit()
    print("Books cleared.")


def create_books(db: Session) -> list[Book]:
    """Insert the sample books."""
    print("Creating books...")
    store = BookStore(db)
    books = []
    for data in BOOKS_DATA:
        book = Book(**data)
        v = Validator()
        validate_book(v, book)
        if not v.valid():
            raise ValueError(f"Sample book {data['title']!r} is invalid: {v.errors}")
        books.append(store.insert(book))

    print(f"Created {len(books)} books.")
    return books


def seed_database(
    clear_existing: bool = True,
    api_key_name: str | None = None,
    permissions: list[str] | None = None,
) -> None:
    """
    Main function to seed the database.

    Args:
        clear_existing: If True, clears existing books before seeding.
        api_key_name: If given, also create an API key with this name.
        permissions: Permission codes for the new API key.
    """
    print("=" * 60)
    print("Starting database seed...")
    print("=" * 60)

    create_tables()

    db = SessionLocal()

    try:
        if clear_existing:
            clear_data(db)

        books = create_books(db)

        print("=" * 60)
        print("Database seeding completed successfully!")
        print("=" * 60)
        print("\nSummary:")
        print(f"  - Books: {len(books)}")

        if api_key_name:
            plain_key, api_key = create_api_key(
                db,
                name=api_key_name,
                permissions=permissions or list(ALL_PERMISSIONS),
            )
            print(f"\nAPI key '{api_key.name}' ({api_key.permissions}):")
            print(f"  {plain_key}")
            print("  Save it now - it cannot be shown again.")

    except Exception as e:
        print(f"Error seeding database: {e}")
        db.rollback()
        raise
    finally:
        db.close()


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Seed the Bookshelf database")
    parser.add_argument(
        "--keep-existing",
        action="store_true",
        help="Do not delete existing books first",
    )
    parser.add_argument(
        "--api-key",
        metavar="NAME",
        help="Also create an API key with this name",
    )
    parser.add_argument(
        "--permissions",
        nargs="+",
        choices=ALL_PERMISSIONS,
        default=list(ALL_PERMISSIONS),
        help="Permissions for the new API key (default: all)",
    )
    return parser.parse_args(argv)


if __name__ == "__main__":
    args = parse_args()
    seed_database(
        clear_existing=not args.keep_existing,
        api_key_name=args.api_key,
        permissions=args.permissions,
    )
