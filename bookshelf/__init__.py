"""
Bookshelf API Application Package

A JSON API serving CRUD operations over books, with optimistic concurrency
on updates and filtered, paginated listing.

Package Structure:
- config.py: Application configuration using Pydantic Settings
- database.py: SQLAlchemy engine and session management
- main.py: FastAPI application factory, error rendering
- dependencies.py: Dependency injection functions
- errors.py: Store and validation error classes
- validator.py: Field validation accumulator
- filters.py: Sorting, pagination and list metadata
- models/: SQLAlchemy ORM models
- schemas/: Pydantic request/response schemas
- routers/: API route handlers
- services/: Book store, authentication, rate limiting
"""

__version__ = "1.0.0"
