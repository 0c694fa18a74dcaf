"""
Test Suite for the Bookshelf API

Test Organization:
- conftest.py: Shared fixtures (test database, client, sample data)
- test_books.py: Tests for /v1/books endpoints and error rendering
- test_auth.py: API key authentication and permissions
- test_book_store.py: BookStore against SQLite, plus simulated failures
- test_validation.py: Validator, book rules, filters, decode messages
- test_config.py: Settings, connect arguments, rate limiter key

Running Tests:
    # Run all tests
    pytest

    # Run specific file
    pytest tests/test_books.py

    # Run with verbose output
    pytest -v
"""
