"""
Services Package

Logic that is separate from HTTP handling (routers) and can be tested in
isolation.

Current services:
- auth.py: API key hashing, validation and permissions
- book_store.py: Book persistence with optimistic concurrency
- rate_limiter.py: Rate limiting with slowapi
"""
