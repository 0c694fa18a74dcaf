"""
Authentication Service

Resolves an API key to the permissions it carries.

Security Features:
=================
1. Keys are hashed with SHA-256 before storage and lookup
2. Expired and revoked keys are rejected
3. An admin key from the environment carries every permission
4. Tracks key usage for auditing
"""

import hashlib
import logging
import secrets
from datetime import datetime, timezone
from typing import Optional, Tuple

from sqlalchemy import select
from sqlalchemy.orm import Session

from bookshelf.config import get_settings
from bookshelf.models import APIKey

logger = logging.getLogger(__name__)

# Key prefix for identification
KEY_PREFIX = "bk_"

BOOKS_READ = "books:read"
BOOKS_WRITE = "books:write"
ALL_PERMISSIONS = (BOOKS_READ, BOOKS_WRITE)


def generate_api_key() -> Tuple[str, str, str]:
    """
    Generate a new API key.

    Returns:
        Tuple of (full_key, key_hash, key_prefix)
        - full_key: The complete key to hand to the client (only once!)
        - key_hash: SHA-256 hash to store in the database
        - key_prefix: First 12 chars for identification
    """
    full_key = f"{KEY_PREFIX}{secrets.token_hex(32)}"
    return full_key, hash_api_key(full_key), full_key[:12]


def hash_api_key(key: str) -> str:
    """Hash an API key using SHA-256 (64 hex characters)."""
    return hashlib.sha256(key.encode()).hexdigest()


def validate_api_key(db: Session, key: str) -> Optional[APIKey]:
    """
    Validate an API key and return the associated record.

    Checks:
    1. Key is the configured admin key, or its hash exists in the database
    2. Key is active
    3. Key is not expired

    Args:
        db: Database session
        key: The plain API key to validate

    Returns:
        APIKey record if valid, None otherwise
    """
    settings = get_settings()
    if settings.admin_api_key and secrets.compare_digest(key, settings.admin_api_key):
        logger.debug("Admin API key used")
        return _create_admin_key_record()

    stmt = select(APIKey).where(
        APIKey.key_hash == hash_api_key(key),
        APIKey.is_active.is_(True),
    )
    api_key = db.execute(stmt).scalar_one_or_none()

    if api_key is None:
        return None

    expires_at = api_key.expires_at
    if expires_at is not None:
        # SQLite hands back naive datetimes
        if expires_at.tzinfo is None:
            expires_at = expires_at.replace(tzinfo=timezone.utc)
        if expires_at < datetime.now(timezone.utc):
            logger.warning(f"Expired API key used: {api_key.key_prefix}...")
            return None

    api_key.last_used_at = datetime.now(timezone.utc)
    db.commit()

    return api_key


def _create_admin_key_record() -> APIKey:
    """Virtual, non-persisted record for the environment admin key."""
    return APIKey(
        id=0,
        name="Admin",
        key_hash="admin",
        key_prefix="admin",
        permissions=",".join(ALL_PERMISSIONS),
        is_active=True,
        description="Environment admin key",
    )


def create_api_key(
    db: Session,
    name: str,
    permissions: list[str],
    description: Optional[str] = None,
    expires_at: Optional[datetime] = None,
) -> Tuple[str, APIKey]:
    """
    Create a new API key in the database.

    Returns:
        Tuple of (plain_key, api_key_record). The plain key is not stored
        anywhere and cannot be recovered later.
    """
    unknown = set(permissions) - set(ALL_PERMISSIONS)
    if unknown:
        raise ValueError(f"unknown permissions: {sorted(unknown)}")

    plain_key, key_hash, key_prefix = generate_api_key()
    api_key = APIKey(
        name=name,
        key_hash=key_hash,
        key_prefix=key_prefix,
        permissions=",".join(permissions),
        description=description,
        expires_at=expires_at,
    )
    db.add(api_key)
    db.commit()
    db.refresh(api_key)

    logger.info(f"Created API key '{name}' ({key_prefix}...) with {permissions}")
    return plain_key, api_key
