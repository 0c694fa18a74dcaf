"""
API Key Model

Represents an API key and the permissions it grants.

Security Features:
- Keys are stored as hashed values (never plain text)
- Supports key expiration
- Tracks last usage for auditing
- Can be revoked (is_active=False) without deletion
"""

from datetime import datetime

from sqlalchemy import Boolean, DateTime, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from bookshelf.database import Base


class APIKey(Base):
    """
    API Key model for authentication.

    Table: api_keys

    permissions is a comma-separated list of permission codes, for example
    "books:read,books:write".

    Example:
        api_key = APIKey(
            name="Catalogue importer",
            key_hash="hashed_value_here",
            key_prefix="bk_1a2b3c4d",
            permissions="books:read,books:write",
        )
    """

    __tablename__ = "api_keys"

    id: Mapped[int] = mapped_column(primary_key=True)

    # -------------------------------------------------------------------------
    # Key Fields
    # -------------------------------------------------------------------------
    name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        comment="Human-readable name for the API key"
    )

    key_hash: Mapped[str] = mapped_column(
        String(64),
        unique=True,
        nullable=False,
        index=True,
        comment="SHA-256 hash of the API key"
    )

    key_prefix: Mapped[str] = mapped_column(
        String(12),
        nullable=False,
        comment="First characters of the key for identification"
    )

    # -------------------------------------------------------------------------
    # Status & Permissions
    # -------------------------------------------------------------------------
    permissions: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        default="",
        server_default="",
        comment="Comma-separated permission codes"
    )

    is_active: Mapped[bool] = mapped_column(
        Boolean,
        default=True,
        nullable=False,
        comment="Whether the key is currently active"
    )

    description: Mapped[str | None] = mapped_column(
        Text,
        nullable=True,
        comment="Optional description of the key's purpose"
    )

    expires_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
        comment="When the key expires (null = never)"
    )

    last_used_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
        comment="When the key was last used"
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
        comment="When the key was created"
    )

    @property
    def permission_codes(self) -> set[str]:
        """Permission codes as a set, ignoring blanks."""
        return {code.strip() for code in self.permissions.split(",") if code.strip()}

    def has_permission(self, code: str) -> bool:
        return code in self.permission_codes

    def __repr__(self) -> str:
        return f"APIKey(id={self.id}, name='{self.name}', prefix='{self.key_prefix}')"
