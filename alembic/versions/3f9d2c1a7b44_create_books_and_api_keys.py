"""Create books and api_keys tables

Revision ID: 3f9d2c1a7b44
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3f9d2c1a7b44'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table('books',
        sa.Column('id', sa.BigInteger(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('title', sa.String(length=500), nullable=False, comment='Book title'),
        sa.Column('year', sa.Integer(), nullable=False, comment='Year of publication'),
        sa.Column('pages', sa.Integer(), nullable=False, comment='Number of pages'),
        sa.Column('version', sa.Integer(), server_default=sa.text('1'), nullable=False, comment='Optimistic concurrency token'),
        sa.PrimaryKeyConstraint('id'),
        sa.CheckConstraint('pages > 0', name='books_pages_check'),
    )
    op.create_index(op.f('ix_books_year'), 'books', ['year'], unique=False)
    # Full-text search on title for the list endpoint
    op.execute("CREATE INDEX ix_books_title_fts ON books USING GIN (to_tsvector('simple', title))")

    op.create_table('api_keys',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False, comment='Human-readable name for the API key'),
        sa.Column('key_hash', sa.String(length=64), nullable=False, comment='SHA-256 hash of the API key'),
        sa.Column('key_prefix', sa.String(length=12), nullable=False, comment='First characters of the key for identification'),
        sa.Column('permissions', sa.String(length=255), server_default='', nullable=False, comment='Comma-separated permission codes'),
        sa.Column('is_active', sa.Boolean(), server_default=sa.true(), nullable=False, comment='Whether the key is currently active'),
        sa.Column('description', sa.Text(), nullable=True, comment="Optional description of the key's purpose"),
        sa.Column('expires_at', sa.DateTime(timezone=True), nullable=True, comment='When the key expires (null = never)'),
        sa.Column('last_used_at', sa.DateTime(timezone=True), nullable=True, comment='When the key was last used'),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False, comment='When the key was created'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_api_keys_key_hash'), 'api_keys', ['key_hash'], unique=True)


def downgrade() -> None:
    op.drop_index(op.f('ix_api_keys_key_hash'), table_name='api_keys')
    op.drop_table('api_keys')
    op.execute("DROP INDEX IF EXISTS ix_books_title_fts")
    op.drop_index(op.f('ix_books_year'), table_name='books')
    op.drop_table('books')
