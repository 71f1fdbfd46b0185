"""Initial schema

Revision ID: 001
Revises:
Create Date: 2026-10-19

Creates:
- account, auth_token
- users_profile
- documents, usage_logs
"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "001"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None

JsonType = sa.JSON().with_variant(postgresql.JSONB(), "postgresql")


def upgrade() -> None:
    """Create all tables."""
    # account table
    op.create_table(
        "account",
        sa.Column("user_id", sa.Uuid(), primary_key=True),
        sa.Column("email", sa.Text(), nullable=False),
        sa.Column("password_hash", sa.Text(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.UniqueConstraint("email", name="uq_account_email"),
    )

    # auth_token table
    op.create_table(
        "auth_token",
        sa.Column("token_hash", sa.Text(), primary_key=True),
        sa.Column("user_id", sa.Uuid(), nullable=False),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("revoked", sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.ForeignKeyConstraint(["user_id"], ["account.user_id"], ondelete="CASCADE"),
    )
    op.create_index("idx_auth_token_user", "auth_token", ["user_id", "revoked"])

    # users_profile table
    op.create_table(
        "users_profile",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("email", sa.Text(), nullable=False),
        sa.Column("plan", sa.Text(), server_default="free", nullable=False),
        sa.Column("credits_remaining", sa.Integer(), server_default="0", nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.ForeignKeyConstraint(["id"], ["account.user_id"], ondelete="CASCADE"),
        sa.CheckConstraint("credits_remaining >= 0", name="ck_users_profile_credits_nonneg"),
    )

    # documents table
    op.create_table(
        "documents",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("user_id", sa.Uuid(), nullable=False),
        sa.Column("document_type", sa.Text(), nullable=False),
        sa.Column("input_data", JsonType, nullable=True),
        sa.Column("generated_text", sa.Text(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.ForeignKeyConstraint(["user_id"], ["account.user_id"], ondelete="CASCADE"),
    )
    op.create_index("idx_documents_user_created", "documents", ["user_id", "created_at"])

    # usage_logs table
    op.create_table(
        "usage_logs",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("user_id", sa.Uuid(), nullable=False),
        sa.Column("action", sa.Text(), nullable=False),
        sa.Column("credits_used", sa.Integer(), server_default="0", nullable=False),
        sa.Column("doc_id", sa.Uuid(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.ForeignKeyConstraint(["user_id"], ["account.user_id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["doc_id"], ["documents.id"], ondelete="SET NULL"),
    )
    op.create_index("idx_usage_logs_user", "usage_logs", ["user_id", "created_at"])


def downgrade() -> None:
    """Drop all tables."""
    op.drop_index("idx_usage_logs_user", table_name="usage_logs")
    op.drop_table("usage_logs")
    op.drop_index("idx_documents_user_created", table_name="documents")
    op.drop_table("documents")
    op.drop_table("users_profile")
    op.drop_index("idx_auth_token_user", table_name="auth_token")
    op.drop_table("auth_token")
    op.drop_table("account")
