# This project was developed with assistance from AI tools.
"""add profiles and professional documents

Revision ID: 3a7c1e9d2b40
Revises:
Create Date: 2026-10-12 09:41:17.208311

"""

import sqlalchemy as sa
from alembic import op

revision = "3a7c1e9d2b40"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "profiles",
        sa.Column("id", sa.String(255), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("full_name", sa.String(200), nullable=True),
        sa.Column("role", sa.String(50), nullable=False, server_default="CUSTOMER"),
        sa.Column("onboarding_status", sa.String(50), nullable=False, server_default="NONE"),
        sa.Column(
            "created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False
        ),
        sa.Column(
            "updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False
        ),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_profiles_email", "profiles", ["email"])

    op.create_table(
        "professional_documents",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("profile_id", sa.String(255), nullable=False),
        sa.Column("document_type", sa.String(50), nullable=False),
        sa.Column("storage_path", sa.String(500), nullable=False),
        sa.Column("metadata", sa.JSON(), nullable=False, server_default=sa.text("'{}'::json")),
        sa.Column(
            "created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False
        ),
        sa.ForeignKeyConstraint(["profile_id"], ["profiles.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("storage_path"),
    )
    op.create_index(
        "ix_professional_documents_profile_id", "professional_documents", ["profile_id"]
    )


def downgrade() -> None:
    op.drop_index("ix_professional_documents_profile_id", table_name="professional_documents")
    op.drop_table("professional_documents")
    op.drop_index("ix_profiles_email", table_name="profiles")
    op.drop_table("profiles")
