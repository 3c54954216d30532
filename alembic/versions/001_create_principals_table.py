"""create principals table

Revision ID: 001
Revises: 
Create Date: 2026-10-19
"""
from alembic import op
import sqlalchemy as sa

revision  = "001"
down_revision = None
branch_labels = None
depends_on    = None


def upgrade() -> None:
    op.create_table(
        "principals",
        sa.Column("id",            sa.String(64),              primary_key=True),
        sa.Column("role",          sa.String(20),              nullable=False),
        sa.Column("name",          sa.String(150),             nullable=False),
        sa.Column("email",         sa.String(255),             nullable=False),
        sa.Column("designation",   sa.String(120),             nullable=True),
        sa.Column("password_hash", sa.Text(),                  nullable=False),
        sa.Column("created_at",    sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.UniqueConstraint("email", name="uq_principals_email"),
    )
    op.create_index("ix_principals_email", "principals", ["email"], unique=False)
    op.create_index("ix_principals_role",  "principals", ["role"],  unique=False)


def downgrade() -> None:
    op.drop_index("ix_principals_role",  table_name="principals")
    op.drop_index("ix_principals_email", table_name="principals")
    op.drop_table("principals")
