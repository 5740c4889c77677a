"""Create full-text index table

Revision ID: 001
Revises: None
Create Date: 2026-10-18
"""

import sqlalchemy as sa
from alembic import op

# revision identifiers
revision = "001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "fulltext_index",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("indexable_type", sa.String(255), nullable=False),
        sa.Column("indexable_id", sa.String(64), nullable=False),
        sa.Column("indexed_title", sa.Text, nullable=False, server_default=""),
        sa.Column("indexed_content", sa.Text, nullable=False, server_default=""),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.UniqueConstraint("indexable_type", "indexable_id", name="uq_fulltext_indexable"),
    )
    op.create_index("idx_fulltext_type", "fulltext_index", ["indexable_type"])


def downgrade() -> None:
    op.drop_index("idx_fulltext_type", table_name="fulltext_index")
    op.drop_table("fulltext_index")
