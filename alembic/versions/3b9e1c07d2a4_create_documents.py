"""create documents

Revision ID: 3b9e1c07d2a4
Revises:
Create Date: 2026-10-19 00:00:00.000000

"""

from collections.abc import Sequence

import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "3b9e1c07d2a4"
down_revision: str | Sequence[str] | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    op.create_table(
        "documents",
        sa.Column("collection", sa.String(length=64), nullable=False),
        sa.Column("doc_id", sa.String(length=64), nullable=False),
        sa.Column("seq", sa.BigInteger(), sa.Identity(), nullable=False),
        sa.Column("body", postgresql.JSONB(), nullable=False),
        sa.PrimaryKeyConstraint("collection", "doc_id"),
    )
    op.create_index(
        "ix_documents_body", "documents", ["body"], postgresql_using="gin"
    )
    op.create_index(
        "ix_documents_collection_seq", "documents", ["collection", "seq"]
    )


def downgrade() -> None:
    op.drop_index("ix_documents_collection_seq", table_name="documents")
    op.drop_index("ix_documents_body", table_name="documents")
    op.drop_table("documents")
