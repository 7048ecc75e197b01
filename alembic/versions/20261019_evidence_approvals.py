"""add evidence_approvals: one row per approve/reject decision

Revision ID: 20261019_approvals
Revises: 20261019_tag_name_key
Create Date: 2026-10-19
"""

from collections.abc import Sequence

import sqlalchemy as sa

from alembic import op

revision: str = "20261019_approvals"
down_revision: str | None = "20261019_tag_name_key"
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    op.create_table(
        "evidence_approvals",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("entry_id", sa.Integer(), nullable=False),
        sa.Column("approver_id", sa.Integer(), nullable=True),
        sa.Column("status", sa.String(length=16), nullable=False),
        sa.Column("comments", sa.Text(), nullable=True),
        sa.Column(
            "approved_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["entry_id"], ["evidence_entries.id"], ondelete="CASCADE"),
    )
    op.create_index("ix_evidence_approvals_entry_id", "evidence_approvals", ["entry_id"])


def downgrade() -> None:
    op.drop_index("ix_evidence_approvals_entry_id", table_name="evidence_approvals")
    op.drop_table("evidence_approvals")
