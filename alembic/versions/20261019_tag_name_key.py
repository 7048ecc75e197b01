"""add name_key to evidence_tags for Unicode case-insensitive uniqueness

Revision ID: 20261019_tag_name_key
Revises: 20261018_initial
Create Date: 2026-10-19

lower(name) only folds ASCII on some backends, so "Über" and "über" could
coexist. The key is computed in Python with str.casefold() to match
evidence_engine.models.tag.tag_name_key(), and carries the unique index.
"""

from collections.abc import Sequence

import sqlalchemy as sa
from sqlalchemy import text

from alembic import op

revision: str = "20261019_tag_name_key"
down_revision: str | None = "20261018_initial"
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    op.add_column("evidence_tags", sa.Column("name_key", sa.String(length=150), nullable=True))
    conn = op.get_bind()
    rows = conn.execute(text("SELECT id, name FROM evidence_tags")).fetchall()
    for row in rows:
        conn.execute(
            text("UPDATE evidence_tags SET name_key = :key WHERE id = :id"),
            {"key": row.name.strip().casefold(), "id": row.id},
        )
    op.alter_column("evidence_tags", "name_key", nullable=False)
    op.drop_index("uq_evidence_tags_name_lower", table_name="evidence_tags")
    op.create_index("uq_evidence_tags_name_key", "evidence_tags", ["name_key"], unique=True)


def downgrade() -> None:
    op.drop_index("uq_evidence_tags_name_key", table_name="evidence_tags")
    op.create_index(
        "uq_evidence_tags_name_lower",
        "evidence_tags",
        [sa.text("lower(name)")],
        unique=True,
    )
    op.drop_column("evidence_tags", "name_key")
