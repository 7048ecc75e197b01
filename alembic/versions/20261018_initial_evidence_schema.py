"""Initial evidence schema: entries, tags, tag assignments, archive history.

Revision ID: 20261018_initial
Revises:
Create Date: 2026-10-18

Seeds the default tag set. Tag names are unique case-insensitively via an
index on lower(name).
"""

from collections.abc import Sequence

import sqlalchemy as sa

from alembic import op

revision: str = "20261018_initial"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None

DEFAULT_TAGS = (
    ("Leadership", "#dc3545", "Demonstrates leadership qualities"),
    ("Innovation", "#28a745", "Shows innovative thinking"),
    ("Collaboration", "#007bff", "Works well with others"),
    ("Problem Solving", "#ffc107", "Solves complex problems"),
    ("Communication", "#17a2b8", "Communicates clearly"),
)


def upgrade() -> None:
    op.create_table(
        "evidence_entries",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("employee_id", sa.Integer(), nullable=False),
        sa.Column("manager_id", sa.Integer(), nullable=False),
        sa.Column("dimension", sa.String(length=32), nullable=False),
        sa.Column("star_rating", sa.Integer(), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("entry_date", sa.Date(), nullable=False),
        sa.Column("status", sa.String(length=16), server_default="active", nullable=False),
        sa.Column("archive_reason", sa.String(length=32), nullable=True),
        sa.Column("archived_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("attachment_count", sa.Integer(), server_default="0", nullable=False),
        sa.Column("approval_status", sa.String(length=16), server_default="none", nullable=False),
        sa.Column("evidence_source", sa.String(length=32), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("id"),
        sa.CheckConstraint("star_rating BETWEEN 1 AND 5", name="ck_evidence_entries_star_rating"),
        sa.CheckConstraint(
            "dimension IN ('responsibilities', 'kpis', 'competencies', 'values')",
            name="ck_evidence_entries_dimension",
        ),
        sa.CheckConstraint(
            "(status = 'active' AND archive_reason IS NULL)"
            " OR (status = 'archived' AND archive_reason IS NOT NULL)",
            name="ck_evidence_entries_archive_reason",
        ),
        sa.CheckConstraint("attachment_count >= 0", name="ck_evidence_entries_attachment_count"),
    )
    op.create_index(
        "ix_evidence_entries_entry_date_id", "evidence_entries", ["entry_date", "id"], unique=False
    )
    op.create_index("ix_evidence_entries_employee_id", "evidence_entries", ["employee_id"])
    op.create_index("ix_evidence_entries_manager_id", "evidence_entries", ["manager_id"])
    op.create_index("ix_evidence_entries_status", "evidence_entries", ["status"])
    op.create_index(
        "ix_evidence_entries_approval_status", "evidence_entries", ["approval_status"]
    )

    tags = op.create_table(
        "evidence_tags",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("name", sa.String(length=50), nullable=False),
        sa.Column("color", sa.String(length=7), server_default="#007bff", nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("created_by", sa.Integer(), nullable=True),
        sa.Column("is_active", sa.Boolean(), server_default=sa.text("true"), nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "uq_evidence_tags_name_lower",
        "evidence_tags",
        [sa.text("lower(name)")],
        unique=True,
    )

    op.create_table(
        "evidence_entry_tags",
        sa.Column("entry_id", sa.Integer(), nullable=False),
        sa.Column("tag_id", sa.Integer(), nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("entry_id", "tag_id"),
        sa.ForeignKeyConstraint(["entry_id"], ["evidence_entries.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["tag_id"], ["evidence_tags.id"], ondelete="CASCADE"),
    )
    op.create_index("ix_evidence_entry_tags_tag_id", "evidence_entry_tags", ["tag_id"])

    op.create_table(
        "evidence_archive",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("entry_id", sa.Integer(), nullable=False),
        sa.Column("archived_by", sa.Integer(), nullable=True),
        sa.Column("archive_reason", sa.String(length=32), nullable=False),
        sa.Column(
            "archived_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.Column("restored_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("is_restored", sa.Boolean(), server_default=sa.text("false"), nullable=False),
        sa.Column("original_data", sa.JSON(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["entry_id"], ["evidence_entries.id"], ondelete="CASCADE"),
    )
    op.create_index("ix_evidence_archive_entry_id", "evidence_archive", ["entry_id"])

    op.bulk_insert(
        tags,
        [
            {"name": name, "color": color, "description": description, "is_active": True}
            for name, color, description in DEFAULT_TAGS
        ],
    )


def downgrade() -> None:
    op.drop_index("ix_evidence_archive_entry_id", table_name="evidence_archive")
    op.drop_table("evidence_archive")
    op.drop_index("ix_evidence_entry_tags_tag_id", table_name="evidence_entry_tags")
    op.drop_table("evidence_entry_tags")
    op.drop_index("uq_evidence_tags_name_lower", table_name="evidence_tags")
    op.drop_table("evidence_tags")
    op.drop_index("ix_evidence_entries_approval_status", table_name="evidence_entries")
    op.drop_index("ix_evidence_entries_status", table_name="evidence_entries")
    op.drop_index("ix_evidence_entries_manager_id", table_name="evidence_entries")
    op.drop_index("ix_evidence_entries_employee_id", table_name="evidence_entries")
    op.drop_index("ix_evidence_entries_entry_date_id", table_name="evidence_entries")
    op.drop_table("evidence_entries")
