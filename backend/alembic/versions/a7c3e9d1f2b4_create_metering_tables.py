"""Create company and usage metering tables.

Revision ID: a7c3e9d1f2b4
Revises:
Create Date: 2024-01-08 10:00:00.000000

"""

import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

from alembic import op

# revision identifiers, used by Alembic.
revision = "a7c3e9d1f2b4"
down_revision = None
branch_labels = None
depends_on = None


def _timestamps():
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("modified_at", sa.DateTime(timezone=True), nullable=False),
    ]


def _company_owned():
    return [
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column(
            "company_id",
            sa.String(128),
            sa.ForeignKey("company.id", ondelete="CASCADE"),
            nullable=False,
            index=True,
        ),
        sa.Column("tenant_id", sa.String(128), nullable=False),
    ]


def upgrade():
    """Create the company directory, limit sets, ledger, audit trail and summaries."""
    op.create_table(
        "company",
        sa.Column("id", sa.String(128), primary_key=True),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("tenant_id", sa.String(128), nullable=True),
        *_timestamps(),
    )

    op.create_table(
        "resource_limit_set",
        *_company_owned(),
        sa.Column("limits", postgresql.JSONB(), nullable=False),
        *_timestamps(),
        sa.UniqueConstraint("company_id", name="uq_resource_limit_set_company"),
    )

    # Ledger: one row per (company, resource type), CAS on version
    op.create_table(
        "resource_usage",
        *_company_owned(),
        sa.Column("resource_type", sa.String(64), nullable=False),
        sa.Column("current_value", sa.Float(), nullable=False),
        sa.Column("max_value", sa.Float(), nullable=False),
        sa.Column("unit", sa.String(16), nullable=False),
        sa.Column("reset_policy", sa.String(16), nullable=False),
        sa.Column("period_start", sa.DateTime(timezone=True), nullable=False),
        sa.Column("period_end", sa.DateTime(timezone=True), nullable=False),
        sa.Column("last_updated", sa.DateTime(timezone=True), nullable=False),
        sa.Column("status", sa.String(16), nullable=False),
        sa.Column("version", sa.Integer(), nullable=False, server_default="0"),
        *_timestamps(),
        sa.UniqueConstraint(
            "company_id", "resource_type", name="uq_resource_usage_company_resource"
        ),
    )

    op.create_table(
        "usage_record",
        *_company_owned(),
        sa.Column("resource_type", sa.String(64), nullable=False),
        sa.Column("value", sa.Float(), nullable=False),
        sa.Column("timestamp", sa.DateTime(timezone=True), nullable=False),
        sa.Column("metadata", postgresql.JSONB(), nullable=False),
        sa.Column("user_id", sa.String(128), nullable=True),
        *_timestamps(),
    )
    # History queries filter by company and resource, newest first
    op.create_index(
        "idx_usage_record_history",
        "usage_record",
        ["company_id", "resource_type", "timestamp"],
    )

    op.create_table(
        "usage_summary",
        *_company_owned(),
        sa.Column("period_start", sa.DateTime(timezone=True), nullable=False),
        sa.Column("period_end", sa.DateTime(timezone=True), nullable=False),
        sa.Column("period_unit", sa.String(16), nullable=False),
        sa.Column("resources", postgresql.JSONB(), nullable=False),
        sa.Column("total_usage_percentage", sa.Float(), nullable=False),
        sa.Column("last_updated", sa.DateTime(timezone=True), nullable=False),
        *_timestamps(),
        sa.UniqueConstraint("company_id", name="uq_usage_summary_company"),
    )


def downgrade():
    """Drop all metering tables."""
    op.drop_table("usage_summary")
    op.drop_index("idx_usage_record_history", table_name="usage_record")
    op.drop_table("usage_record")
    op.drop_table("resource_usage")
    op.drop_table("resource_limit_set")
    op.drop_table("company")
