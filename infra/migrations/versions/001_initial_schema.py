"""Projects, period buckets with their ad spend and sale rows, settings, upload and manual sale history.

Revision ID: 001
Revises:
Create Date: 2026-10-18 00:00:00

"""
from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "projects",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("slug", sa.String(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_projects_slug", "projects", ["slug"], unique=True)

    op.create_table(
        "project_settings",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("project_id", sa.Integer(), sa.ForeignKey("projects.id"), nullable=False),
        sa.Column("platform_tax", sa.Float(), nullable=False, server_default="6"),
        sa.Column("tax", sa.Float(), nullable=False, server_default="0"),
        sa.Column("participation", sa.Float(), nullable=False, server_default="100"),
        sa.Column("updated_at", sa.DateTime(), nullable=True),
    )
    op.create_index("ix_project_settings_project_id", "project_settings", ["project_id"], unique=True)

    op.create_table(
        "period_buckets",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("project_id", sa.Integer(), nullable=False),
        sa.Column("year", sa.String(4), nullable=False),
        sa.Column("month", sa.String(2), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(), nullable=True),
        sa.UniqueConstraint("project_id", "year", "month", name="uq_period_bucket"),
    )
    op.create_index("ix_period_buckets_project_id", "period_buckets", ["project_id"])

    op.create_table(
        "ad_spend_rows",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("bucket_id", sa.Integer(), sa.ForeignKey("period_buckets.id"), nullable=False),
        sa.Column("position", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("date", sa.String(10), nullable=False),
        sa.Column("investment", sa.Float(), nullable=False, server_default="0"),
    )
    op.create_index("ix_ad_spend_rows_bucket_id", "ad_spend_rows", ["bucket_id"])

    op.create_table(
        "sale_rows",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("bucket_id", sa.Integer(), sa.ForeignKey("period_buckets.id"), nullable=False),
        sa.Column("position", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("date", sa.String(10), nullable=False),
        sa.Column("product", sa.String(), nullable=False),
        sa.Column("net", sa.Float(), nullable=False, server_default="0"),
        sa.Column("gross", sa.Float(), nullable=False, server_default="0"),
        sa.Column("source", sa.String(), nullable=False),
    )
    op.create_index("ix_sale_rows_bucket_id", "sale_rows", ["bucket_id"])

    op.create_table(
        "upload_history",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("project_id", sa.Integer(), nullable=False),
        sa.Column("filename", sa.String(), nullable=False, server_default=""),
        sa.Column("upload_type", sa.String(), nullable=False),
        sa.Column("period", sa.String(7), nullable=True),
        sa.Column("file_size", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("records_processed", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("status", sa.String(), nullable=False, server_default="success"),
        sa.Column("error_message", sa.String(), nullable=True),
        sa.Column("uploaded_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_upload_history_project_id", "upload_history", ["project_id"])
    op.create_index("ix_upload_history_uploaded_at", "upload_history", ["uploaded_at"])

    op.create_table(
        "manual_sales",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("project_id", sa.Integer(), nullable=False),
        sa.Column("date", sa.String(10), nullable=False),
        sa.Column("product", sa.String(), nullable=False),
        sa.Column("net", sa.Float(), nullable=False),
        sa.Column("gross", sa.Float(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_manual_sales_project_id", "manual_sales", ["project_id"])


def downgrade() -> None:
    op.drop_index("ix_manual_sales_project_id", "manual_sales")
    op.drop_table("manual_sales")
    op.drop_index("ix_upload_history_uploaded_at", "upload_history")
    op.drop_index("ix_upload_history_project_id", "upload_history")
    op.drop_table("upload_history")
    op.drop_index("ix_sale_rows_bucket_id", "sale_rows")
    op.drop_table("sale_rows")
    op.drop_index("ix_ad_spend_rows_bucket_id", "ad_spend_rows")
    op.drop_table("ad_spend_rows")
    op.drop_index("ix_period_buckets_project_id", "period_buckets")
    op.drop_table("period_buckets")
    op.drop_index("ix_project_settings_project_id", "project_settings")
    op.drop_table("project_settings")
    op.drop_index("ix_projects_slug", "projects")
    op.drop_table("projects")
