"""initial schema

Revision ID: 0001
Revises:
Create Date: 2026-10-19 00:00:00
"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op

revision: str = "0001"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    op.create_table(
        "asset_type",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("description", sa.String(), nullable=False),
        sa.Column("icon", sa.String(length=100), nullable=True),
        sa.Column("fields", sa.JSON(), nullable=False),
        sa.Column("requires_approval", sa.Boolean(), nullable=False),
        sa.Column("approval_levels", sa.JSON(), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_asset_type_name", "asset_type", ["name"])
    op.create_index("ix_asset_type_is_active", "asset_type", ["is_active"])

    op.create_table(
        "approval_request",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("requester_id", sa.String(length=255), nullable=False),
        sa.Column("requester_name", sa.String(length=255), nullable=False),
        sa.Column("requester_email", sa.String(length=320), nullable=False),
        sa.Column("requester_department", sa.String(length=255), nullable=True),
        sa.Column("asset_type_id", sa.Uuid(), sa.ForeignKey("asset_type.id"), nullable=False),
        sa.Column("asset_type_name", sa.String(length=255), nullable=False),
        sa.Column("approval_roles", sa.JSON(), nullable=False),
        sa.Column("total_approval_levels", sa.Integer(), nullable=False),
        sa.Column("form_data", sa.JSON(), nullable=False),
        sa.Column("status", sa.String(length=50), server_default="pending", nullable=False),
        sa.Column("current_approval_level", sa.Integer(), server_default="0", nullable=False),
        sa.Column("issued_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("version", sa.Integer(), server_default="1", nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.CheckConstraint(
            "current_approval_level >= 0 AND current_approval_level <= total_approval_levels",
            name="ck_request_level_bounds",
        ),
    )
    op.create_index("ix_approval_request_requester_id", "approval_request", ["requester_id"])
    op.create_index("ix_approval_request_asset_type_id", "approval_request", ["asset_type_id"])
    op.create_index("ix_approval_request_status", "approval_request", ["status"])
    op.create_index("ix_request_status_created", "approval_request", ["status", "created_at"])

    op.create_table(
        "approval_event",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column(
            "request_id",
            sa.Uuid(),
            sa.ForeignKey("approval_request.id", ondelete="RESTRICT"),
            nullable=False,
        ),
        sa.Column("approver_id", sa.String(length=255), nullable=False),
        sa.Column("approver_name", sa.String(length=255), nullable=False),
        sa.Column("approver_email", sa.String(length=320), nullable=False),
        sa.Column("approver_role", sa.String(length=50), nullable=False),
        sa.Column("action", sa.String(length=20), nullable=False),
        sa.Column("comment", sa.String(), nullable=True),
        sa.Column("level", sa.Integer(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("request_id", "level", name="uq_approval_event_request_level"),
    )
    op.create_index("ix_approval_event_request_id", "approval_event", ["request_id"])
    op.create_index("ix_approval_event_approver_id", "approval_event", ["approver_id"])
    op.create_index("ix_approval_event_request_level", "approval_event", ["request_id", "level"])


def downgrade() -> None:
    op.drop_table("approval_event")
    op.drop_table("approval_request")
    op.drop_table("asset_type")
