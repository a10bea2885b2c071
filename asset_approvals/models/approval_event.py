# ruff: noqa: TC003
from __future__ import annotations

import uuid

import sqlalchemy as sa
from sqlmodel import Field

from asset_approvals.models.base import TimestampMixin, UUIDBase


class ApprovalEvent(UUIDBase, TimestampMixin, table=True):
    """Immutable record of one approval step being resolved."""

    __tablename__ = "approval_event"
    __table_args__ = (
        sa.Index("ix_approval_event_request_level", "request_id", "level"),
        sa.UniqueConstraint("request_id", "level", name="uq_approval_event_request_level"),
    )

    request_id: uuid.UUID = Field(
        sa_column=sa.Column(
            sa.Uuid, sa.ForeignKey("approval_request.id", ondelete="RESTRICT"), nullable=False, index=True
        ),
    )
    approver_id: str = Field(max_length=255, index=True)
    approver_name: str = Field(max_length=255)
    approver_email: str = Field(max_length=320)
    approver_role: str = Field(max_length=50)
    action: str = Field(max_length=20)
    comment: str | None = None
    level: int
