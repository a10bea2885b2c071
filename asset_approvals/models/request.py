# ruff: noqa: TC003
from __future__ import annotations

import uuid
from datetime import datetime
from typing import Any

import sqlalchemy as sa
from sqlmodel import Field

from asset_approvals.models.base import TimestampMixin, UpdatedAtMixin, UUIDBase
from asset_approvals.models.enums import RequestStatus


class ApprovalRequest(UUIDBase, TimestampMixin, UpdatedAtMixin, table=True):
    """A request moving through its asset type's sequential approval chain.

    Requester and asset type details are value snapshots taken at creation.
    ``approval_roles`` freezes the asset type's approval levels so later edits
    to the asset type never change an in-flight request.
    """

    __tablename__ = "approval_request"
    __table_args__ = (
        sa.Index("ix_request_status_created", "status", "created_at"),
        sa.CheckConstraint(
            "current_approval_level >= 0 AND current_approval_level <= total_approval_levels",
            name="ck_request_level_bounds",
        ),
    )

    requester_id: str = Field(max_length=255, index=True)
    requester_name: str = Field(max_length=255)
    requester_email: str = Field(max_length=320)
    requester_department: str | None = Field(default=None, max_length=255)
    asset_type_id: uuid.UUID = Field(
        sa_column=sa.Column(sa.Uuid, sa.ForeignKey("asset_type.id"), nullable=False, index=True),
    )
    asset_type_name: str = Field(max_length=255)
    approval_roles: list[str] = Field(default_factory=list, sa_type=sa.JSON)
    total_approval_levels: int
    form_data: dict[str, Any] = Field(default_factory=dict, sa_type=sa.JSON)
    status: str = Field(
        default=RequestStatus.PENDING, max_length=50, index=True, sa_column_kwargs={"server_default": "pending"}
    )
    current_approval_level: int = Field(default=0, sa_column_kwargs={"server_default": "0"})
    issued_at: datetime | None = Field(default=None, sa_type=sa.DateTime(timezone=True))  # ty: ignore[invalid-argument-type]
    version: int = Field(default=1, sa_column_kwargs={"server_default": "1"})

    @property
    def required_role(self) -> str | None:
        """Role nominally required for the next step, or None when no step remains."""
        if self.status != RequestStatus.PENDING or self.current_approval_level >= self.total_approval_levels:
            return None
        return self.approval_roles[self.current_approval_level]
