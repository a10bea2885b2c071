from __future__ import annotations

from typing import Any

import sqlalchemy as sa
from sqlmodel import Field

from asset_approvals.models.base import TimestampMixin, UpdatedAtMixin, UUIDBase


class AssetType(UUIDBase, TimestampMixin, UpdatedAtMixin, table=True):
    """Configuration for a kind of requestable asset (gate pass, license, hardware)."""

    __tablename__ = "asset_type"

    name: str = Field(max_length=255, index=True)
    description: str = Field(default="")
    icon: str | None = Field(default=None, max_length=100)
    fields: list[dict[str, Any]] = Field(default_factory=list, sa_type=sa.JSON)
    requires_approval: bool = Field(default=True)
    approval_levels: list[str] = Field(default_factory=list, sa_type=sa.JSON)
    is_active: bool = Field(default=True, index=True)
