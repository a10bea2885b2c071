# ruff: noqa: TC003
from __future__ import annotations

import uuid
from datetime import datetime
from typing import Self

from pydantic import BaseModel, Field, model_validator

from asset_approvals.models.enums import FieldKind

# ---------------------------------------------------------------------------
# Field descriptors
# ---------------------------------------------------------------------------


class FieldDescriptor(BaseModel):
    """One input on an asset type's request form."""

    name: str = Field(min_length=1, max_length=100)
    label: str = Field(min_length=1, max_length=255)
    kind: FieldKind = FieldKind.TEXT
    required: bool = False
    options: list[str] | None = None

    @model_validator(mode="after")
    def _validate_options(self) -> Self:
        if self.kind == FieldKind.SELECT and not self.options:
            msg = f"select field '{self.name}' requires at least one option"
            raise ValueError(msg)
        return self


def _check_unique_names(fields: list[FieldDescriptor] | None) -> None:
    if not fields:
        return
    names = [f.name for f in fields]
    duplicates = sorted({n for n in names if names.count(n) > 1})
    if duplicates:
        msg = f"duplicate field names: {', '.join(duplicates)}"
        raise ValueError(msg)


# ---------------------------------------------------------------------------
# Request payloads
# ---------------------------------------------------------------------------


class CreateAssetTypePayload(BaseModel):
    """Request body for creating an asset type."""

    name: str = Field(min_length=1, max_length=255)
    description: str = ""
    icon: str | None = Field(default=None, max_length=100)
    fields: list[FieldDescriptor] = Field(default_factory=list)
    requires_approval: bool = True
    approval_levels: list[str] = Field(default_factory=list)

    @model_validator(mode="after")
    def _validate_fields(self) -> Self:
        _check_unique_names(self.fields)
        return self


class UpdateAssetTypePayload(BaseModel):
    """Partial update of an asset type. Omitted fields are left unchanged."""

    name: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = None
    icon: str | None = Field(default=None, max_length=100)
    fields: list[FieldDescriptor] | None = None
    requires_approval: bool | None = None
    approval_levels: list[str] | None = None
    is_active: bool | None = None

    @model_validator(mode="after")
    def _validate_fields(self) -> Self:
        _check_unique_names(self.fields)
        return self


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class AssetTypeResponse(BaseModel):
    """Response schema for a single asset type."""

    id: uuid.UUID
    name: str
    description: str
    icon: str | None
    fields: list[FieldDescriptor]
    requires_approval: bool
    approval_levels: list[str]
    is_active: bool
    created_at: datetime
    updated_at: datetime


class AssetTypeListResponse(BaseModel):
    """List of asset types."""

    items: list[AssetTypeResponse]
    total: int


class SeedResponse(BaseModel):
    """Result of seeding the default asset type catalogue."""

    created: int
