from __future__ import annotations

import uuid
from datetime import UTC, datetime
from typing import Any

import sqlalchemy as sa
from sqlmodel import Field, SQLModel


def now_utc() -> datetime:
    """Current time, timezone-aware in UTC."""
    return datetime.now(UTC)


def _timestamp_field(**column_kwargs: Any) -> Any:
    return Field(
        default_factory=now_utc,
        sa_type=sa.DateTime(timezone=True),  # ty: ignore[invalid-argument-type]
        sa_column_kwargs={"server_default": sa.func.now(), **column_kwargs},
    )


class UUIDBase(SQLModel):
    """Base for every table: a random UUID primary key assigned client-side."""

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True, sa_type=sa.Uuid)


class TimestampMixin(SQLModel):
    """Adds created_at, fixed at insert."""

    created_at: datetime = _timestamp_field()


class UpdatedAtMixin(SQLModel):
    """Adds updated_at, refreshed by every ORM flush and set explicitly by Core updates."""

    updated_at: datetime = _timestamp_field(onupdate=now_utc)
