from __future__ import annotations

from pydantic import BaseModel, Field


class UserResponse(BaseModel):
    """A user profile as exposed by the API."""

    id: str
    name: str
    email: str
    role: str
    department: str | None
    supervisor_id: str | None
    is_active: bool


class UserListResponse(BaseModel):
    """List of user profiles."""

    items: list[UserResponse]
    total: int


class UpsertUserPayload(BaseModel):
    """Request body for creating or updating a profile."""

    name: str = Field(min_length=1, max_length=255)
    email: str = Field(min_length=3, max_length=320)
    role: str | None = Field(default=None, min_length=1, max_length=50)
    department: str | None = Field(default=None, max_length=255)
    supervisor_id: str | None = Field(default=None, min_length=1, max_length=255)


class UpdateRolePayload(BaseModel):
    role: str = Field(min_length=1, max_length=50)


class SetSupervisorPayload(BaseModel):
    """``None`` clears the supervisor."""

    supervisor_id: str | None = Field(default=None, min_length=1, max_length=255)
