# ruff: noqa: TC001, TC003
from __future__ import annotations

import uuid
from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

from asset_approvals.models.enums import ApprovalAction, RequestStatus, TrailEntryKind
from asset_approvals.schemas.asset_type import AssetTypeResponse

# ---------------------------------------------------------------------------
# Request payloads
# ---------------------------------------------------------------------------


class CreateRequestPayload(BaseModel):
    """Request body for submitting a new asset request."""

    asset_type_id: uuid.UUID
    form_data: dict[str, Any] = Field(default_factory=dict)


class DecisionPayload(BaseModel):
    """Request body for approve/deny actions.

    ``level`` pins the step the caller is acting on. If the request has moved
    past it the action fails as not pending. Comment length is checked by the
    workflow after the role guard.
    """

    comment: str | None = None
    level: int | None = Field(default=None, ge=0)


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class RequestResponse(BaseModel):
    """Response schema for a single approval request."""

    id: uuid.UUID
    requester_id: str
    requester_name: str
    requester_email: str
    requester_department: str | None
    asset_type_id: uuid.UUID
    asset_type_name: str
    approval_roles: list[str]
    total_approval_levels: int
    current_approval_level: int
    required_role: str | None
    form_data: dict[str, Any]
    status: RequestStatus
    issued_at: datetime | None
    created_at: datetime
    updated_at: datetime


class RequestListResponse(BaseModel):
    """Paginated list of approval requests."""

    items: list[RequestResponse]
    total: int


class TransitionResponse(BaseModel):
    """Outcome of an approve, deny or cancel action."""

    request_id: uuid.UUID
    status: RequestStatus
    current_approval_level: int
    total_approval_levels: int
    is_fully_approved: bool = False


class ApprovalEventResponse(BaseModel):
    """One recorded approval step."""

    id: uuid.UUID
    request_id: uuid.UUID
    approver_id: str
    approver_name: str
    approver_email: str
    approver_role: str
    action: ApprovalAction
    comment: str | None
    level: int
    created_at: datetime


class TrailEntry(BaseModel):
    """One line of a request's reconstructed history."""

    kind: TrailEntryKind
    at: datetime
    actor_id: str | None = None
    actor_name: str | None = None
    actor_role: str | None = None
    action: ApprovalAction | None = None
    level: int | None = None
    comment: str | None = None
    status: RequestStatus | None = None


class RequestHistoryResponse(BaseModel):
    """A request with its approval events, resolved asset type and full trail."""

    request: RequestResponse
    events: list[ApprovalEventResponse]
    asset_type: AssetTypeResponse | None
    trail: list[TrailEntry]


class PendingApprovalItem(BaseModel):
    """A worklist entry: a pending request and the role its current step requires."""

    request: RequestResponse
    required_role: str


class PendingApprovalListResponse(BaseModel):
    """Worklist for the calling approver."""

    items: list[PendingApprovalItem]
    total: int


class RequestStatsResponse(BaseModel):
    """Request counts by status."""

    total: int
    pending: int
    approved: int
    denied: int
    cancelled: int
