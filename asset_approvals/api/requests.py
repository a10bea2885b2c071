# ruff: noqa: B008, TC001, TC003
from __future__ import annotations

import uuid

from fastapi import APIRouter, Query, status

from asset_approvals.api.deps import ActorDep, RolesDep
from asset_approvals.db import SessionDep
from asset_approvals.exceptions import ForbiddenError
from asset_approvals.models.enums import RequestStatus
from asset_approvals.schemas.request import (
    CreateRequestPayload,
    DecisionPayload,
    RequestHistoryResponse,
    RequestListResponse,
    RequestResponse,
    RequestStatsResponse,
    TransitionResponse,
)
from asset_approvals.services import request as request_service
from asset_approvals.services import workflow

requests_router = APIRouter(prefix="/requests", tags=["requests"])


@requests_router.post("", response_model=RequestResponse, status_code=status.HTTP_201_CREATED)
async def create_request(
    payload: CreateRequestPayload,
    session: SessionDep,
    actor: ActorDep,
    roles: RolesDep,
) -> RequestResponse:
    """Submit a new asset request as the calling user."""
    return await workflow.create_request(session, actor, payload, hierarchy=roles)


@requests_router.get("", response_model=RequestListResponse)
async def list_requests(
    session: SessionDep,
    actor: ActorDep,
    roles: RolesDep,
    status_filter: RequestStatus | None = Query(default=None, alias="status"),
    requester_id: str | None = Query(default=None),
    offset: int = Query(default=0, ge=0),
    limit: int = Query(default=50, ge=1, le=100),
) -> RequestListResponse:
    """List requests, newest first, with optional filters.

    Callers who cannot approve any step only see their own requests.
    """
    if not roles.can_act(actor.role, roles.roles[0]):
        if requester_id not in (None, actor.id):
            raise ForbiddenError("Only approvers may list other users' requests")
        requester_id = actor.id
    return await request_service.list_requests(session, status_filter, requester_id, offset, limit)


@requests_router.get("/stats", response_model=RequestStatsResponse)
async def get_stats(session: SessionDep, _actor: ActorDep) -> RequestStatsResponse:
    """Request counts by status."""
    return await request_service.get_stats(session)


@requests_router.get("/{request_id}", response_model=RequestResponse)
async def get_request(
    request_id: uuid.UUID,
    session: SessionDep,
    _actor: ActorDep,
) -> RequestResponse:
    """Get a single request."""
    return await request_service.get_request(session, request_id)


@requests_router.get("/{request_id}/history", response_model=RequestHistoryResponse)
async def get_request_history(
    request_id: uuid.UUID,
    session: SessionDep,
    _actor: ActorDep,
) -> RequestHistoryResponse:
    """Get a request with its approval events and full audit trail."""
    return await request_service.get_request_with_history(session, request_id)


@requests_router.post("/{request_id}/approve", response_model=TransitionResponse)
async def approve_request(
    request_id: uuid.UUID,
    session: SessionDep,
    actor: ActorDep,
    roles: RolesDep,
    payload: DecisionPayload | None = None,
) -> TransitionResponse:
    """Approve the request's current step."""
    return await workflow.approve_request(session, actor, request_id, payload, hierarchy=roles)


@requests_router.post("/{request_id}/deny", response_model=TransitionResponse)
async def deny_request(
    request_id: uuid.UUID,
    session: SessionDep,
    actor: ActorDep,
    roles: RolesDep,
    payload: DecisionPayload | None = None,
) -> TransitionResponse:
    """Deny the request at its current step. A comment is required."""
    return await workflow.deny_request(session, actor, request_id, payload, hierarchy=roles)


@requests_router.post("/{request_id}/cancel", response_model=TransitionResponse)
async def cancel_request(
    request_id: uuid.UUID,
    session: SessionDep,
    actor: ActorDep,
) -> TransitionResponse:
    """Cancel one of the caller's own pending requests."""
    return await workflow.cancel_request(session, actor.id, request_id)
