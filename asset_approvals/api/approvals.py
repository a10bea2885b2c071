from __future__ import annotations

from fastapi import APIRouter

from asset_approvals.api.deps import ActorDep, RolesDep
from asset_approvals.db import SessionDep
from asset_approvals.schemas.request import PendingApprovalListResponse
from asset_approvals.services import approver as approver_service

approvals_router = APIRouter(prefix="/approvals", tags=["approvals"])


@approvals_router.get("/pending", response_model=PendingApprovalListResponse)
async def list_pending(session: SessionDep, actor: ActorDep, roles: RolesDep) -> PendingApprovalListResponse:
    """Pending requests whose current step the caller's role may act on."""
    return await approver_service.list_pending_for(session, actor.role, roles)
