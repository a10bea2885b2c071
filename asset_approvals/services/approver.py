from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from sqlalchemy import select
from sqlmodel import col

from asset_approvals.models.enums import RequestStatus
from asset_approvals.models.request import ApprovalRequest
from asset_approvals.schemas.request import PendingApprovalItem, PendingApprovalListResponse
from asset_approvals.services.request import build_request_response
from asset_approvals.services.roles import get_role_hierarchy
from asset_approvals.services.users import get_user_directory

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from asset_approvals.services.roles import RoleHierarchy
    from asset_approvals.services.users import UserDirectory, UserProfile

logger = logging.getLogger(__name__)


async def list_pending_for(
    session: AsyncSession,
    actor_role: str,
    hierarchy: RoleHierarchy | None = None,
) -> PendingApprovalListResponse:
    """Every pending request whose current step ``actor_role`` may act on, oldest first.

    The required role moves as a request advances, so this is a scan over all
    pending requests re-evaluated on each call.
    """
    roles = hierarchy or get_role_hierarchy()
    result = await session.execute(
        select(ApprovalRequest)
        .where(col(ApprovalRequest.status) == RequestStatus.PENDING.value)
        .order_by(col(ApprovalRequest.created_at))
    )

    items: list[PendingApprovalItem] = []
    for request in result.scalars().all():
        required_role = request.required_role
        if required_role is None:
            logger.warning("Pending request %s has no remaining approval step", request.id)
            continue
        if roles.can_act(actor_role, required_role):
            items.append(PendingApprovalItem(request=build_request_response(request), required_role=required_role))

    return PendingApprovalListResponse(items=items, total=len(items))


async def eligible_approvers(
    required_role: str,
    hierarchy: RoleHierarchy | None = None,
    directory: UserDirectory | None = None,
) -> list[UserProfile]:
    """Active users whose role may act on a step requiring ``required_role``."""
    roles = hierarchy or get_role_hierarchy()
    users = await (directory or get_user_directory()).list_users()
    return [u for u in users if u.is_active and roles.can_act(u.role, required_role)]
