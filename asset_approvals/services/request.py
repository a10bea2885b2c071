# ruff: noqa: TC003
from __future__ import annotations

import logging
import uuid
from datetime import datetime
from typing import TYPE_CHECKING, Any

from sqlalchemy import func, select, update
from sqlmodel import col

from asset_approvals.exceptions import InvalidStateError, NotFoundError
from asset_approvals.models.asset_type import AssetType
from asset_approvals.models.base import now_utc
from asset_approvals.models.enums import RequestStatus
from asset_approvals.models.request import ApprovalRequest
from asset_approvals.schemas.request import (
    RequestHistoryResponse,
    RequestListResponse,
    RequestResponse,
    RequestStatsResponse,
)
from asset_approvals.services.asset_type import build_asset_type_response
from asset_approvals.services.history import build_event_response, build_trail, list_events

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from asset_approvals.schemas.auth import Actor

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def build_request_response(request: ApprovalRequest) -> RequestResponse:
    """Map a request model to its response schema."""
    return RequestResponse(
        id=request.id,
        requester_id=request.requester_id,
        requester_name=request.requester_name,
        requester_email=request.requester_email,
        requester_department=request.requester_department,
        asset_type_id=request.asset_type_id,
        asset_type_name=request.asset_type_name,
        approval_roles=list(request.approval_roles or []),
        total_approval_levels=request.total_approval_levels,
        current_approval_level=request.current_approval_level,
        required_role=request.required_role,
        form_data=dict(request.form_data or {}),
        status=RequestStatus(request.status),
        issued_at=request.issued_at,
        created_at=request.created_at,
        updated_at=request.updated_at,
    )


async def get_request_or_404(session: AsyncSession, request_id: uuid.UUID) -> ApprovalRequest:
    """Fetch a request by ID. Raises NotFoundError if missing."""
    result = await session.execute(select(ApprovalRequest).where(col(ApprovalRequest.id) == request_id))
    request = result.scalar_one_or_none()
    if request is None:
        raise NotFoundError("Request not found")
    return request


async def get_request_snapshot(session: AsyncSession, request_id: uuid.UUID) -> ApprovalRequest:
    """Fetch a request with fresh attribute values.

    No row lock is taken. A concurrent writer is detected by the version
    check in ``commit_transition``.
    """
    result = await session.execute(
        select(ApprovalRequest)
        .where(col(ApprovalRequest.id) == request_id)
        .execution_options(populate_existing=True)
    )
    request = result.scalar_one_or_none()
    if request is None:
        raise NotFoundError("Request not found")
    return request


# ---------------------------------------------------------------------------
# Store operations
# ---------------------------------------------------------------------------


def insert_request(
    session: AsyncSession,
    requester: Actor,
    asset_type: AssetType,
    approval_roles: list[str],
    form_data: dict[str, Any],
) -> ApprovalRequest:
    """Stage a new request. Asset type details are copied, never referenced.

    A request with an empty approval chain starts out approved.
    """
    now = now_utc()
    auto_approved = not approval_roles
    request = ApprovalRequest(
        requester_id=requester.id,
        requester_name=requester.name,
        requester_email=requester.email,
        requester_department=requester.department,
        asset_type_id=asset_type.id,
        asset_type_name=asset_type.name,
        approval_roles=list(approval_roles),
        total_approval_levels=len(approval_roles),
        form_data=dict(form_data),
        status=RequestStatus.APPROVED.value if auto_approved else RequestStatus.PENDING.value,
        current_approval_level=0,
        issued_at=now if auto_approved else None,
        created_at=now,
        updated_at=now,
    )
    session.add(request)
    return request


async def commit_transition(
    session: AsyncSession,
    request_id: uuid.UUID,
    *,
    expected_version: int,
    status: RequestStatus,
    level: int,
    issued_at: datetime | None = None,
) -> None:
    """Compare-and-set the request row against the version the caller read.

    Only a pending row still at ``expected_version`` is updated. Otherwise
    another writer committed first: the transaction is rolled back and
    InvalidStateError raised. The caller commits on success.
    """
    values: dict[str, Any] = {
        "status": status.value,
        "current_approval_level": level,
        "updated_at": now_utc(),
        "version": col(ApprovalRequest.version) + 1,
    }
    if issued_at is not None:
        values["issued_at"] = issued_at

    result = await session.execute(
        update(ApprovalRequest)
        .where(
            col(ApprovalRequest.id) == request_id,
            col(ApprovalRequest.version) == expected_version,
            col(ApprovalRequest.status) == RequestStatus.PENDING.value,
        )
        .values(**values)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount != 1:
        await session.rollback()
        logger.info("Transition on request %s lost a race at version %d", request_id, expected_version)
        raise InvalidStateError("Request is not pending at the expected step")


# ---------------------------------------------------------------------------
# Queries
# ---------------------------------------------------------------------------


async def get_request(session: AsyncSession, request_id: uuid.UUID) -> RequestResponse:
    """Get a single request by ID."""
    return build_request_response(await get_request_or_404(session, request_id))


async def list_requests(
    session: AsyncSession,
    status_filter: RequestStatus | None = None,
    requester_id: str | None = None,
    offset: int = 0,
    limit: int = 50,
) -> RequestListResponse:
    """List requests with optional filters, ordered by created_at DESC."""
    filters = []
    if status_filter is not None:
        filters.append(col(ApprovalRequest.status) == status_filter.value)
    if requester_id is not None:
        filters.append(col(ApprovalRequest.requester_id) == requester_id)

    count_result = await session.execute(select(func.count()).select_from(ApprovalRequest).where(*filters))
    total = count_result.scalar_one()

    result = await session.execute(
        select(ApprovalRequest)
        .where(*filters)
        .order_by(col(ApprovalRequest.created_at).desc())
        .offset(offset)
        .limit(limit)
    )
    return RequestListResponse(
        items=[build_request_response(r) for r in result.scalars().all()],
        total=total,
    )


async def get_stats(session: AsyncSession) -> RequestStatsResponse:
    """Count requests per status."""
    result = await session.execute(
        select(col(ApprovalRequest.status), func.count()).group_by(col(ApprovalRequest.status))
    )
    counts = {status.value: 0 for status in RequestStatus}
    for status, count in result.all():
        counts[status] = count
    return RequestStatsResponse(total=sum(counts.values()), **counts)


async def get_request_with_history(session: AsyncSession, request_id: uuid.UUID) -> RequestHistoryResponse:
    """Get a request with its ordered approval events, asset type and reconstructed trail."""
    request = await get_request_or_404(session, request_id)
    events = await list_events(session, request.id)
    asset_type = await session.get(AssetType, request.asset_type_id)
    return RequestHistoryResponse(
        request=build_request_response(request),
        events=[build_event_response(e) for e in events],
        asset_type=build_asset_type_response(asset_type) if asset_type is not None else None,
        trail=build_trail(request, events),
    )
