"""Append-only approval trail.

Events are only ever inserted, inside the workflow engine's transaction, and
are never updated or deleted.
"""

# ruff: noqa: TC003
from __future__ import annotations

import uuid
from typing import TYPE_CHECKING

from sqlalchemy import select
from sqlmodel import col

from asset_approvals.models.approval_event import ApprovalEvent
from asset_approvals.models.enums import ApprovalAction, RequestStatus, TrailEntryKind
from asset_approvals.schemas.request import ApprovalEventResponse, TrailEntry

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from asset_approvals.models.request import ApprovalRequest
    from asset_approvals.schemas.auth import Actor


def build_event_response(event: ApprovalEvent) -> ApprovalEventResponse:
    """Map an approval event model to its response schema."""
    return ApprovalEventResponse(
        id=event.id,
        request_id=event.request_id,
        approver_id=event.approver_id,
        approver_name=event.approver_name,
        approver_email=event.approver_email,
        approver_role=event.approver_role,
        action=ApprovalAction(event.action),
        comment=event.comment,
        level=event.level,
        created_at=event.created_at,
    )


def append_event(
    session: AsyncSession,
    *,
    request_id: uuid.UUID,
    actor: Actor,
    action: ApprovalAction,
    level: int,
    comment: str | None = None,
) -> ApprovalEvent:
    """Stage an approval event within the caller's transaction."""
    event = ApprovalEvent(
        request_id=request_id,
        approver_id=actor.id,
        approver_name=actor.name,
        approver_email=actor.email,
        approver_role=actor.role,
        action=action.value,
        comment=comment,
        level=level,
    )
    session.add(event)
    return event


async def list_events(session: AsyncSession, request_id: uuid.UUID) -> list[ApprovalEvent]:
    """Events for one request in the order they were recorded.

    Each step is resolved at most once, so ``level`` gives the exact order.
    """
    result = await session.execute(
        select(ApprovalEvent)
        .where(col(ApprovalEvent.request_id) == request_id)
        .order_by(col(ApprovalEvent.level), col(ApprovalEvent.created_at))
    )
    return list(result.scalars().all())


def build_trail(request: ApprovalRequest, events: list[ApprovalEvent]) -> list[TrailEntry]:
    """Reconstruct the full history: created, each approval event, then the terminal status."""
    trail = [
        TrailEntry(
            kind=TrailEntryKind.CREATED,
            at=request.created_at,
            actor_id=request.requester_id,
            actor_name=request.requester_name,
            status=RequestStatus.PENDING,
        )
    ]
    trail.extend(
        TrailEntry(
            kind=TrailEntryKind.APPROVAL,
            at=event.created_at,
            actor_id=event.approver_id,
            actor_name=event.approver_name,
            actor_role=event.approver_role,
            action=ApprovalAction(event.action),
            level=event.level,
            comment=event.comment,
        )
        for event in events
    )

    status = RequestStatus(request.status)
    if status.is_terminal:
        terminal = TrailEntry(
            kind=TrailEntryKind.TERMINAL,
            at=request.issued_at or request.updated_at,
            status=status,
        )
        if status == RequestStatus.CANCELLED:
            terminal.actor_id = request.requester_id
            terminal.actor_name = request.requester_name
        trail.append(terminal)
    return trail
