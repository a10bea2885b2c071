"""Workflow engine: submission and the approve/deny/cancel transitions.

Each transition runs as one database transaction:

1. Read the request row and capture its version and level.
2. Check preconditions in order: exists, pending at the expected step,
   authorized, valid input.
3. Compare-and-set the request row against the captured version. A writer
   that committed in between makes this fail with InvalidStateError.
4. Append the approval event (approve/deny only).
5. Commit, then schedule notifications in the background.

Any failed precondition rolls back with nothing written.
"""

# ruff: noqa: TC003
from __future__ import annotations

import logging
import uuid
from typing import TYPE_CHECKING, NoReturn

from asset_approvals.exceptions import ForbiddenError, InvalidStateError, ValidationError
from asset_approvals.models.base import now_utc
from asset_approvals.models.enums import ApprovalAction, NotificationEvent, RequestStatus
from asset_approvals.schemas.request import TransitionResponse
from asset_approvals.services import request as request_store
from asset_approvals.services.approver import eligible_approvers
from asset_approvals.services.asset_type import (
    build_asset_type_response,
    effective_approval_levels,
    get_asset_type_or_404,
    validate_form_data,
)
from asset_approvals.services.history import append_event
from asset_approvals.services.notifications import Notification, dispatch
from asset_approvals.services.roles import get_role_hierarchy

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from asset_approvals.exceptions import AppError
    from asset_approvals.models.request import ApprovalRequest
    from asset_approvals.schemas.auth import Actor
    from asset_approvals.schemas.request import CreateRequestPayload, DecisionPayload, RequestResponse
    from asset_approvals.services.notifications import Notifier
    from asset_approvals.services.roles import RoleHierarchy
    from asset_approvals.services.users import UserDirectory

logger = logging.getLogger(__name__)

MAX_COMMENT_LENGTH = 2000


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


async def _abort(session: AsyncSession, error: AppError) -> NoReturn:
    """Discard the open transaction and surface the error with nothing written."""
    await session.rollback()
    raise error


def _at_expected_step(request: ApprovalRequest, payload: DecisionPayload | None) -> bool:
    """Pending with a step left, and at the caller's ``level`` when one was given."""
    if request.status != RequestStatus.PENDING or request.required_role is None:
        return False
    return payload is None or payload.level is None or payload.level == request.current_approval_level


def _transition_response(request: ApprovalRequest, is_fully_approved: bool = False) -> TransitionResponse:
    return TransitionResponse(
        request_id=request.id,
        status=RequestStatus(request.status),
        current_approval_level=request.current_approval_level,
        total_approval_levels=request.total_approval_levels,
        is_fully_approved=is_fully_approved,
    )


def _template_data(request: ApprovalRequest, **extra: object) -> dict[str, object]:
    data: dict[str, object] = {
        "request_id": str(request.id),
        "requester_name": request.requester_name,
        "asset_type_name": request.asset_type_name,
        "current_approval_level": request.current_approval_level,
        "total_approval_levels": request.total_approval_levels,
    }
    data.update(extra)
    return data


async def _approval_required_notifications(
    request: ApprovalRequest,
    hierarchy: RoleHierarchy,
    directory: UserDirectory | None,
) -> list[Notification]:
    required_role = request.required_role
    if required_role is None:
        return []
    approvers = await eligible_approvers(required_role, hierarchy, directory)
    return [
        Notification(
            event_type=NotificationEvent.APPROVAL_REQUIRED,
            recipient=approver.email,
            subject=f"New {request.asset_type_name} Request from {request.requester_name}",
            template_data=_template_data(request, required_role=required_role),
        )
        for approver in approvers
        if approver.id != request.requester_id
    ]


def _approved_notification(request: ApprovalRequest, actor: Actor | None, comment: str | None) -> Notification:
    fully = request.status == RequestStatus.APPROVED
    return Notification(
        event_type=NotificationEvent.REQUEST_APPROVED,
        recipient=request.requester_email,
        subject=f"Your {request.asset_type_name} Request has been {'Approved' if fully else 'Partially Approved'}",
        template_data=_template_data(
            request,
            approver_name=actor.name if actor else None,
            comment=comment,
            is_fully_approved=fully,
        ),
    )


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


async def create_request(
    session: AsyncSession,
    requester: Actor,
    payload: CreateRequestPayload,
    *,
    hierarchy: RoleHierarchy | None = None,
    directory: UserDirectory | None = None,
    notifier: Notifier | None = None,
) -> RequestResponse:
    """Submit a new request against an asset type.

    The asset type must exist and be active, and the form answers must satisfy
    its field descriptors. The approval chain is frozen onto the request.
    """
    roles = hierarchy or get_role_hierarchy()
    asset_type = await get_asset_type_or_404(session, payload.asset_type_id)
    if not asset_type.is_active:
        raise ValidationError("Asset type is not active")
    validate_form_data(build_asset_type_response(asset_type).fields, payload.form_data)

    approval_roles = effective_approval_levels(asset_type)
    unknown = [role for role in approval_roles if not roles.is_known(role)]
    if unknown:
        logger.warning("Asset type %s names unknown approval roles %s", asset_type.id, unknown)

    request = request_store.insert_request(session, requester, asset_type, approval_roles, payload.form_data)
    await session.commit()
    await session.refresh(request)
    logger.info(
        "Request %s created by %s for %s (%d approval levels, status=%s)",
        request.id,
        requester.id,
        asset_type.name,
        request.total_approval_levels,
        request.status,
    )

    if request.status == RequestStatus.APPROVED:
        notifications = [_approved_notification(request, None, None)]
    else:
        notifications = await _approval_required_notifications(request, roles, directory)
    dispatch(notifications, notifier)
    return request_store.build_request_response(request)


async def approve_request(
    session: AsyncSession,
    actor: Actor,
    request_id: uuid.UUID,
    payload: DecisionPayload | None = None,
    *,
    hierarchy: RoleHierarchy | None = None,
    directory: UserDirectory | None = None,
    notifier: Notifier | None = None,
) -> TransitionResponse:
    """Resolve the current step as approved.

    Advances the level by one; approving the last step sets status approved
    and issued_at in the same transition.
    """
    roles = hierarchy or get_role_hierarchy()
    request = await request_store.get_request_snapshot(session, request_id)
    expected_version = request.version
    level = request.current_approval_level
    required_role = request.required_role

    if not _at_expected_step(request, payload):
        await _abort(session, InvalidStateError())
    if not roles.can_act(actor.role, required_role):
        await _abort(session, ForbiddenError(f"Role '{actor.role}' may not act on a step requiring '{required_role}'"))
    comment = ((payload.comment or "").strip() if payload else "") or None
    if comment is not None and len(comment) > MAX_COMMENT_LENGTH:
        await _abort(session, ValidationError(f"Comment must be at most {MAX_COMMENT_LENGTH} characters"))

    new_level = level + 1
    is_fully_approved = new_level >= request.total_approval_levels
    now = now_utc()

    await request_store.commit_transition(
        session,
        request_id,
        expected_version=expected_version,
        status=RequestStatus.APPROVED if is_fully_approved else RequestStatus.PENDING,
        level=new_level,
        issued_at=now if is_fully_approved else None,
    )
    append_event(session, request_id=request_id, actor=actor, action=ApprovalAction.APPROVED, level=level, comment=comment)
    await session.commit()
    await session.refresh(request)
    logger.info(
        "Request %s approved at level %d by %s (%s); fully_approved=%s",
        request_id,
        level,
        actor.id,
        actor.role,
        is_fully_approved,
    )

    notifications = [_approved_notification(request, actor, comment)]
    if not is_fully_approved:
        notifications.extend(await _approval_required_notifications(request, roles, directory))
    dispatch(notifications, notifier)
    return _transition_response(request, is_fully_approved=is_fully_approved)


async def deny_request(
    session: AsyncSession,
    actor: Actor,
    request_id: uuid.UUID,
    payload: DecisionPayload | None = None,
    *,
    hierarchy: RoleHierarchy | None = None,
    notifier: Notifier | None = None,
) -> TransitionResponse:
    """Resolve the current step as denied. A non-empty comment is mandatory."""
    roles = hierarchy or get_role_hierarchy()
    request = await request_store.get_request_snapshot(session, request_id)
    expected_version = request.version
    level = request.current_approval_level
    required_role = request.required_role

    if not _at_expected_step(request, payload):
        await _abort(session, InvalidStateError())
    if not roles.can_act(actor.role, required_role):
        await _abort(session, ForbiddenError(f"Role '{actor.role}' may not act on a step requiring '{required_role}'"))
    comment = (payload.comment or "").strip() if payload else ""
    if not comment:
        await _abort(session, ValidationError("A comment is required to deny a request"))
    if len(comment) > MAX_COMMENT_LENGTH:
        await _abort(session, ValidationError(f"Comment must be at most {MAX_COMMENT_LENGTH} characters"))

    await request_store.commit_transition(
        session,
        request_id,
        expected_version=expected_version,
        status=RequestStatus.DENIED,
        level=level,
    )
    append_event(session, request_id=request_id, actor=actor, action=ApprovalAction.DENIED, level=level, comment=comment)
    await session.commit()
    await session.refresh(request)
    logger.info("Request %s denied at level %d by %s (%s)", request_id, level, actor.id, actor.role)

    dispatch(
        [
            Notification(
                event_type=NotificationEvent.REQUEST_DENIED,
                recipient=request.requester_email,
                subject=f"Your {request.asset_type_name} Request has been Denied",
                template_data=_template_data(request, approver_name=actor.name, comment=comment),
            )
        ],
        notifier,
    )
    return _transition_response(request)


async def cancel_request(
    session: AsyncSession,
    requester_id: str,
    request_id: uuid.UUID,
) -> TransitionResponse:
    """Withdraw a pending request. Only the original requester may cancel.

    Cancellation is self-service rather than an approval step, so it writes no
    approval event and sends no notification.
    """
    request = await request_store.get_request_snapshot(session, request_id)
    expected_version = request.version
    level = request.current_approval_level

    if request.status != RequestStatus.PENDING:
        await _abort(session, InvalidStateError())
    if request.requester_id != requester_id:
        await _abort(session, ForbiddenError("Only the requester can cancel this request"))

    await request_store.commit_transition(
        session,
        request_id,
        expected_version=expected_version,
        status=RequestStatus.CANCELLED,
        level=level,
    )
    await session.commit()
    await session.refresh(request)
    logger.info("Request %s cancelled by requester %s", request_id, requester_id)
    return _transition_response(request)
