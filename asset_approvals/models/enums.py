from __future__ import annotations

import enum


class RequestStatus(enum.StrEnum):
    """State machine for approval requests."""

    PENDING = "pending"
    APPROVED = "approved"
    DENIED = "denied"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        return self is not RequestStatus.PENDING


class ApprovalAction(enum.StrEnum):
    """Action recorded in the approval trail."""

    APPROVED = "approved"
    DENIED = "denied"


class TrailEntryKind(enum.StrEnum):
    """Kind of entry in a reconstructed audit trail."""

    CREATED = "created"
    APPROVAL = "approval"
    TERMINAL = "terminal"


class FieldKind(enum.StrEnum):
    """Input kind of an asset type form field."""

    TEXT = "text"
    NUMBER = "number"
    DATE = "date"
    SELECT = "select"
    TEXTAREA = "textarea"


class NotificationEvent(enum.StrEnum):
    """Outbound notification event types."""

    APPROVAL_REQUIRED = "approval_required"
    REQUEST_APPROVED = "request_approved"
    REQUEST_DENIED = "request_denied"
