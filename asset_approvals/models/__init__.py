from sqlmodel import SQLModel

from asset_approvals.models.approval_event import ApprovalEvent
from asset_approvals.models.asset_type import AssetType
from asset_approvals.models.base import TimestampMixin, UpdatedAtMixin, UUIDBase
from asset_approvals.models.enums import (
    ApprovalAction,
    FieldKind,
    NotificationEvent,
    RequestStatus,
    TrailEntryKind,
)
from asset_approvals.models.request import ApprovalRequest

__all__ = [
    "ApprovalAction",
    "ApprovalEvent",
    "ApprovalRequest",
    "AssetType",
    "FieldKind",
    "NotificationEvent",
    "RequestStatus",
    "SQLModel",
    "TimestampMixin",
    "TrailEntryKind",
    "UUIDBase",
    "UpdatedAtMixin",
]
