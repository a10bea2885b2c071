# ruff: noqa: TC003
from __future__ import annotations

import logging
import uuid
from datetime import date
from typing import TYPE_CHECKING, Any

from pydantic import TypeAdapter
from sqlalchemy import func, select
from sqlmodel import col

from asset_approvals.exceptions import NotFoundError, ValidationError
from asset_approvals.models.asset_type import AssetType
from asset_approvals.models.enums import FieldKind
from asset_approvals.schemas.asset_type import (
    AssetTypeListResponse,
    AssetTypeResponse,
    CreateAssetTypePayload,
    FieldDescriptor,
)

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from asset_approvals.schemas.asset_type import UpdateAssetTypePayload

logger = logging.getLogger(__name__)

_fields_adapter: TypeAdapter[list[FieldDescriptor]] = TypeAdapter(list[FieldDescriptor])


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def build_asset_type_response(asset_type: AssetType) -> AssetTypeResponse:
    """Map an asset type model to its response schema."""
    return AssetTypeResponse(
        id=asset_type.id,
        name=asset_type.name,
        description=asset_type.description,
        icon=asset_type.icon,
        fields=_fields_adapter.validate_python(asset_type.fields or []),
        requires_approval=asset_type.requires_approval,
        approval_levels=list(asset_type.approval_levels or []),
        is_active=asset_type.is_active,
        created_at=asset_type.created_at,
        updated_at=asset_type.updated_at,
    )


def effective_approval_levels(asset_type: AssetType) -> list[str]:
    """Approval chain a new request of this type must pass through."""
    if not asset_type.requires_approval:
        return []
    return list(asset_type.approval_levels or [])


def _check_value(descriptor: FieldDescriptor, value: Any) -> str | None:
    """Return a problem description for one submitted value, or None if acceptable."""
    if descriptor.kind == FieldKind.NUMBER:
        if isinstance(value, bool):
            return f"{descriptor.label} must be a number"
        if isinstance(value, (int, float)):
            return None
        try:
            float(str(value))
        except ValueError:
            return f"{descriptor.label} must be a number"
        return None
    if descriptor.kind == FieldKind.DATE:
        try:
            date.fromisoformat(str(value)[:10])
        except ValueError:
            return f"{descriptor.label} must be an ISO date (YYYY-MM-DD)"
        return None
    if descriptor.kind == FieldKind.SELECT and value not in (descriptor.options or []):
        return f"{descriptor.label} must be one of: {', '.join(descriptor.options or [])}"
    return None


def validate_form_data(fields: list[FieldDescriptor], form_data: dict[str, Any]) -> None:
    """Check submitted answers against the asset type's field descriptors.

    Collects every problem and raises a single ValidationError. Keys that match
    no descriptor are kept as-is; the core treats answers opaquely.
    """
    problems: list[str] = []
    for descriptor in fields:
        value = form_data.get(descriptor.name)
        blank = value is None or (isinstance(value, str) and not value.strip())
        if blank:
            if descriptor.required:
                problems.append(f"{descriptor.label} is required")
            continue
        problem = _check_value(descriptor, value)
        if problem is not None:
            problems.append(problem)
    if problems:
        raise ValidationError("; ".join(problems))


async def get_asset_type_or_404(session: AsyncSession, asset_type_id: uuid.UUID) -> AssetType:
    """Fetch an asset type by ID. Raises NotFoundError if missing."""
    asset_type = await session.get(AssetType, asset_type_id)
    if asset_type is None:
        raise NotFoundError("Asset type not found")
    return asset_type


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


async def create_asset_type(session: AsyncSession, payload: CreateAssetTypePayload) -> AssetTypeResponse:
    """Create a new, active asset type."""
    asset_type = AssetType(
        name=payload.name,
        description=payload.description,
        icon=payload.icon,
        fields=[f.model_dump(mode="json") for f in payload.fields],
        requires_approval=payload.requires_approval,
        approval_levels=list(payload.approval_levels),
    )
    session.add(asset_type)
    await session.commit()
    await session.refresh(asset_type)
    logger.info("Created asset type %s (%s) levels=%s", asset_type.id, asset_type.name, asset_type.approval_levels)
    return build_asset_type_response(asset_type)


async def update_asset_type(
    session: AsyncSession,
    asset_type_id: uuid.UUID,
    payload: UpdateAssetTypePayload,
) -> AssetTypeResponse:
    """Apply a partial update. In-flight requests keep their frozen approval chain."""
    asset_type = await get_asset_type_or_404(session, asset_type_id)

    changes = payload.model_dump(exclude_unset=True, mode="json")
    for key, value in changes.items():
        if value is None and key != "icon":
            continue
        setattr(asset_type, key, value)

    session.add(asset_type)
    await session.commit()
    await session.refresh(asset_type)
    logger.info("Updated asset type %s: %s", asset_type.id, sorted(changes))
    return build_asset_type_response(asset_type)


async def get_asset_type(session: AsyncSession, asset_type_id: uuid.UUID) -> AssetTypeResponse:
    """Get a single asset type."""
    return build_asset_type_response(await get_asset_type_or_404(session, asset_type_id))


async def list_asset_types(session: AsyncSession, active_only: bool = False) -> AssetTypeListResponse:
    """List asset types ordered by name."""
    query = select(AssetType)
    count_query = select(func.count()).select_from(AssetType)
    if active_only:
        query = query.where(col(AssetType.is_active).is_(True))
        count_query = count_query.where(col(AssetType.is_active).is_(True))

    total = (await session.execute(count_query)).scalar_one()
    result = await session.execute(query.order_by(col(AssetType.name)))
    return AssetTypeListResponse(
        items=[build_asset_type_response(a) for a in result.scalars().all()],
        total=total,
    )


DEFAULT_ASSET_TYPES: list[dict[str, Any]] = [
    {
        "name": "Gate Pass",
        "description": "Temporary access pass for visitors or contractors",
        "icon": "door-open",
        "fields": [
            {"name": "visitorName", "label": "Visitor Name", "kind": "text", "required": True},
            {"name": "company", "label": "Company/Organization", "kind": "text", "required": True},
            {"name": "purpose", "label": "Purpose of Visit", "kind": "textarea", "required": True},
            {"name": "validFrom", "label": "Valid From", "kind": "date", "required": True},
            {"name": "validUntil", "label": "Valid Until", "kind": "date", "required": True},
            {
                "name": "accessAreas",
                "label": "Access Areas",
                "kind": "select",
                "required": True,
                "options": ["Lobby Only", "General Office", "All Areas", "Restricted"],
            },
        ],
        "approval_levels": ["supervisor"],
    },
    {
        "name": "Software License",
        "description": "Request for software licenses and subscriptions",
        "icon": "key",
        "fields": [
            {"name": "softwareName", "label": "Software Name", "kind": "text", "required": True},
            {"name": "version", "label": "Version", "kind": "text", "required": False},
            {
                "name": "licenseType",
                "label": "License Type",
                "kind": "select",
                "required": True,
                "options": ["Single User", "Team", "Enterprise", "Floating"],
            },
            {"name": "seats", "label": "Number of Seats", "kind": "number", "required": True},
            {"name": "justification", "label": "Business Justification", "kind": "textarea", "required": True},
            {
                "name": "duration",
                "label": "License Duration",
                "kind": "select",
                "required": True,
                "options": ["Monthly", "Annual", "Perpetual"],
            },
        ],
        "approval_levels": ["supervisor", "admin"],
    },
    {
        "name": "Hardware Asset",
        "description": "Request for computer equipment and hardware",
        "icon": "laptop",
        "fields": [
            {
                "name": "assetCategory",
                "label": "Asset Category",
                "kind": "select",
                "required": True,
                "options": ["Laptop", "Desktop", "Monitor", "Keyboard/Mouse", "Mobile Device", "Other"],
            },
            {"name": "specifications", "label": "Specifications", "kind": "textarea", "required": True},
            {"name": "justification", "label": "Business Justification", "kind": "textarea", "required": True},
            {
                "name": "urgency",
                "label": "Urgency",
                "kind": "select",
                "required": True,
                "options": ["Low", "Medium", "High", "Critical"],
            },
        ],
        "approval_levels": ["supervisor", "admin"],
    },
    {
        "name": "Access Card",
        "description": "Building access card or badge",
        "icon": "credit-card",
        "fields": [
            {
                "name": "cardType",
                "label": "Card Type",
                "kind": "select",
                "required": True,
                "options": ["Permanent", "Temporary", "Replacement"],
            },
            {
                "name": "accessLevel",
                "label": "Access Level",
                "kind": "select",
                "required": True,
                "options": ["Basic", "Standard", "Enhanced", "Full Access"],
            },
            {"name": "buildings", "label": "Buildings", "kind": "text", "required": True},
            {"name": "reason", "label": "Reason for Request", "kind": "textarea", "required": True},
        ],
        "approval_levels": ["supervisor"],
    },
]


async def seed_default_asset_types(session: AsyncSession) -> int:
    """Insert the default catalogue if no asset types exist. Returns the number created."""
    existing = (await session.execute(select(func.count()).select_from(AssetType))).scalar_one()
    if existing:
        logger.info("Asset types already exist (%d); skipping seed", existing)
        return 0

    for definition in DEFAULT_ASSET_TYPES:
        payload = CreateAssetTypePayload.model_validate(definition)
        session.add(
            AssetType(
                name=payload.name,
                description=payload.description,
                icon=payload.icon,
                fields=[f.model_dump(mode="json") for f in payload.fields],
                requires_approval=payload.requires_approval,
                approval_levels=list(payload.approval_levels),
            )
        )
    await session.commit()
    logger.info("Seeded %d default asset types", len(DEFAULT_ASSET_TYPES))
    return len(DEFAULT_ASSET_TYPES)
