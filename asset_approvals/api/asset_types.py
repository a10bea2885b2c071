# ruff: noqa: B008, TC001, TC003
from __future__ import annotations

import uuid

from fastapi import APIRouter, Query, status

from asset_approvals.api.deps import ActorDep, AdminDep
from asset_approvals.db import SessionDep
from asset_approvals.schemas.asset_type import (
    AssetTypeListResponse,
    AssetTypeResponse,
    CreateAssetTypePayload,
    SeedResponse,
    UpdateAssetTypePayload,
)
from asset_approvals.services import asset_type as asset_type_service

asset_types_router = APIRouter(prefix="/asset-types", tags=["asset-types"])


@asset_types_router.get("", response_model=AssetTypeListResponse)
async def list_asset_types(
    session: SessionDep,
    _actor: ActorDep,
    active_only: bool = Query(default=False),
) -> AssetTypeListResponse:
    """List asset types."""
    return await asset_type_service.list_asset_types(session, active_only)


@asset_types_router.post("", response_model=AssetTypeResponse, status_code=status.HTTP_201_CREATED)
async def create_asset_type(
    payload: CreateAssetTypePayload,
    session: SessionDep,
    _admin: AdminDep,
) -> AssetTypeResponse:
    """Create an asset type (admin only)."""
    return await asset_type_service.create_asset_type(session, payload)


@asset_types_router.post("/seed", response_model=SeedResponse)
async def seed_asset_types(session: SessionDep, _admin: AdminDep) -> SeedResponse:
    """Create the default catalogue if no asset types exist yet (admin only)."""
    return SeedResponse(created=await asset_type_service.seed_default_asset_types(session))


@asset_types_router.get("/{asset_type_id}", response_model=AssetTypeResponse)
async def get_asset_type(
    asset_type_id: uuid.UUID,
    session: SessionDep,
    _actor: ActorDep,
) -> AssetTypeResponse:
    """Get a single asset type."""
    return await asset_type_service.get_asset_type(session, asset_type_id)


@asset_types_router.patch("/{asset_type_id}", response_model=AssetTypeResponse)
async def update_asset_type(
    asset_type_id: uuid.UUID,
    payload: UpdateAssetTypePayload,
    session: SessionDep,
    _admin: AdminDep,
) -> AssetTypeResponse:
    """Update an asset type (admin only). In-flight requests are unaffected."""
    return await asset_type_service.update_asset_type(session, asset_type_id, payload)
