# ruff: noqa: B008
from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from asset_approvals.api.deps import ActorDep, AdminDep, RolesDep
from asset_approvals.schemas.user import (
    SetSupervisorPayload,
    UpdateRolePayload,
    UpsertUserPayload,
    UserListResponse,
    UserResponse,
)
from asset_approvals.services import users as user_service
from asset_approvals.services.users import UserDirectory, UserProfile, get_user_directory

users_router = APIRouter(prefix="/users", tags=["users"])


def build_user_response(profile: UserProfile) -> UserResponse:
    return UserResponse(**profile.model_dump())


def _list_response(profiles: list[UserProfile]) -> UserListResponse:
    return UserListResponse(items=[build_user_response(p) for p in profiles], total=len(profiles))


@users_router.get("", response_model=UserListResponse)
async def list_users(
    _admin: AdminDep,
    role: str | None = Query(default=None),
    department: str | None = Query(default=None),
    directory: UserDirectory = Depends(get_user_directory),
) -> UserListResponse:
    """List profiles, optionally filtered by role and department (admin only)."""
    profiles = await directory.list_users(role=role, department=department)
    return _list_response(sorted(profiles, key=lambda p: p.name))


@users_router.get("/me", response_model=UserResponse)
async def get_me(
    actor: ActorDep,
    directory: UserDirectory = Depends(get_user_directory),
) -> UserResponse:
    """The calling user's own profile."""
    return build_user_response(await user_service.get_user_or_404(actor.id, directory))


@users_router.get("/approvers", response_model=UserListResponse)
async def list_approvers(
    _admin: AdminDep,
    roles: RolesDep,
    directory: UserDirectory = Depends(get_user_directory),
) -> UserListResponse:
    """Active users holding an approver role (admin only)."""
    return _list_response(await user_service.list_approvers(roles, directory))


@users_router.get("/{user_id}", response_model=UserResponse)
async def get_user(
    user_id: str,
    _admin: AdminDep,
    directory: UserDirectory = Depends(get_user_directory),
) -> UserResponse:
    """Get a single profile (admin only)."""
    return build_user_response(await user_service.get_user_or_404(user_id, directory))


@users_router.get("/{user_id}/subordinates", response_model=UserListResponse)
async def list_subordinates(
    user_id: str,
    _admin: AdminDep,
    directory: UserDirectory = Depends(get_user_directory),
) -> UserListResponse:
    """Users reporting directly to ``user_id`` (admin only)."""
    await user_service.get_user_or_404(user_id, directory)
    return _list_response(await user_service.list_subordinates(user_id, directory))


@users_router.put("/{user_id}", response_model=UserResponse)
async def upsert_user(
    user_id: str,
    payload: UpsertUserPayload,
    admin: AdminDep,
    roles: RolesDep,
    directory: UserDirectory = Depends(get_user_directory),
) -> UserResponse:
    """Create or update a profile (admin only)."""
    profile = await user_service.upsert_user(admin, user_id, payload, hierarchy=roles, directory=directory)
    return build_user_response(profile)


@users_router.patch("/{user_id}/role", response_model=UserResponse)
async def update_role(
    user_id: str,
    payload: UpdateRolePayload,
    admin: AdminDep,
    roles: RolesDep,
    directory: UserDirectory = Depends(get_user_directory),
) -> UserResponse:
    """Change a user's role (admin only, never above the caller's own)."""
    profile = await user_service.change_role(admin, user_id, payload.role, hierarchy=roles, directory=directory)
    return build_user_response(profile)


@users_router.patch("/{user_id}/supervisor", response_model=UserResponse)
async def set_supervisor(
    user_id: str,
    payload: SetSupervisorPayload,
    admin: AdminDep,
    roles: RolesDep,
    directory: UserDirectory = Depends(get_user_directory),
) -> UserResponse:
    """Set or clear a user's supervisor (admin only)."""
    profile = await user_service.assign_supervisor(
        admin, user_id, payload.supervisor_id, hierarchy=roles, directory=directory
    )
    return build_user_response(profile)
