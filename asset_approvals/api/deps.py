# ruff: noqa: B008
from __future__ import annotations

from typing import Annotated

from fastapi import Depends, Header

from asset_approvals.exceptions import ForbiddenError
from asset_approvals.schemas.auth import Actor
from asset_approvals.services.roles import RoleHierarchy, get_role_hierarchy
from asset_approvals.services.users import UserDirectory, get_user_directory

CATALOGUE_ADMIN_ROLE = "admin"


async def get_actor(
    x_user_id: str = Header(min_length=1),
    directory: UserDirectory = Depends(get_user_directory),
) -> Actor:
    """Resolve the calling user's profile from the dev auth header."""
    profile = await directory.get_user(x_user_id)
    if profile is None or not profile.is_active:
        raise ForbiddenError("Unknown or inactive user")
    return profile.to_actor()


ActorDep = Annotated[Actor, Depends(get_actor)]
RolesDep = Annotated[RoleHierarchy, Depends(get_role_hierarchy)]


async def require_admin(actor: ActorDep, roles: RolesDep) -> Actor:
    """Require the admin role or above."""
    if roles.level(actor.role) < roles.level(CATALOGUE_ADMIN_ROLE):
        raise ForbiddenError("Admin access required")
    return actor


AdminDep = Annotated[Actor, Depends(require_admin)]
