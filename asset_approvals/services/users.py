from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Protocol, runtime_checkable

from pydantic import BaseModel

from asset_approvals.exceptions import ForbiddenError, NotFoundError, ValidationError
from asset_approvals.schemas.auth import Actor
from asset_approvals.services.roles import get_role_hierarchy

if TYPE_CHECKING:
    from asset_approvals.schemas.user import UpsertUserPayload
    from asset_approvals.services.roles import RoleHierarchy

logger = logging.getLogger(__name__)


class UserProfile(BaseModel):
    """User metadata from the identity provider's profile store."""

    id: str
    name: str
    email: str
    role: str = "employee"
    department: str | None = None
    supervisor_id: str | None = None
    is_active: bool = True

    def to_actor(self) -> Actor:
        return Actor(id=self.id, name=self.name, email=self.email, role=self.role, department=self.department)


@runtime_checkable
class UserDirectory(Protocol):
    """Interface for the user profile store."""

    async def get_user(self, user_id: str) -> UserProfile | None:
        """Fetch a user profile. Returns None if not found."""
        ...

    async def list_users(self, role: str | None = None, department: str | None = None) -> list[UserProfile]:
        """List user profiles, optionally narrowed to one role and/or department."""
        ...

    async def save_user(self, profile: UserProfile) -> UserProfile:
        """Insert or replace a profile by id."""
        ...


class InMemoryUserDirectory:
    """In-memory stub implementation for development."""

    def __init__(self) -> None:
        self._users: dict[str, UserProfile] = {}

    def seed(self, *users: UserProfile) -> None:
        """Seed users for testing."""
        for user in users:
            self._users[user.id] = user

    async def get_user(self, user_id: str) -> UserProfile | None:
        """Fetch a user profile. Returns None if not found."""
        return self._users.get(user_id)

    async def list_users(self, role: str | None = None, department: str | None = None) -> list[UserProfile]:
        return [
            user
            for user in self._users.values()
            if (role is None or user.role == role) and (department is None or user.department == department)
        ]

    async def save_user(self, profile: UserProfile) -> UserProfile:
        self._users[profile.id] = profile
        return profile


_user_directory: UserDirectory = InMemoryUserDirectory()


def get_user_directory() -> UserDirectory:
    """FastAPI dependency for the user directory."""
    return _user_directory


def set_user_directory(directory: UserDirectory) -> None:
    """Override the directory (for testing or production wiring)."""
    global _user_directory
    _user_directory = directory


DEMO_USERS: list[UserProfile] = [
    UserProfile(
        id="demo_super_admin",
        name="Super Admin",
        email="superadmin@example.com",
        role="super_admin",
        department="Executive",
    ),
    UserProfile(id="demo_admin", name="Admin User", email="admin@example.com", role="admin", department="IT"),
    UserProfile(
        id="demo_supervisor",
        name="Supervisor User",
        email="supervisor@example.com",
        role="supervisor",
        department="Engineering",
    ),
    UserProfile(
        id="demo_employee",
        name="Employee User",
        email="employee@example.com",
        role="employee",
        department="Engineering",
        supervisor_id="demo_supervisor",
    ),
]


def seed_demo_users(directory: UserDirectory) -> int:
    """Load the demo profiles into an in-memory directory. Returns the number seeded."""
    if not isinstance(directory, InMemoryUserDirectory):
        return 0
    directory.seed(*DEMO_USERS)
    return len(DEMO_USERS)


# ---------------------------------------------------------------------------
# Profile management
# ---------------------------------------------------------------------------


async def get_user_or_404(user_id: str, directory: UserDirectory | None = None) -> UserProfile:
    """Fetch a profile by id. Raises NotFoundError if missing."""
    profile = await (directory or get_user_directory()).get_user(user_id)
    if profile is None:
        raise NotFoundError("User not found")
    return profile


async def list_subordinates(supervisor_id: str, directory: UserDirectory | None = None) -> list[UserProfile]:
    """Users reporting directly to ``supervisor_id``."""
    users = await (directory or get_user_directory()).list_users()
    return [u for u in users if u.supervisor_id == supervisor_id]


async def list_approvers(
    hierarchy: RoleHierarchy | None = None,
    directory: UserDirectory | None = None,
) -> list[UserProfile]:
    """Active users who can act on at least the lowest approval step, lowest role first."""
    roles = hierarchy or get_role_hierarchy()
    users = await (directory or get_user_directory()).list_users()
    approvers = [u for u in users if u.is_active and roles.can_act(u.role, roles.roles[0])]
    return sorted(approvers, key=lambda u: (roles.level(u.role), u.name))


def _check_role_grant(actor: Actor, role: str, current_role: str | None, roles: RoleHierarchy) -> None:
    if not roles.is_known(role):
        raise ValidationError(f"Unknown role '{role}'")
    if roles.level(role) > roles.level(actor.role):
        raise ForbiddenError("Cannot grant a role above your own")
    if current_role is not None and roles.level(current_role) > roles.level(actor.role):
        raise ForbiddenError("Cannot change the role of a user above your own")


async def _check_supervisor(
    user_id: str,
    supervisor_id: str,
    roles: RoleHierarchy,
    directory: UserDirectory,
) -> None:
    if supervisor_id == user_id:
        raise ValidationError("A user cannot supervise themselves")
    supervisor = await directory.get_user(supervisor_id)
    if supervisor is None:
        raise ValidationError(f"Supervisor '{supervisor_id}' not found")
    if not roles.can_act(supervisor.role, roles.roles[0]):
        raise ValidationError(f"User '{supervisor_id}' has no approver role")


async def change_role(
    actor: Actor,
    user_id: str,
    role: str,
    *,
    hierarchy: RoleHierarchy | None = None,
    directory: UserDirectory | None = None,
) -> UserProfile:
    """Assign ``role`` to a user. Actors cannot grant or revoke above their own level."""
    roles = hierarchy or get_role_hierarchy()
    users = directory or get_user_directory()
    profile = await get_user_or_404(user_id, users)
    _check_role_grant(actor, role, profile.role, roles)

    updated = await users.save_user(profile.model_copy(update={"role": role}))
    logger.info("User %s role changed from %s to %s by %s", user_id, profile.role, role, actor.id)
    return updated


async def assign_supervisor(
    actor: Actor,
    user_id: str,
    supervisor_id: str | None,
    *,
    hierarchy: RoleHierarchy | None = None,
    directory: UserDirectory | None = None,
) -> UserProfile:
    """Set or clear a user's supervisor. The supervisor must hold an approver role."""
    roles = hierarchy or get_role_hierarchy()
    users = directory or get_user_directory()
    profile = await get_user_or_404(user_id, users)
    if supervisor_id is not None:
        await _check_supervisor(user_id, supervisor_id, roles, users)

    updated = await users.save_user(profile.model_copy(update={"supervisor_id": supervisor_id}))
    logger.info("User %s supervisor set to %s by %s", user_id, supervisor_id, actor.id)
    return updated


async def upsert_user(
    actor: Actor,
    user_id: str,
    payload: UpsertUserPayload,
    *,
    hierarchy: RoleHierarchy | None = None,
    directory: UserDirectory | None = None,
) -> UserProfile:
    """Create a profile or update an existing one.

    Name and email are always replaced. Role, supervisor and department keep
    their current values when omitted; a new profile defaults to the lowest
    role and starts active.
    """
    roles = hierarchy or get_role_hierarchy()
    users = directory or get_user_directory()
    existing = await users.get_user(user_id)

    if payload.role is not None:
        _check_role_grant(actor, payload.role, existing.role if existing else None, roles)
    if payload.supervisor_id is not None:
        await _check_supervisor(user_id, payload.supervisor_id, roles, users)

    if existing is None:
        profile = UserProfile(
            id=user_id,
            name=payload.name,
            email=payload.email,
            role=payload.role or roles.roles[0],
            department=payload.department,
            supervisor_id=payload.supervisor_id,
        )
        logger.info("User %s created by %s with role %s", user_id, actor.id, profile.role)
    else:
        profile = existing.model_copy(
            update={
                "name": payload.name,
                "email": payload.email,
                "role": payload.role or existing.role,
                "department": payload.department if payload.department is not None else existing.department,
                "supervisor_id": payload.supervisor_id if payload.supervisor_id is not None else existing.supervisor_id,
            }
        )
        logger.info("User %s updated by %s", user_id, actor.id)
    return await users.save_user(profile)
