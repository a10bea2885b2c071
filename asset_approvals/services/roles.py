"""Role hierarchy: the single authorization primitive for approval steps.

Roles form a strict total order. A role may act on a step whose nominal role
it equals or outranks. Unless configured otherwise, the lowest role can never
act, even on steps that name it.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from asset_approvals.config import get_settings

if TYPE_CHECKING:
    from collections.abc import Sequence


class RoleHierarchy:
    """Ordered set of roles with integer levels (index in the list)."""

    def __init__(self, roles: Sequence[str], *, lowest_role_can_approve: bool = False) -> None:
        if not roles:
            msg = "role hierarchy needs at least one role"
            raise ValueError(msg)
        if len(set(roles)) != len(roles):
            msg = "role hierarchy contains duplicate roles"
            raise ValueError(msg)
        self._levels = {role: index for index, role in enumerate(roles)}
        self._roles = tuple(roles)
        self.lowest_role_can_approve = lowest_role_can_approve

    @property
    def roles(self) -> tuple[str, ...]:
        return self._roles

    @property
    def lowest_level(self) -> int:
        return 0

    def is_known(self, role: str) -> bool:
        return role in self._levels

    def level(self, role: str | None) -> int:
        """Level of a role; unknown roles sit at the lowest level."""
        if role is None:
            return self.lowest_level
        return self._levels.get(role, self.lowest_level)

    def can_act(self, actor_role: str, required_role: str | None) -> bool:
        """Whether ``actor_role`` may approve or deny a step requiring ``required_role``."""
        actor_level = self.level(actor_role)
        if not self.lowest_role_can_approve and actor_level <= self.lowest_level:
            return False
        return actor_level >= self.level(required_role)

    def roles_at_or_above(self, role: str) -> list[str]:
        """Every known role that may act on a step requiring ``role``."""
        return [r for r in self._roles if self.can_act(r, role)]

    def __repr__(self) -> str:
        return f"RoleHierarchy({list(self._roles)!r}, lowest_role_can_approve={self.lowest_role_can_approve})"


_role_hierarchy: RoleHierarchy | None = None


def get_role_hierarchy() -> RoleHierarchy:
    """Return the configured hierarchy, building it from settings on first call."""
    global _role_hierarchy
    if _role_hierarchy is None:
        settings = get_settings()
        _role_hierarchy = RoleHierarchy(settings.roles, lowest_role_can_approve=settings.lowest_role_can_approve)
    return _role_hierarchy


def set_role_hierarchy(hierarchy: RoleHierarchy | None) -> None:
    """Override the hierarchy (for testing or alternative role sets). ``None`` resets to settings."""
    global _role_hierarchy
    _role_hierarchy = hierarchy
