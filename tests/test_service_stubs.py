"""Tests for the in-memory user directory."""

from __future__ import annotations

from asset_approvals.services.users import (
    DEMO_USERS,
    InMemoryUserDirectory,
    UserDirectory,
    UserProfile,
    seed_demo_users,
)


def _make_user(user_id: str = "u1", role: str = "employee") -> UserProfile:
    return UserProfile(id=user_id, name=f"User {user_id}", email=f"{user_id}@example.com", role=role)


async def test_directory_get_not_found() -> None:
    directory = InMemoryUserDirectory()
    assert await directory.get_user("missing") is None


async def test_directory_seed_and_get() -> None:
    directory = InMemoryUserDirectory()
    directory.seed(_make_user("u1", "admin"))
    profile = await directory.get_user("u1")
    assert profile is not None
    assert profile.role == "admin"
    assert profile.is_active is True


async def test_directory_seed_replaces_existing_profile() -> None:
    directory = InMemoryUserDirectory()
    directory.seed(_make_user("u1", "employee"))
    directory.seed(_make_user("u1", "supervisor"))
    users = await directory.list_users()
    assert [(u.id, u.role) for u in users] == [("u1", "supervisor")]


def test_directory_satisfies_protocol() -> None:
    assert isinstance(InMemoryUserDirectory(), UserDirectory)


def test_profile_to_actor() -> None:
    profile = UserProfile(id="s1", name="Sam", email="sam@example.com", role="supervisor", department="Ops")
    actor = profile.to_actor()
    assert (actor.id, actor.name, actor.email, actor.role, actor.department) == (
        "s1",
        "Sam",
        "sam@example.com",
        "supervisor",
        "Ops",
    )


async def test_seed_demo_users() -> None:
    directory = InMemoryUserDirectory()
    assert seed_demo_users(directory) == len(DEMO_USERS)
    roles = {u.role for u in await directory.list_users()}
    assert roles == {"employee", "supervisor", "admin", "super_admin"}


async def test_seed_demo_users_skips_external_directory() -> None:
    class ExternalDirectory:
        async def get_user(self, user_id: str) -> UserProfile | None:
            return None

        async def list_users(self, role: str | None = None, department: str | None = None) -> list[UserProfile]:
            return []

        async def save_user(self, profile: UserProfile) -> UserProfile:
            return profile

    assert seed_demo_users(ExternalDirectory()) == 0


async def test_directory_filters_by_role_and_department() -> None:
    directory = InMemoryUserDirectory()
    directory.seed(*DEMO_USERS)

    engineering = await directory.list_users(department="Engineering")
    assert {u.id for u in engineering} == {"demo_supervisor", "demo_employee"}
    supervisors = await directory.list_users(role="supervisor", department="Engineering")
    assert [u.id for u in supervisors] == ["demo_supervisor"]
    assert await directory.list_users(role="admin", department="Engineering") == []


async def test_directory_save_user_inserts_and_replaces() -> None:
    directory = InMemoryUserDirectory()
    await directory.save_user(_make_user("u1", "employee"))
    await directory.save_user(_make_user("u1", "admin"))
    profile = await directory.get_user("u1")
    assert profile is not None
    assert profile.role == "admin"
