from __future__ import annotations

from typing import TYPE_CHECKING, Any

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from asset_approvals.db import build_engine, create_schema, get_session
from asset_approvals.main import app
from asset_approvals.models import AssetType
from asset_approvals.services.notifications import InMemoryNotifier, set_notifier, wait_for_pending_notifications
from asset_approvals.services.roles import set_role_hierarchy
from asset_approvals.services.users import InMemoryUserDirectory, UserProfile, set_user_directory

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Awaitable, Callable, Iterator

    from sqlalchemy.ext.asyncio import AsyncEngine

TEST_USERS = [
    UserProfile(id="emp1", name="Erin Employee", email="erin@example.com", role="employee", department="Ops"),
    UserProfile(id="emp2", name="Eli Employee", email="eli@example.com", role="employee", department="Ops"),
    UserProfile(id="sup1", name="Sam Supervisor", email="sam@example.com", role="supervisor"),
    UserProfile(id="sup2", name="Sky Supervisor", email="sky@example.com", role="supervisor"),
    UserProfile(id="adm1", name="Ada Admin", email="ada@example.com", role="admin"),
    UserProfile(id="root", name="Rae Root", email="rae@example.com", role="super_admin"),
    UserProfile(id="gone", name="Gus Gone", email="gus@example.com", role="admin", is_active=False),
]


@pytest.fixture
async def engine() -> AsyncIterator[AsyncEngine]:
    """A fresh in-memory SQLite database per test.

    Services commit and roll back on their own, so each test gets its own
    database rather than an outer transaction to roll back.
    """
    _engine = build_engine("sqlite+aiosqlite://")
    await create_schema(_engine)
    yield _engine
    await _engine.dispose()


@pytest.fixture
async def db_session(engine: AsyncEngine) -> AsyncIterator[AsyncSession]:
    async with AsyncSession(engine, expire_on_commit=False) as session:
        yield session
        await wait_for_pending_notifications()


@pytest.fixture
async def async_client(db_session: AsyncSession) -> AsyncIterator[AsyncClient]:
    """Async HTTP client with the database session dependency overridden."""

    async def _override_get_session() -> AsyncIterator[AsyncSession]:
        yield db_session

    app.dependency_overrides[get_session] = _override_get_session
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()


@pytest.fixture(autouse=True)
def directory() -> Iterator[InMemoryUserDirectory]:
    """Seed the in-memory user directory for every test."""
    users = InMemoryUserDirectory()
    users.seed(*TEST_USERS)
    set_user_directory(users)
    yield users
    set_user_directory(InMemoryUserDirectory())


@pytest.fixture(autouse=True)
def notifier() -> Iterator[InMemoryNotifier]:
    """Record notifications instead of sending them."""
    recorder = InMemoryNotifier()
    set_notifier(recorder)
    yield recorder
    set_notifier(None)


@pytest.fixture(autouse=True)
def _reset_role_hierarchy() -> Iterator[None]:
    set_role_hierarchy(None)
    yield
    set_role_hierarchy(None)


@pytest.fixture
def make_asset_type(db_session: AsyncSession) -> Callable[..., Awaitable[AssetType]]:
    """Factory that inserts an asset type directly and returns the model."""

    async def _make(
        approval_levels: list[str] | None = None,
        *,
        name: str = "Gate Pass",
        fields: list[dict[str, Any]] | None = None,
        requires_approval: bool = True,
        is_active: bool = True,
    ) -> AssetType:
        asset_type = AssetType(
            name=name,
            description=f"{name} for tests",
            fields=fields or [],
            requires_approval=requires_approval,
            approval_levels=["supervisor"] if approval_levels is None else approval_levels,
            is_active=is_active,
        )
        db_session.add(asset_type)
        await db_session.commit()
        await db_session.refresh(asset_type)
        return asset_type

    return _make
