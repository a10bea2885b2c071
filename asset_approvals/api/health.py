import logging
from typing import Literal

from fastapi import APIRouter
from pydantic import BaseModel
from sqlalchemy import text

from asset_approvals.api.deps import RolesDep
from asset_approvals.config import get_settings
from asset_approvals.db import SessionDep

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


class HealthResponse(BaseModel):
    """Service liveness, database reachability and the active role hierarchy."""

    status: Literal["ok", "degraded"]
    version: str
    environment: str
    database: Literal["ok", "unreachable"]
    roles: list[str]


@router.get("/health", response_model=HealthResponse)
async def health(session: SessionDep, roles: RolesDep) -> HealthResponse:
    """Unauthenticated liveness check. A database failure degrades the status instead of failing the call."""
    settings = get_settings()
    database: Literal["ok", "unreachable"] = "ok"
    try:
        await session.execute(text("SELECT 1"))
    except Exception:
        logger.exception("Health check: database connectivity failed")
        database = "unreachable"

    return HealthResponse(
        status="ok" if database == "ok" else "degraded",
        version=settings.app_version,
        environment=settings.environment,
        database=database,
        roles=list(roles.roles),
    )
