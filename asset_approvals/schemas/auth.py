from __future__ import annotations

from pydantic import BaseModel


class Actor(BaseModel):
    """The user performing an action, resolved from the user directory at call time."""

    id: str
    name: str
    email: str
    role: str
    department: str | None = None
