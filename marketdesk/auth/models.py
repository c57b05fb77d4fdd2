"""Auth domain models for platform staff accounts and API keys."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum


class Role(str, Enum):
    """Marketplace roles: platform_admin > agent > user."""

    platform_admin = "platform_admin"
    agent = "agent"
    user = "user"

    @property
    def level(self) -> int:
        """Return numeric level for comparison (higher = more privileges)."""
        return {
            Role.platform_admin: 30,
            Role.agent: 20,
            Role.user: 10,
        }[self]


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass
class User:
    """An account that can call the admin surface."""

    id: str
    name: str
    email: str
    role: Role = Role.user
    created_at: str = ""

    def __post_init__(self) -> None:
        if not self.created_at:
            self.created_at = _now()
        if isinstance(self.role, str):
            self.role = Role(self.role)


@dataclass
class APIKey:
    """A hashed API key for programmatic access."""

    id: str
    user_id: str
    name: str
    key_hash: str
    prefix: str  # First 8 chars for display
    created_at: str = ""
    expires_at: str = ""
    last_used: str = ""

    def __post_init__(self) -> None:
        if not self.created_at:
            self.created_at = _now()
