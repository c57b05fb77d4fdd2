"""Data models for interests and their message threads."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any


class InterestKind(str, Enum):
    """The three kinds of interest, each stored in its own tables."""

    community_project = "community_project"
    development_project = "development_project"
    machinery_request = "machinery_request"


class InterestStatus(str, Enum):
    """Lifecycle of an interest: new > contacted > resolved | archived."""

    new = "new"
    contacted = "contacted"
    resolved = "resolved"
    archived = "archived"


class SenderRole(str, Enum):
    """Who authored a thread message."""

    user = "user"
    agent = "agent"
    platform_admin = "platform_admin"


@dataclass(frozen=True)
class ThreadMapping:
    """Where an interest kind keeps its records and messages."""

    primary_table: str
    message_table: str
    foreign_key_column: str


@dataclass
class Message:
    """A single message in an interest thread."""

    id: str
    parent_id: str
    sender_name: str
    content: str
    sender_role: SenderRole = SenderRole.user
    sender_id: str | None = None
    timestamp: str = ""

    def __post_init__(self) -> None:
        if not self.timestamp:
            self.timestamp = datetime.now(timezone.utc).isoformat()
        if isinstance(self.sender_role, str):
            self.sender_role = SenderRole(self.sender_role)


@dataclass
class Moderator:
    """The platform admin authoring a reply or moderation action."""

    id: str
    name: str


# Columns every interest table carries; the rest land in ``Interest.payload``.
COMMON_COLUMNS = (
    "id",
    "status",
    "created_at",
    "updated_at",
    "user_id",
    "user_name",
    "user_email",
    "message",
)


@dataclass
class Interest:
    """An applicant's interest in a project or machinery item."""

    id: str
    kind: InterestKind
    status: InterestStatus = InterestStatus.new
    created_at: str = ""
    updated_at: str = ""
    user_id: str | None = None
    user_name: str | None = None
    user_email: str | None = None
    message: str | None = None
    payload: dict[str, Any] = field(default_factory=dict)
    conversation: list[Message] = field(default_factory=list)

    def __post_init__(self) -> None:
        if isinstance(self.kind, str):
            self.kind = InterestKind(self.kind)
        if isinstance(self.status, str):
            self.status = InterestStatus(self.status)


def parse_timestamp(value: str) -> datetime:
    """Parse an ISO-8601 timestamp, treating naive values as UTC."""
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed
