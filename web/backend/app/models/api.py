"""Pydantic models for API request/response serialization.

These mirror the marketdesk dataclasses for the FastAPI endpoints.
"""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Interest models
# ---------------------------------------------------------------------------


class MessageResponse(BaseModel):
    """Mirrors marketdesk.interests.models.Message."""

    id: str
    parent_id: str
    foreign_key_column: str
    sender_id: Optional[str] = None
    sender_role: str
    sender_name: str
    content: str
    timestamp: str


class InterestResponse(BaseModel):
    """Mirrors marketdesk.interests.models.Interest."""

    id: str
    kind: str
    status: str
    created_at: str = ""
    updated_at: str = ""
    user_id: Optional[str] = None
    user_name: Optional[str] = None
    user_email: Optional[str] = None
    message: Optional[str] = None
    payload: dict[str, Any] = Field(default_factory=dict)
    conversation: list[MessageResponse] = Field(default_factory=list)


class ReplyRequest(BaseModel):
    text: str = Field(..., min_length=1)


class ReplyResponse(BaseModel):
    success: bool = True
    message: str
    status_updated: bool
    data: MessageResponse


# ---------------------------------------------------------------------------
# Moderation models
# ---------------------------------------------------------------------------


class ModerationResponse(BaseModel):
    """Mirrors marketdesk.moderation.models.ModerationResult."""

    success: bool
    outcome: str
    message: str
    user_id: str
    warning: bool = False


class AccountStateResponse(BaseModel):
    """Mirrors marketdesk.moderation.models.ModeratedAccount."""

    user_id: str
    auth_banned_until: Optional[str] = None
    profile_banned_until: Optional[str] = None
    auth_banned: bool
    profile_banned: bool
    divergent: bool


# ---------------------------------------------------------------------------
# Audit models
# ---------------------------------------------------------------------------


class AuditEntryResponse(BaseModel):
    """Mirrors marketdesk.security.audit_log.AuditEntry."""

    id: str
    timestamp: str
    actor: str
    action: str
    resource_type: str
    resource_id: str
    details: dict[str, Any] = Field(default_factory=dict)
    success: bool = True
