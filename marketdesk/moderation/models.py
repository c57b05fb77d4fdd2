"""Data models for account moderation."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from marketdesk.errors import AuthUpdateFailed, PartiallyApplied


class ModerationOutcome(str, Enum):
    """How far a ban-state change got."""

    applied = "applied"
    auth_update_failed = "auth_update_failed"
    partially_applied = "partially_applied"


@dataclass
class ModerationResult:
    """Result of a suspend/reinstate call."""

    success: bool
    message: str
    outcome: ModerationOutcome = ModerationOutcome.applied
    user_id: str = ""
    requested_ban: bool = False

    @property
    def partially_applied(self) -> bool:
        return self.outcome is ModerationOutcome.partially_applied

    def raise_for_outcome(self) -> None:
        """Raise the matching error unless the change fully applied."""
        if self.outcome is ModerationOutcome.auth_update_failed:
            raise AuthUpdateFailed(self.message)
        if self.outcome is ModerationOutcome.partially_applied:
            raise PartiallyApplied(self.message)


def _is_banned(banned_until: Optional[str], now: datetime) -> bool:
    if not banned_until:
        return False
    until = datetime.fromisoformat(banned_until)
    if until.tzinfo is None:
        until = until.replace(tzinfo=timezone.utc)
    return until > now


@dataclass
class ModeratedAccount:
    """Both stored ban representations of one user."""

    user_id: str
    auth_banned_until: Optional[str] = None
    profile_banned_until: Optional[str] = None

    @property
    def auth_banned(self) -> bool:
        return _is_banned(self.auth_banned_until, datetime.now(timezone.utc))

    @property
    def profile_banned(self) -> bool:
        return _is_banned(self.profile_banned_until, datetime.now(timezone.utc))

    @property
    def divergent(self) -> bool:
        """True when the two subsystems disagree on whether the user is banned."""
        return self.auth_banned != self.profile_banned
