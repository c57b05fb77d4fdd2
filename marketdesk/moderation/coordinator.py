"""Suspend and reinstate accounts across the auth and profile subsystems.

A ban lives in two places: the authentication subsystem (which enforces it
at sign-in) and the ``users.banned_until`` profile column (which dashboards
query).  The auth write goes first; if the profile write then fails the
call reports ``partially_applied`` rather than success or failure, and the
auth change is left in place.  :meth:`find_divergent` scans for accounts in
that state.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Iterable, Optional

from marketdesk.errors import StorageError
from marketdesk.gateway.base import BanDuration, StorageGateway
from marketdesk.moderation.models import ModeratedAccount, ModerationOutcome, ModerationResult
from marketdesk.security.audit_log import AuditLogger

logger = logging.getLogger("marketdesk.moderation")

PROFILE_TABLE = "users"

# The profile column has no "indefinite"; a suspension is written as a date
# this far in the future.
INDEFINITE_BAN_YEARS = 100


def profile_ban_expiry(should_ban: bool, now: Optional[datetime] = None) -> Optional[str]:
    """Return the ``banned_until`` value written to the profile for *should_ban*."""
    if not should_ban:
        return None
    now = now or datetime.now(timezone.utc)
    try:
        expiry = now.replace(year=now.year + INDEFINITE_BAN_YEARS)
    except ValueError:
        # 29 February with no leap day in the target year.
        expiry = now.replace(year=now.year + INDEFINITE_BAN_YEARS, day=28)
    return expiry.isoformat()


class AccountModerationCoordinator:
    """Applies ban-state changes to both subsystems and reports divergence."""

    def __init__(
        self,
        gateway: StorageGateway,
        audit: Optional[AuditLogger] = None,
        actor: str = "system",
    ) -> None:
        self._gateway = gateway
        self._audit = audit
        self._actor = actor

    def _record(self, user_id: str, should_ban: bool, result: ModerationResult) -> None:
        if self._audit is None:
            return
        self._audit.log_event(
            self._actor,
            "account.suspend" if should_ban else "account.reinstate",
            "user",
            user_id,
            details={"outcome": result.outcome.value, "message": result.message},
            success=result.success,
        )

    def set_ban_state(self, user_id: str, should_ban: bool) -> ModerationResult:
        """Suspend (``should_ban=True``) or reinstate *user_id*.

        Each call is a complete unit; retrying after any outcome converges
        both subsystems on the requested state.
        """
        if not user_id:
            raise ValueError("user_id must be a non-empty identifier")
        verb = "suspend" if should_ban else "reinstate"

        # Step 1: authentication subsystem.
        duration = BanDuration.INDEFINITE if should_ban else BanDuration.NONE
        try:
            self._gateway.auth_admin_update_ban_state(user_id, duration)
        except StorageError as exc:
            logger.warning("Auth %s failed for user %s: %s", verb, user_id, exc.message)
            result = ModerationResult(
                success=False,
                message=f"Failed to {verb} user: {exc.message}",
                outcome=ModerationOutcome.auth_update_failed,
                user_id=user_id,
                requested_ban=should_ban,
            )
            self._record(user_id, should_ban, result)
            return result

        # Step 2: profile subsystem.
        now = datetime.now(timezone.utc)
        patch = {
            "banned_until": profile_ban_expiry(should_ban, now),
            "updated_at": now.isoformat(),
        }
        try:
            matched = self._gateway.update(PROFILE_TABLE, {"id": user_id}, patch)
            problem = None if matched else "no profile record matched"
        except StorageError as exc:
            problem = exc.message
        if problem is not None:
            logger.error(
                "User %s: auth %s applied but profile update failed: %s",
                user_id,
                verb,
                problem,
            )
            result = ModerationResult(
                success=False,
                message=(
                    f"User was {'suspended' if should_ban else 'reinstated'} at sign-in, "
                    f"but the profile record could not be updated: {problem}"
                ),
                outcome=ModerationOutcome.partially_applied,
                user_id=user_id,
                requested_ban=should_ban,
            )
            self._record(user_id, should_ban, result)
            return result

        logger.info("User %s %s", user_id, "suspended" if should_ban else "reinstated")
        result = ModerationResult(
            success=True,
            message="User suspended successfully." if should_ban else "User reinstated successfully.",
            outcome=ModerationOutcome.applied,
            user_id=user_id,
            requested_ban=should_ban,
        )
        self._record(user_id, should_ban, result)
        return result

    def suspend(self, user_id: str) -> ModerationResult:
        return self.set_ban_state(user_id, True)

    def reinstate(self, user_id: str) -> ModerationResult:
        return self.set_ban_state(user_id, False)

    def inspect_account(self, user_id: str) -> ModeratedAccount:
        """Read both ban representations for *user_id*.

        Raises :class:`StorageError` if either subsystem cannot be read.
        """
        auth_until = self._gateway.auth_admin_get_ban_state(user_id)
        profiles = self._gateway.select(PROFILE_TABLE, {"id": user_id})
        profile_until = profiles[0].get("banned_until") if profiles else None
        return ModeratedAccount(
            user_id=user_id,
            auth_banned_until=auth_until,
            profile_banned_until=profile_until,
        )

    def find_divergent(self, user_ids: Iterable[str]) -> list[ModeratedAccount]:
        """Return the accounts among *user_ids* whose subsystems disagree.

        Accounts that cannot be read are logged and skipped.
        """
        divergent: list[ModeratedAccount] = []
        for user_id in user_ids:
            try:
                account = self.inspect_account(user_id)
            except StorageError as exc:
                logger.warning("Skipping %s during divergence scan: %s", user_id, exc.message)
                continue
            if account.divergent:
                divergent.append(account)
        return divergent
