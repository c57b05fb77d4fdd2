"""Moderation router -- suspend, reinstate and inspect user accounts.

Prefix: ``/api/moderation``
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Response, status

from marketdesk.auth.models import Role, User
from marketdesk.auth.permissions import require_role
from marketdesk.errors import MarketdeskError
from marketdesk.gateway.base import StorageGateway
from marketdesk.moderation.coordinator import AccountModerationCoordinator
from marketdesk.moderation.models import ModerationOutcome, ModerationResult
from marketdesk.security.audit_log import AuditLogger
from web.backend.app.middleware.auth import get_audit_logger, get_current_user, get_gateway
from web.backend.app.middleware.errors import to_http_exception
from web.backend.app.models.api import AccountStateResponse, ModerationResponse

router = APIRouter(prefix="/api/moderation", tags=["moderation"])

_STATUS_BY_OUTCOME = {
    ModerationOutcome.applied: status.HTTP_200_OK,
    ModerationOutcome.partially_applied: status.HTTP_207_MULTI_STATUS,
    ModerationOutcome.auth_update_failed: status.HTTP_502_BAD_GATEWAY,
}


def _moderation_response(result: ModerationResult, response: Response) -> ModerationResponse:
    response.status_code = _STATUS_BY_OUTCOME[result.outcome]
    return ModerationResponse(
        success=result.success,
        outcome=result.outcome.value,
        message=result.message,
        user_id=result.user_id,
        warning=result.partially_applied,
    )


def _set_ban(
    user_id: str,
    should_ban: bool,
    user: User,
    gateway: StorageGateway,
    audit: AuditLogger,
    response: Response,
) -> ModerationResponse:
    require_role(user, Role.platform_admin)
    coordinator = AccountModerationCoordinator(gateway, audit, actor=user.id)
    return _moderation_response(coordinator.set_ban_state(user_id, should_ban), response)


@router.post("/users/{user_id}/suspend", response_model=ModerationResponse)
def suspend_user(
    user_id: str,
    response: Response,
    user: User = Depends(get_current_user),
    gateway: StorageGateway = Depends(get_gateway),
    audit: AuditLogger = Depends(get_audit_logger),
):
    """Suspend a user indefinitely in both the auth and profile stores."""
    return _set_ban(user_id, True, user, gateway, audit, response)


@router.post("/users/{user_id}/reinstate", response_model=ModerationResponse)
def reinstate_user(
    user_id: str,
    response: Response,
    user: User = Depends(get_current_user),
    gateway: StorageGateway = Depends(get_gateway),
    audit: AuditLogger = Depends(get_audit_logger),
):
    """Lift a suspension in both the auth and profile stores."""
    return _set_ban(user_id, False, user, gateway, audit, response)


@router.get("/users/{user_id}", response_model=AccountStateResponse)
def get_account_state(
    user_id: str,
    user: User = Depends(get_current_user),
    gateway: StorageGateway = Depends(get_gateway),
):
    """Return both ban records for a user and whether they disagree."""
    require_role(user, Role.platform_admin)
    try:
        account = AccountModerationCoordinator(gateway).inspect_account(user_id)
    except MarketdeskError as exc:
        raise to_http_exception(exc) from exc
    return AccountStateResponse(
        user_id=account.user_id,
        auth_banned_until=account.auth_banned_until,
        profile_banned_until=account.profile_banned_until,
        auth_banned=account.auth_banned,
        profile_banned=account.profile_banned,
        divergent=account.divergent,
    )
