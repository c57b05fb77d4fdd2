"""Audit log API router.

Prefix: ``/api/security``
"""

from __future__ import annotations

from dataclasses import asdict
from typing import Optional

from fastapi import APIRouter, Depends, Query

from marketdesk.auth.models import Role, User
from marketdesk.auth.permissions import require_role
from marketdesk.security.audit_log import AuditLogger
from web.backend.app.middleware.auth import get_audit_logger, get_current_user
from web.backend.app.models.api import AuditEntryResponse

router = APIRouter(prefix="/api/security", tags=["security"])


@router.get("/audit", response_model=list[AuditEntryResponse])
def list_audit_events(
    actor: Optional[str] = Query(None),
    action: Optional[str] = Query(None),
    resource_type: Optional[str] = Query(None),
    resource_id: Optional[str] = Query(None),
    limit: int = Query(200, ge=1, le=10000),
    user: User = Depends(get_current_user),
    audit: AuditLogger = Depends(get_audit_logger),
):
    """List moderator actions, newest first."""
    require_role(user, Role.platform_admin)
    events = audit.get_events(
        actor=actor,
        action=action,
        resource_type=resource_type,
        resource_id=resource_id,
        limit=limit,
    )
    return [AuditEntryResponse(**asdict(e)) for e in events]
