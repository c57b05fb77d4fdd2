"""Interests router -- list interests, read threads, post moderator replies."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from marketdesk.auth.models import Role, User
from marketdesk.auth.permissions import as_moderator, require_role
from marketdesk.errors import MarketdeskError
from marketdesk.gateway.base import StorageGateway
from marketdesk.interests.models import Interest, InterestStatus, Message
from marketdesk.interests.registry import coerce_kind, resolve_mapping
from marketdesk.interests.replies import ReplyAppender
from marketdesk.interests.resolver import ConversationResolver
from marketdesk.security.audit_log import AuditLogger
from web.backend.app.middleware.auth import get_audit_logger, get_current_user, get_gateway
from web.backend.app.middleware.errors import to_http_exception
from web.backend.app.models.api import (
    InterestResponse,
    MessageResponse,
    ReplyRequest,
    ReplyResponse,
)

router = APIRouter(prefix="/api/interests", tags=["interests"])


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _message_response(m: Message, foreign_key_column: str) -> MessageResponse:
    return MessageResponse(
        id=m.id,
        parent_id=m.parent_id,
        foreign_key_column=foreign_key_column,
        sender_id=m.sender_id,
        sender_role=m.sender_role.value,
        sender_name=m.sender_name,
        content=m.content,
        timestamp=m.timestamp,
    )


def _interest_response(i: Interest) -> InterestResponse:
    fk = resolve_mapping(i.kind).foreign_key_column
    return InterestResponse(
        id=i.id,
        kind=i.kind.value,
        status=i.status.value,
        created_at=i.created_at,
        updated_at=i.updated_at,
        user_id=i.user_id,
        user_name=i.user_name,
        user_email=i.user_email,
        message=i.message,
        payload=i.payload,
        conversation=[_message_response(m, fk) for m in i.conversation],
    )


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------


@router.get("/{kind}", response_model=list[InterestResponse])
def list_interests(
    kind: str,
    status_filter: Optional[InterestStatus] = Query(None, alias="status"),
    user: User = Depends(get_current_user),
    gateway: StorageGateway = Depends(get_gateway),
):
    """List interests of one kind, newest first."""
    require_role(user, Role.platform_admin)
    try:
        found = ConversationResolver(gateway).list_interests(kind, status_filter)
    except MarketdeskError as exc:
        raise to_http_exception(exc) from exc
    return [_interest_response(i) for i in found]


@router.get("/{kind}/{interest_id}", response_model=InterestResponse)
def get_interest(
    kind: str,
    interest_id: str,
    user: User = Depends(get_current_user),
    gateway: StorageGateway = Depends(get_gateway),
):
    """Return an interest with its conversation, oldest message first."""
    require_role(user, Role.platform_admin)
    try:
        interest = ConversationResolver(gateway).fetch_interest_with_conversation(interest_id, kind)
    except MarketdeskError as exc:
        raise to_http_exception(exc) from exc
    return _interest_response(interest)


@router.post(
    "/{kind}/{interest_id}/replies",
    response_model=ReplyResponse,
    status_code=status.HTTP_201_CREATED,
)
def post_reply(
    kind: str,
    interest_id: str,
    body: ReplyRequest,
    user: User = Depends(get_current_user),
    gateway: StorageGateway = Depends(get_gateway),
    audit: AuditLogger = Depends(get_audit_logger),
):
    """Post a moderator reply and mark the interest as contacted."""
    moderator = as_moderator(user)
    try:
        result = ReplyAppender(gateway, audit).add_reply(interest_id, kind, moderator, body.text)
    except MarketdeskError as exc:
        raise to_http_exception(exc) from exc
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc)) from exc

    fk = resolve_mapping(coerce_kind(kind)).foreign_key_column
    return ReplyResponse(
        message=result.summary,
        status_updated=result.status_updated,
        data=_message_response(result.message, fk),
    )
