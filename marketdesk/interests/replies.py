"""Append moderator replies to interest threads."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

from marketdesk.errors import InsertFailed, StorageError, UpdateFailed
from marketdesk.gateway.base import StorageGateway
from marketdesk.interests.models import (
    InterestKind,
    InterestStatus,
    Message,
    Moderator,
    SenderRole,
    parse_timestamp,
)
from marketdesk.interests.registry import coerce_kind, resolve_mapping
from marketdesk.interests.resolver import ConversationResolver, message_from_row
from marketdesk.security.audit_log import AuditLogger

logger = logging.getLogger("marketdesk.interests")

# Every moderator reply moves the interest here, whatever its current status.
ACKNOWLEDGED_STATUS = InterestStatus.contacted


@dataclass
class ReplyResult:
    """Outcome of :meth:`ReplyAppender.add_reply`."""

    message: Message
    status_updated: bool = True
    status_error: Optional[UpdateFailed] = None

    @property
    def summary(self) -> str:
        if self.status_updated:
            return "Reply sent successfully."
        return "Reply sent, but the interest status could not be updated."


class ReplyAppender:
    """Inserts a moderator message and then bumps the interest status.

    The message insert is the operation of record.  The status bump is a
    follow-up write: if it fails the reply still stands and the failure is
    only logged.
    """

    def __init__(self, gateway: StorageGateway, audit: Optional[AuditLogger] = None) -> None:
        self._gateway = gateway
        self._resolver = ConversationResolver(gateway)
        self._audit = audit

    def _reply_timestamp(self, interest_id: str, kind: InterestKind) -> str:
        now = datetime.now(timezone.utc)
        try:
            thread = self._resolver.fetch_conversation(interest_id, kind)
        except StorageError as exc:
            logger.warning("Could not read thread %s before replying: %s", interest_id, exc.message)
            return now.isoformat()
        for message in thread:
            try:
                stamp = parse_timestamp(message.timestamp)
            except ValueError:
                continue
            if stamp >= now:
                # The applicant side's clock is ahead of ours.
                now = stamp + timedelta(microseconds=1)
        return now.isoformat()

    def add_reply(
        self,
        interest_id: str,
        kind: InterestKind | str,
        moderator: Moderator,
        text: str,
    ) -> ReplyResult:
        """Post *text* from *moderator* to the thread of *interest_id*.

        Raises :class:`NotFound` when the interest does not exist, so no
        message is ever stored without its parent.  Raises
        :class:`InsertFailed` if the message cannot be stored, in which case
        no status change is attempted.
        """
        if not interest_id:
            raise ValueError("interest_id must be a non-empty identifier")
        if not text or not text.strip():
            raise ValueError("Reply text must not be empty")
        if not moderator.id or not moderator.name:
            raise ValueError("Moderator must have an id and a display name")

        kind = coerce_kind(kind)
        mapping = resolve_mapping(kind)
        self._resolver.fetch_interest(interest_id, kind)

        row = {
            mapping.foreign_key_column: interest_id,
            "sender_id": moderator.id,
            "sender_role": SenderRole.platform_admin.value,
            "sender_name": moderator.name,
            "content": text,
            "timestamp": self._reply_timestamp(interest_id, kind),
        }
        try:
            saved = self._gateway.insert(mapping.message_table, row)
        except StorageError as exc:
            if self._audit is not None:
                self._audit.log_event(
                    moderator.id, "interest.reply", kind.value, interest_id,
                    details={"error": exc.message}, success=False,
                )
            raise InsertFailed(f"Failed to send reply: {exc.message}") from exc

        message = message_from_row({**row, **saved}, mapping)

        try:
            matched = self._gateway.update(
                mapping.primary_table,
                {"id": interest_id},
                {
                    "status": ACKNOWLEDGED_STATUS.value,
                    "updated_at": datetime.now(timezone.utc).isoformat(),
                },
            )
            problem = None if matched else "no interest record matched"
        except StorageError as exc:
            problem = exc.message
        status_error = None
        if problem is not None:
            status_error = UpdateFailed(f"Failed to update interest status: {problem}")
            logger.warning(
                "Reply %s stored but status update on %s %s failed: %s",
                message.id,
                kind.value,
                interest_id,
                problem,
            )

        if self._audit is not None:
            self._audit.log_event(
                moderator.id, "interest.reply", kind.value, interest_id,
                details={"message_id": message.id, "status_updated": status_error is None},
            )
        return ReplyResult(message=message, status_updated=status_error is None, status_error=status_error)
