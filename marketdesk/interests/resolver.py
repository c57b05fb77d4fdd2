"""Resolve an interest and its message thread from whichever tables hold it.

The parent record is required; the thread is enrichment.  A failed message
read is logged and yields an empty conversation, while a missing or
ambiguous parent always fails the call.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from marketdesk.errors import IntegrityError, NotFound, StorageError
from marketdesk.gateway.base import StorageGateway
from marketdesk.interests.models import (
    COMMON_COLUMNS,
    Interest,
    InterestKind,
    InterestStatus,
    Message,
    ThreadMapping,
    parse_timestamp,
)
from marketdesk.interests.registry import coerce_kind, resolve_mapping

logger = logging.getLogger("marketdesk.interests")


def interest_from_row(row: dict[str, Any], kind: InterestKind) -> Interest:
    payload = {k: v for k, v in row.items() if k not in COMMON_COLUMNS}
    return Interest(
        id=str(row["id"]),
        kind=kind,
        status=row.get("status") or InterestStatus.new,
        created_at=row.get("created_at") or "",
        updated_at=row.get("updated_at") or "",
        user_id=row.get("user_id"),
        user_name=row.get("user_name"),
        user_email=row.get("user_email"),
        message=row.get("message"),
        payload=payload,
    )


def message_from_row(row: dict[str, Any], mapping: ThreadMapping) -> Message:
    return Message(
        id=str(row["id"]),
        parent_id=str(row[mapping.foreign_key_column]),
        sender_id=row.get("sender_id"),
        sender_role=row.get("sender_role") or "user",
        sender_name=row.get("sender_name") or "",
        content=row.get("content") or "",
        timestamp=row.get("timestamp") or "",
    )


def _thread_key(message: Message) -> tuple:
    # Unparseable timestamps sort after every valid one.
    try:
        return (0, parse_timestamp(message.timestamp))
    except ValueError:
        return (1, message.timestamp)


def sort_thread(messages: list[Message]) -> list[Message]:
    """Order *messages* by timestamp; ties keep their fetched order."""
    return sorted(messages, key=_thread_key)


class ConversationResolver:
    """Reads interests and their threads through a :class:`StorageGateway`."""

    def __init__(self, gateway: StorageGateway) -> None:
        self._gateway = gateway

    def fetch_interest(self, interest_id: str, kind: InterestKind | str) -> Interest:
        """Return the single primary record for *interest_id* without its thread."""
        if not interest_id:
            raise ValueError("interest_id must be a non-empty identifier")
        kind = coerce_kind(kind)
        mapping = resolve_mapping(kind)

        rows = self._gateway.select(mapping.primary_table, {"id": interest_id})
        if not rows:
            raise NotFound(f"No {kind.value} interest with id {interest_id}")
        if len(rows) > 1:
            raise IntegrityError(
                f"{len(rows)} rows in {mapping.primary_table} share id {interest_id}"
            )
        return interest_from_row(rows[0], kind)

    def fetch_conversation(self, interest_id: str, kind: InterestKind | str) -> list[Message]:
        """Return the thread for *interest_id*, oldest first.

        Rows that cannot be read as messages are logged and left out.
        Raises :class:`StorageError` if the message table cannot be read.
        """
        mapping = resolve_mapping(kind)
        rows = self._gateway.select_ordered(
            mapping.message_table,
            {mapping.foreign_key_column: interest_id},
            order_by="timestamp",
        )
        messages = []
        for row in rows:
            try:
                messages.append(message_from_row(row, mapping))
            except (KeyError, ValueError) as exc:
                logger.warning(
                    "Skipping malformed message %s in %s: %r",
                    row.get("id"),
                    mapping.message_table,
                    exc,
                )
        return sort_thread(messages)

    def fetch_interest_with_conversation(
        self, interest_id: str, kind: InterestKind | str
    ) -> Interest:
        """Return the interest with ``conversation`` populated.

        The thread is best-effort: if it cannot be read the interest is
        returned with an empty conversation.
        """
        interest = self.fetch_interest(interest_id, kind)
        try:
            interest.conversation = self.fetch_conversation(interest_id, interest.kind)
        except StorageError as exc:
            logger.warning(
                "Could not load %s conversation for %s: %s",
                interest.kind.value,
                interest_id,
                exc.message,
            )
            interest.conversation = []
        return interest

    def list_interests(
        self,
        kind: InterestKind | str,
        status: Optional[InterestStatus | str] = None,
    ) -> list[Interest]:
        """List interests of *kind*, newest first, optionally filtered by status."""
        kind = coerce_kind(kind)
        mapping = resolve_mapping(kind)
        filters: dict[str, Any] = {}
        if status is not None:
            filters["status"] = InterestStatus(status).value
        rows = self._gateway.select_ordered(
            mapping.primary_table, filters, order_by="created_at", ascending=False
        )
        return [interest_from_row(r, kind) for r in rows]
