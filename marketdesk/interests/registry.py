"""Kind-to-table registry.

Every read and write path looks up its tables here, so the three storage
layouts are declared exactly once.  Machinery requests join their messages
on ``request_id``; both project interest kinds use ``interest_id``.
"""

from __future__ import annotations

from marketdesk.errors import InvalidKind
from marketdesk.interests.models import InterestKind, ThreadMapping

_MAPPINGS: dict[InterestKind, ThreadMapping] = {
    InterestKind.community_project: ThreadMapping(
        primary_table="community_project_interests",
        message_table="community_project_interest_messages",
        foreign_key_column="interest_id",
    ),
    InterestKind.development_project: ThreadMapping(
        primary_table="development_project_interests",
        message_table="development_project_interest_messages",
        foreign_key_column="interest_id",
    ),
    InterestKind.machinery_request: ThreadMapping(
        primary_table="machinery_requests",
        message_table="machinery_request_messages",
        foreign_key_column="request_id",
    ),
}


def coerce_kind(kind: InterestKind | str) -> InterestKind:
    """Return *kind* as an :class:`InterestKind` or raise :class:`InvalidKind`."""
    if isinstance(kind, InterestKind):
        return kind
    try:
        return InterestKind(kind)
    except ValueError:
        raise InvalidKind(f"Unknown interest kind: {kind!r}") from None


def resolve_mapping(kind: InterestKind | str) -> ThreadMapping:
    """Return the tables and join column used by *kind*."""
    resolved = coerce_kind(kind)
    try:
        return _MAPPINGS[resolved]
    except KeyError:  # pragma: no cover - every enum member is mapped
        raise InvalidKind(f"No storage mapping for interest kind: {resolved.value}") from None


def known_kinds() -> list[InterestKind]:
    return list(_MAPPINGS)
