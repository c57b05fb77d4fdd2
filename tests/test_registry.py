"""Tests for the interest kind registry."""

import pytest

from marketdesk.errors import InvalidKind
from marketdesk.interests.models import InterestKind, ThreadMapping
from marketdesk.interests.registry import coerce_kind, known_kinds, resolve_mapping


@pytest.mark.parametrize(
    "kind, expected",
    [
        (
            InterestKind.community_project,
            ThreadMapping(
                "community_project_interests",
                "community_project_interest_messages",
                "interest_id",
            ),
        ),
        (
            InterestKind.development_project,
            ThreadMapping(
                "development_project_interests",
                "development_project_interest_messages",
                "interest_id",
            ),
        ),
        (
            InterestKind.machinery_request,
            ThreadMapping("machinery_requests", "machinery_request_messages", "request_id"),
        ),
    ],
)
def test_resolve_mapping_for_each_kind(kind, expected):
    assert resolve_mapping(kind) == expected


def test_resolve_mapping_accepts_string_values():
    assert resolve_mapping("machinery_request").foreign_key_column == "request_id"


def test_every_kind_is_mapped_to_distinct_tables():
    mappings = [resolve_mapping(k) for k in known_kinds()]
    assert len(mappings) == 3
    assert len({m.primary_table for m in mappings}) == 3
    assert len({m.message_table for m in mappings}) == 3


@pytest.mark.parametrize("bad", ["property_inquiry", "", "MachineryRequest", None, 3])
def test_unknown_kind_is_rejected(bad):
    with pytest.raises(InvalidKind):
        resolve_mapping(bad)


def test_invalid_kind_is_a_value_error():
    with pytest.raises(ValueError):
        coerce_kind("machinery_inquiry")
