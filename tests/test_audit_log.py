"""Tests for the JSONL audit trail."""

import json

import pytest

from marketdesk.security.audit_log import AuditLogger


@pytest.fixture()
def audit(tmp_path):
    return AuditLogger(tmp_path / "audit")


def test_log_and_filter_events(audit):
    audit.log_event("mod-1", "interest.reply", "machinery_request", "req-1", {"message_id": "m1"})
    audit.log_event("mod-2", "account.suspend", "user", "user-1", success=False)

    assert len(audit.get_events()) == 2
    [entry] = audit.get_events(actor="mod-2")
    assert entry.action == "account.suspend"
    assert entry.success is False
    assert audit.get_events(resource_id="req-1")[0].details == {"message_id": "m1"}


def test_events_newest_first_and_limited(audit):
    for i in range(5):
        audit.log_event("mod-1", "interest.reply", "community_project", f"cp-{i}")
    events = audit.get_events(limit=3)
    assert [e.resource_id for e in events] == ["cp-4", "cp-3", "cp-2"]


def test_torn_lines_are_skipped(audit, tmp_path):
    audit.log_event("mod-1", "account.reinstate", "user", "user-1")
    [log_file] = (tmp_path / "audit").glob("*.jsonl")
    with log_file.open("a", encoding="utf-8") as fh:
        fh.write('{"id": "broken", "actor"\n')

    assert [e.resource_id for e in audit.get_events()] == ["user-1"]


def test_export_json_and_csv(audit):
    audit.log_event("mod-1", "account.suspend", "user", "user-1", {"outcome": "applied"})

    exported = json.loads(audit.export_events("json"))
    assert exported[0]["details"] == {"outcome": "applied"}

    lines = audit.export_events("csv", action="account.suspend").splitlines()
    assert lines[0] == "id,timestamp,actor,action,resource_type,resource_id,success"
    assert lines[1].endswith(",mod-1,account.suspend,user,user-1,True")


def test_unsupported_export_format(audit):
    with pytest.raises(ValueError):
        audit.export_events("xml")
