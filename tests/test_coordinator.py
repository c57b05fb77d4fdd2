"""Tests for suspending and reinstating accounts across both subsystems."""

import logging
from datetime import datetime, timezone

import pytest

from conftest import seed_account
from marketdesk.errors import AuthUpdateFailed, PartiallyApplied
from marketdesk.moderation.coordinator import (
    INDEFINITE_BAN_YEARS,
    AccountModerationCoordinator,
    profile_ban_expiry,
)
from marketdesk.moderation.models import ModeratedAccount, ModerationOutcome
from marketdesk.security.audit_log import AuditLogger


@pytest.fixture()
def coordinator(gateway):
    seed_account(gateway, "user-1")
    return AccountModerationCoordinator(gateway)


def test_ban_then_unban_keeps_both_subsystems_in_agreement(gateway, coordinator):
    banned = coordinator.set_ban_state("user-1", True)
    assert banned.success
    assert banned.outcome is ModerationOutcome.applied
    assert "suspended" in banned.message

    account = coordinator.inspect_account("user-1")
    assert account.auth_banned and account.profile_banned
    assert not account.divergent

    reinstated = coordinator.set_ban_state("user-1", False)
    assert reinstated.success
    assert "reinstated" in reinstated.message

    account = coordinator.inspect_account("user-1")
    assert not account.auth_banned and not account.profile_banned
    assert account.profile_banned_until is None
    assert account.auth_banned_until is None


def test_profile_failure_reports_partially_applied(gateway, coordinator, caplog):
    gateway.fail.add(("update", "users"))

    with caplog.at_level(logging.ERROR, logger="marketdesk.moderation"):
        result = coordinator.set_ban_state("user-1", True)

    assert not result.success
    assert result.outcome is ModerationOutcome.partially_applied
    assert result.partially_applied
    assert "injected update failure on users" in result.message
    assert "user-1" in caplog.text
    with pytest.raises(PartiallyApplied):
        result.raise_for_outcome()

    gateway.fail.clear()
    account = coordinator.inspect_account("user-1")
    assert account.auth_banned
    assert not account.profile_banned
    assert account.divergent
    assert [a.user_id for a in coordinator.find_divergent(["user-1"])] == ["user-1"]


def test_auth_failure_aborts_without_touching_profile(gateway, coordinator):
    gateway.fail.add(("auth_admin_update_ban_state", "auth"))

    result = coordinator.set_ban_state("user-1", True)

    assert not result.success
    assert result.outcome is ModerationOutcome.auth_update_failed
    assert ("update", "users") not in gateway.calls
    with pytest.raises(AuthUpdateFailed):
        result.raise_for_outcome()

    gateway.fail.clear()
    account = coordinator.inspect_account("user-1")
    assert not account.auth_banned and not account.profile_banned


def test_unknown_user_fails_at_auth_step(gateway):
    result = AccountModerationCoordinator(gateway).set_ban_state("nobody", True)
    assert result.outcome is ModerationOutcome.auth_update_failed
    assert "User not found" in result.message


def test_retry_after_partial_failure_converges(gateway, coordinator):
    gateway.fail.add(("update", "users"))
    assert coordinator.set_ban_state("user-1", True).partially_applied

    gateway.fail.clear()
    assert coordinator.set_ban_state("user-1", True).success
    assert coordinator.find_divergent(["user-1"]) == []


def test_repeated_ban_is_near_idempotent(gateway, coordinator):
    first = coordinator.set_ban_state("user-1", True)
    first_until = coordinator.inspect_account("user-1").profile_banned_until
    second = coordinator.set_ban_state("user-1", True)
    account = coordinator.inspect_account("user-1")

    assert first.success and second.success
    assert account.auth_banned and account.profile_banned
    assert datetime.fromisoformat(account.profile_banned_until) >= datetime.fromisoformat(first_until)


def test_interleaved_calls_last_profile_write_wins(gateway, coordinator):
    other = AccountModerationCoordinator(gateway)
    # Suspend reaches step 2 only after a full reinstate has run in between.
    gateway.before_update = lambda table, patch: other.set_ban_state("user-1", False)

    result = coordinator.set_ban_state("user-1", True)

    assert result.success
    account = coordinator.inspect_account("user-1")
    assert account.profile_banned
    assert not account.auth_banned
    assert coordinator.find_divergent(["user-1"]) == [account]


def test_find_divergent_skips_unreadable_accounts(gateway, coordinator):
    seed_account(gateway, "user-2")
    gateway.fail.add(("update", "users"))
    coordinator.set_ban_state("user-2", True)
    gateway.fail.clear()

    divergent = coordinator.find_divergent(["user-1", "user-2", "missing"])
    assert [a.user_id for a in divergent] == ["user-2"]


def test_profile_expiry_is_an_explicit_far_future_date():
    now = datetime(2024, 2, 29, 12, 0, tzinfo=timezone.utc)
    until = datetime.fromisoformat(profile_ban_expiry(True, now))
    assert until.year == 2024 + INDEFINITE_BAN_YEARS
    assert until > now
    assert profile_ban_expiry(False, now) is None


def test_moderated_account_divergence():
    future = "2124-01-01T00:00:00+00:00"
    past = "2000-01-01T00:00:00+00:00"
    assert ModeratedAccount("u", auth_banned_until=future, profile_banned_until=None).divergent
    assert not ModeratedAccount("u", auth_banned_until=future, profile_banned_until=future).divergent
    # An expired ban counts as not banned on either side.
    assert not ModeratedAccount("u", auth_banned_until=past, profile_banned_until=None).divergent


def test_moderation_actions_are_audited(gateway, tmp_path):
    seed_account(gateway, "user-1")
    audit = AuditLogger(tmp_path / "audit")
    coordinator = AccountModerationCoordinator(gateway, audit, actor="mod-1")

    coordinator.set_ban_state("user-1", True)
    gateway.fail.add(("update", "users"))
    coordinator.set_ban_state("user-1", False)

    suspend = audit.get_events(action="account.suspend")
    reinstate = audit.get_events(action="account.reinstate")
    assert [(e.actor, e.resource_id, e.success) for e in suspend] == [("mod-1", "user-1", True)]
    assert reinstate[0].success is False
    assert reinstate[0].details["outcome"] == "partially_applied"


def test_empty_user_id_is_rejected(gateway):
    with pytest.raises(ValueError):
        AccountModerationCoordinator(gateway).set_ban_state("", True)


def test_ban_without_profile_row_is_partially_applied(gateway):
    gateway.register_auth_user("user-9", "nine@example.com")

    result = AccountModerationCoordinator(gateway).set_ban_state("user-9", True)

    assert result.outcome is ModerationOutcome.partially_applied
    assert not result.success
    assert "no profile record matched" in result.message
    account = AccountModerationCoordinator(gateway).inspect_account("user-9")
    assert account.auth_banned and account.divergent
