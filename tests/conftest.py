from __future__ import annotations

from pathlib import Path
from typing import Any, Callable, Optional

import pytest

from marketdesk.errors import StorageError
from marketdesk.gateway.base import BanDuration
from marketdesk.gateway.local import LocalGateway


class FaultyGateway(LocalGateway):
    """LocalGateway that can fail chosen operations and records every call.

    ``fail`` holds ``(method, table)`` pairs; use ``"auth"`` as the table for
    the auth-admin methods and ``"*"`` to match any table.
    """

    def __init__(self, base_dir: Path) -> None:
        super().__init__(base_dir)
        self.fail: set[tuple[str, str]] = set()
        self.calls: list[tuple[str, str]] = []
        self.before_update: Optional[Callable[[str, dict], None]] = None

    def _check(self, method: str, table: str) -> None:
        self.calls.append((method, table))
        if (method, table) in self.fail or (method, "*") in self.fail:
            raise StorageError(f"injected {method} failure on {table}")

    def select(self, table: str, filters: dict[str, Any]) -> list[dict[str, Any]]:
        self._check("select", table)
        return super().select(table, filters)

    def select_ordered(self, table, filters, order_by, ascending=True):
        self._check("select_ordered", table)
        return super().select_ordered(table, filters, order_by, ascending)

    def insert(self, table: str, row: dict[str, Any]) -> dict[str, Any]:
        self._check("insert", table)
        return super().insert(table, row)

    def update(self, table: str, filters: dict[str, Any], patch: dict[str, Any]) -> int:
        self._check("update", table)
        if self.before_update is not None:
            hook, self.before_update = self.before_update, None
            hook(table, patch)
        return super().update(table, filters, patch)

    def auth_admin_update_ban_state(self, user_id: str, ban_duration: BanDuration) -> None:
        self._check("auth_admin_update_ban_state", "auth")
        super().auth_admin_update_ban_state(user_id, ban_duration)

    def auth_admin_get_ban_state(self, user_id: str) -> Optional[str]:
        self._check("auth_admin_get_ban_state", "auth")
        return super().auth_admin_get_ban_state(user_id)


@pytest.fixture()
def gateway(tmp_path: Path) -> FaultyGateway:
    return FaultyGateway(tmp_path / "data")


def seed_interest(gw: LocalGateway, table: str, interest_id: str, **fields: Any) -> dict:
    row = {
        "id": interest_id,
        "status": "new",
        "created_at": "2024-05-01T09:00:00+00:00",
        "updated_at": "2024-05-01T09:00:00+00:00",
        "user_id": "applicant-1",
        "user_name": "Ada Obi",
        "user_email": "ada@example.com",
        "message": "I would like more details.",
    }
    row.update(fields)
    return gw.insert(table, row)


def seed_message(gw: LocalGateway, table: str, fk: str, parent_id: str, timestamp: str, content: str, **fields: Any) -> dict:
    row = {
        fk: parent_id,
        "sender_id": "applicant-1",
        "sender_role": "user",
        "sender_name": "Ada Obi",
        "content": content,
        "timestamp": timestamp,
    }
    row.update(fields)
    return gw.insert(table, row)


def seed_account(gw: LocalGateway, user_id: str, email: str = "user@example.com") -> None:
    gw.insert(
        "users",
        {"id": user_id, "name": "Test User", "email": email, "role": "user", "banned_until": None},
    )
    gw.register_auth_user(user_id, email)
