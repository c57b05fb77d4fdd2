"""File-based JSON storage gateway.

Provides the same contract as the hosted store, backed by simple JSON files
under ``~/.marketdesk/data/``:
- ``<table>.json`` -- list of row dicts, one file per table
- ``auth_users.json`` -- authentication-side ban state per user id
"""

from __future__ import annotations

import json
import uuid
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any, Optional

from marketdesk.errors import StorageError
from marketdesk.gateway.base import BanDuration, StorageGateway

_AUTH_TABLE = "auth_users"


class LocalGateway(StorageGateway):
    """JSON-file implementation of :class:`StorageGateway`."""

    def __init__(self, base_dir: Optional[str | Path] = None) -> None:
        if base_dir is None:
            self._base = Path.home() / ".marketdesk" / "data"
        else:
            self._base = Path(base_dir)
        self._base.mkdir(parents=True, exist_ok=True)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _path(self, table: str) -> Path:
        if not table or "/" in table or table.startswith("."):
            raise StorageError(f"Invalid table name: {table!r}")
        return self._base / f"{table}.json"

    def _read_json(self, path: Path) -> list[dict]:
        if not path.exists():
            return []
        try:
            data = json.loads(path.read_text())
        except (json.JSONDecodeError, OSError) as exc:
            raise StorageError(f"Could not read {path.name}: {exc}") from exc
        return data if isinstance(data, list) else []

    def _write_json(self, path: Path, data: list[dict]) -> None:
        try:
            path.write_text(json.dumps(data, indent=2, default=str))
        except OSError as exc:
            raise StorageError(f"Could not write {path.name}: {exc}") from exc

    @staticmethod
    def _matches(row: dict, filters: dict[str, Any]) -> bool:
        return all(row.get(column) == value for column, value in filters.items())

    @staticmethod
    def _now() -> str:
        return datetime.now(timezone.utc).isoformat()

    # ------------------------------------------------------------------
    # Table access
    # ------------------------------------------------------------------

    def select(self, table: str, filters: dict[str, Any]) -> list[dict[str, Any]]:
        return [r for r in self._read_json(self._path(table)) if self._matches(r, filters)]

    def select_ordered(
        self,
        table: str,
        filters: dict[str, Any],
        order_by: str,
        ascending: bool = True,
    ) -> list[dict[str, Any]]:
        rows = self.select(table, filters)
        rows.sort(key=lambda r: (r.get(order_by) is None, r.get(order_by) or ""), reverse=not ascending)
        return rows

    def insert(self, table: str, row: dict[str, Any]) -> dict[str, Any]:
        path = self._path(table)
        rows = self._read_json(path)
        stored = dict(row)
        stored.setdefault("id", str(uuid.uuid4()))
        if table.endswith("_messages"):
            stored.setdefault("timestamp", self._now())
        else:
            stored.setdefault("created_at", self._now())
            stored.setdefault("updated_at", stored["created_at"])
        if any(r.get("id") == stored["id"] for r in rows):
            raise StorageError(f"duplicate key value violates unique constraint \"{table}_pkey\"")
        rows.append(stored)
        self._write_json(path, rows)
        return stored

    def update(self, table: str, filters: dict[str, Any], patch: dict[str, Any]) -> int:
        path = self._path(table)
        rows = self._read_json(path)
        matched = 0
        for r in rows:
            if self._matches(r, filters):
                r.update(patch)
                matched += 1
        if matched:
            self._write_json(path, rows)
        return matched

    # ------------------------------------------------------------------
    # Authentication admin
    # ------------------------------------------------------------------

    def auth_admin_update_ban_state(self, user_id: str, ban_duration: BanDuration) -> None:
        path = self._path(_AUTH_TABLE)
        users = self._read_json(path)
        entry = next((u for u in users if u.get("id") == user_id), None)
        if entry is None:
            raise StorageError("User not found")
        if BanDuration(ban_duration) is BanDuration.NONE:
            entry["banned_until"] = None
        else:
            hours = int(BanDuration(ban_duration).value.rstrip("h"))
            entry["banned_until"] = (datetime.now(timezone.utc) + timedelta(hours=hours)).isoformat()
        self._write_json(path, users)

    def auth_admin_get_ban_state(self, user_id: str) -> Optional[str]:
        for u in self._read_json(self._path(_AUTH_TABLE)):
            if u.get("id") == user_id:
                return u.get("banned_until")
        raise StorageError("User not found")

    def register_auth_user(self, user_id: str, email: str = "") -> None:
        """Create an authentication-side record for *user_id* if missing."""
        path = self._path(_AUTH_TABLE)
        users = self._read_json(path)
        if any(u.get("id") == user_id for u in users):
            return
        users.append({"id": user_id, "email": email, "banned_until": None})
        self._write_json(path, users)
