"""Staff accounts and their API keys, kept in one JSON document.

``~/.marketdesk/auth/staff.json`` holds::

    {"accounts": {"<user id>": {...}}, "keys": [{...}, ...]}

Only key hashes are written; the raw key is handed back once at creation.
"""

from __future__ import annotations

import hashlib
import json
import secrets
import uuid
from dataclasses import asdict
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Optional

from marketdesk.auth.models import APIKey, Role, User

_KEY_PREFIX = "mkd_"


def _digest(raw_key: str) -> str:
    return hashlib.sha256(raw_key.encode()).hexdigest()


class UserStore:
    """Resolves API keys to the platform staff who hold them."""

    def __init__(self, base_dir: Optional[str | Path] = None) -> None:
        root = Path(base_dir) if base_dir else Path.home() / ".marketdesk" / "auth"
        root.mkdir(parents=True, exist_ok=True)
        self._path = root / "staff.json"

    def _load(self) -> dict:
        empty = {"accounts": {}, "keys": []}
        if not self._path.exists():
            return empty
        try:
            doc = json.loads(self._path.read_text())
        except (json.JSONDecodeError, OSError):
            return empty
        if not isinstance(doc, dict):
            return empty
        doc.setdefault("accounts", {})
        doc.setdefault("keys", [])
        return doc

    def _save(self, doc: dict) -> None:
        self._path.write_text(json.dumps(doc, indent=2, default=str))

    @staticmethod
    def _to_user(record: dict) -> User:
        try:
            role = Role(record.get("role", Role.user.value))
        except ValueError:
            role = Role.user
        return User(
            id=record["id"],
            name=record.get("name", ""),
            email=record.get("email", ""),
            role=role,
            created_at=record.get("created_at", ""),
        )

    # -- accounts ----------------------------------------------------------

    def create_user(self, user: User) -> User:
        doc = self._load()
        if user.id in doc["accounts"]:
            raise ValueError(f"User {user.id} already exists")
        doc["accounts"][user.id] = {**asdict(user), "role": Role(user.role).value}
        self._save(doc)
        return user

    def get_user(self, user_id: str) -> Optional[User]:
        record = self._load()["accounts"].get(user_id)
        return self._to_user(record) if record else None

    def list_users(self) -> list[User]:
        return [self._to_user(r) for r in self._load()["accounts"].values()]

    # -- keys --------------------------------------------------------------

    def create_api_key(self, user_id: str, name: str, expires_in_days: int = 90) -> tuple[APIKey, str]:
        """Issue a key for *user_id*; returns the stored record and the raw key."""
        label = name.strip()
        if not label:
            raise ValueError("API key name must not be empty")
        doc = self._load()
        if user_id not in doc["accounts"]:
            raise ValueError(f"Unknown user {user_id}")

        raw_key = _KEY_PREFIX + secrets.token_urlsafe(32)
        issued = datetime.now(timezone.utc)
        record = APIKey(
            id=uuid.uuid4().hex,
            user_id=user_id,
            name=label,
            key_hash=_digest(raw_key),
            prefix=raw_key[:8],
            created_at=issued.isoformat(),
            expires_at=(issued + timedelta(days=expires_in_days)).isoformat(),
        )
        doc["keys"].append(asdict(record))
        self._save(doc)
        return record, raw_key

    def validate_api_key(self, raw_key: str) -> Optional[User]:
        """Return the owner of *raw_key*; None when it is unknown or expired."""
        wanted = _digest(raw_key)
        now = datetime.now(timezone.utc).isoformat()
        doc = self._load()
        record = next((k for k in doc["keys"] if secrets.compare_digest(k["key_hash"], wanted)), None)
        if record is None or (record.get("expires_at") and record["expires_at"] < now):
            return None
        record["last_used"] = now
        self._save(doc)
        return self.get_user(record["user_id"])
