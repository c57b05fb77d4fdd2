"""Audit trail for moderator actions.

Every reply and ban change is appended as one JSON line to a daily file
under ``~/.marketdesk/audit_logs/``, so the trail survives independently of
the hosted store.
"""

from __future__ import annotations

import csv
import io
import json
import uuid
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional

_CSV_COLUMNS = ["id", "timestamp", "actor", "action", "resource_type", "resource_id", "success"]


@dataclass
class AuditEntry:
    """One recorded moderator action."""

    id: str
    timestamp: str
    actor: str
    action: str  # "interest.reply" | "account.suspend" | "account.reinstate"
    resource_type: str
    resource_id: str
    details: dict[str, Any] = field(default_factory=dict)
    success: bool = True


class AuditLogger:
    """Append-only JSONL audit log with simple filtering and export."""

    def __init__(self, base_dir: Optional[str | Path] = None) -> None:
        self._base_dir = Path(base_dir) if base_dir else Path.home() / ".marketdesk" / "audit_logs"
        self._base_dir.mkdir(parents=True, exist_ok=True)

    def _current_log_file(self) -> Path:
        return self._base_dir / f"{datetime.now(timezone.utc):%Y-%m-%d}.jsonl"

    def _read_all_entries(self) -> list[AuditEntry]:
        entries: list[AuditEntry] = []
        for path in sorted(self._base_dir.glob("*.jsonl")):
            for line in path.read_text(encoding="utf-8").splitlines():
                if not line.strip():
                    continue
                try:
                    entries.append(AuditEntry(**json.loads(line)))
                except (json.JSONDecodeError, TypeError):
                    # A torn trailing line from an interrupted write.
                    continue
        return entries

    def log_event(
        self,
        actor: str,
        action: str,
        resource_type: str,
        resource_id: str,
        details: Optional[dict[str, Any]] = None,
        success: bool = True,
    ) -> AuditEntry:
        """Append an event and return it."""
        entry = AuditEntry(
            id=uuid.uuid4().hex[:16],
            timestamp=datetime.now(timezone.utc).isoformat(),
            actor=actor,
            action=action,
            resource_type=resource_type,
            resource_id=resource_id,
            details=details or {},
            success=success,
        )
        with self._current_log_file().open("a", encoding="utf-8") as fh:
            fh.write(json.dumps(asdict(entry), default=str) + "\n")
        return entry

    def get_events(
        self,
        *,
        actor: Optional[str] = None,
        action: Optional[str] = None,
        resource_type: Optional[str] = None,
        resource_id: Optional[str] = None,
        limit: int = 200,
    ) -> list[AuditEntry]:
        """Return matching events, newest first."""
        entries = [
            e
            for e in self._read_all_entries()
            if (actor is None or e.actor == actor)
            and (action is None or e.action == action)
            and (resource_type is None or e.resource_type == resource_type)
            and (resource_id is None or e.resource_id == resource_id)
        ]
        # Reverse first so entries sharing a timestamp stay latest-written first.
        entries.reverse()
        entries.sort(key=lambda e: e.timestamp, reverse=True)
        return entries[:limit]

    def export_events(self, fmt: str = "json", **filters: Any) -> str:
        """Export matching events as ``json`` or ``csv`` text."""
        entries = self.get_events(**filters)
        if fmt == "csv":
            buf = io.StringIO()
            writer = csv.DictWriter(buf, fieldnames=_CSV_COLUMNS, extrasaction="ignore", lineterminator="\n")
            writer.writeheader()
            for e in entries:
                writer.writerow(asdict(e))
            return buf.getvalue()
        if fmt != "json":
            raise ValueError(f"Unsupported export format: {fmt}")
        return json.dumps([asdict(e) for e in entries], indent=2, default=str)
