"""Configuration for the hosted store, local data and audit directories.

Values come from an optional YAML file, then the environment (which wins):

- ``MARKETDESK_CONFIG`` -- path to the YAML file
- ``SUPABASE_URL`` (or ``NEXT_PUBLIC_SUPABASE_URL``) -- project URL
- ``SUPABASE_SERVICE_ROLE_KEY`` -- service-role key for admin actions
- ``MARKETDESK_TIMEOUT`` -- request timeout in seconds
- ``MARKETDESK_DATA_DIR`` / ``MARKETDESK_AUDIT_DIR`` -- local directories
"""

from __future__ import annotations

import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Mapping, Optional

import yaml

from marketdesk.errors import Misconfigured
from marketdesk.gateway.base import StorageGateway
from marketdesk.gateway.local import LocalGateway
from marketdesk.gateway.supabase import SupabaseGateway


@dataclass(frozen=True)
class Settings:
    """Resolved runtime settings."""

    supabase_url: str = ""
    service_role_key: str = ""
    timeout_seconds: float = 10.0
    data_dir: Optional[Path] = None
    audit_dir: Optional[Path] = None

    def require_remote(self) -> None:
        """Raise :class:`Misconfigured` unless the hosted store can be reached."""
        missing = []
        if not self.supabase_url:
            missing.append("SUPABASE_URL")
        if not self.service_role_key:
            missing.append("SUPABASE_SERVICE_ROLE_KEY")
        if missing:
            raise Misconfigured(
                f"Server is not configured for admin actions. Missing: {', '.join(missing)}"
            )


def _from_file(path: Path) -> dict:
    try:
        with path.open("r", encoding="utf-8") as handle:
            raw = yaml.safe_load(handle) or {}
    except (OSError, yaml.YAMLError) as exc:
        raise Misconfigured(f"Could not read configuration file {path}: {exc}") from exc
    if not isinstance(raw, dict):
        raise Misconfigured(f"Configuration file {path} must contain a mapping")
    return raw


def load_settings(
    config_path: Optional[str | Path] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> Settings:
    """Build :class:`Settings` from *config_path* and the environment."""
    env = os.environ if environ is None else environ
    path = config_path or env.get("MARKETDESK_CONFIG")
    raw = _from_file(Path(path).expanduser()) if path else {}

    url = env.get("SUPABASE_URL") or env.get("NEXT_PUBLIC_SUPABASE_URL") or raw.get("supabase_url", "")
    key = env.get("SUPABASE_SERVICE_ROLE_KEY") or raw.get("service_role_key", "")
    timeout_raw = env.get("MARKETDESK_TIMEOUT") or raw.get("timeout_seconds", 10.0)
    try:
        timeout = float(timeout_raw)
    except (TypeError, ValueError):
        raise Misconfigured(f"Invalid timeout: {timeout_raw!r}") from None
    if timeout <= 0:
        raise Misconfigured("Timeout must be positive")

    data_dir = env.get("MARKETDESK_DATA_DIR") or raw.get("data_dir")
    audit_dir = env.get("MARKETDESK_AUDIT_DIR") or raw.get("audit_dir")
    return Settings(
        supabase_url=str(url),
        service_role_key=str(key),
        timeout_seconds=timeout,
        data_dir=Path(data_dir).expanduser() if data_dir else None,
        audit_dir=Path(audit_dir).expanduser() if audit_dir else None,
    )


def build_gateway(settings: Settings, *, local: bool = False) -> StorageGateway:
    """Return the gateway described by *settings*.

    ``local=True`` selects the JSON-file gateway; otherwise the hosted store
    is required and :class:`Misconfigured` is raised if it is not set up.
    """
    if local:
        return LocalGateway(settings.data_dir)
    settings.require_remote()
    return SupabaseGateway(
        settings.supabase_url,
        settings.service_role_key,
        timeout=settings.timeout_seconds,
    )


def with_data_dir(settings: Settings, data_dir: Optional[str | Path]) -> Settings:
    if data_dir is None:
        return settings
    return replace(settings, data_dir=Path(data_dir))
