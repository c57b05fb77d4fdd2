"""Auth middleware -- FastAPI dependencies for the caller and shared services.

Callers authenticate with ``X-API-Key: <raw_key>`` or
``Authorization: Bearer <raw_key>``; both resolve through the staff
:class:`UserStore`.
"""

from __future__ import annotations

from typing import Optional

from fastapi import Depends, Header, HTTPException, status

from marketdesk.auth.models import User
from marketdesk.auth.store import UserStore
from marketdesk.config import Settings, build_gateway, load_settings
from marketdesk.errors import Misconfigured
from marketdesk.gateway.base import StorageGateway
from marketdesk.security.audit_log import AuditLogger

# Process-wide singletons; created on first use.
_store: Optional[UserStore] = None
_settings: Optional[Settings] = None
_gateway: Optional[StorageGateway] = None
_audit: Optional[AuditLogger] = None


def get_store() -> UserStore:
    """Return the singleton UserStore instance."""
    global _store
    if _store is None:
        _store = UserStore()
    return _store


def get_settings() -> Settings:
    global _settings
    if _settings is None:
        _settings = load_settings()
    return _settings


def get_gateway(settings: Settings = Depends(get_settings)) -> StorageGateway:
    """Return the shared gateway, or 503 if the hosted store is not configured."""
    global _gateway
    if _gateway is None:
        try:
            _gateway = build_gateway(settings)
        except Misconfigured as exc:
            raise HTTPException(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                detail=exc.message,
            ) from exc
    return _gateway


def get_audit_logger(settings: Settings = Depends(get_settings)) -> AuditLogger:
    global _audit
    if _audit is None:
        _audit = AuditLogger(settings.audit_dir)
    return _audit


def get_current_user(
    authorization: Optional[str] = Header(None),
    x_api_key: Optional[str] = Header(None, alias="X-API-Key"),
    store: UserStore = Depends(get_store),
) -> User:
    """Return the authenticated caller or raise ``401 Unauthorized``."""
    candidates = []
    if x_api_key:
        candidates.append(x_api_key)
    if authorization:
        scheme, _, token = authorization.partition(" ")
        if scheme.lower() == "bearer" and token:
            candidates.append(token)

    for raw_key in candidates:
        user = store.validate_api_key(raw_key)
        if user is not None:
            return user

    raise HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Not authenticated",
        headers={"WWW-Authenticate": "Bearer"},
    )
