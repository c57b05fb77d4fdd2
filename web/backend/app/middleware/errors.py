"""Translate marketdesk errors into HTTP responses."""

from __future__ import annotations

from fastapi import HTTPException, status

from marketdesk.errors import (
    IntegrityError,
    InvalidKind,
    MarketdeskError,
    Misconfigured,
    NotFound,
    StorageError,
)

_STATUS_BY_ERROR: list[tuple[type[MarketdeskError], int]] = [
    (NotFound, status.HTTP_404_NOT_FOUND),
    (InvalidKind, status.HTTP_422_UNPROCESSABLE_ENTITY),
    (IntegrityError, status.HTTP_409_CONFLICT),
    (Misconfigured, status.HTTP_503_SERVICE_UNAVAILABLE),
    (StorageError, status.HTTP_502_BAD_GATEWAY),
]


def to_http_exception(exc: MarketdeskError) -> HTTPException:
    for error_type, code in _STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            return HTTPException(status_code=code, detail=exc.message)
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=exc.message)
