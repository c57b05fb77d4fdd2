"""Error taxonomy shared by the interest and moderation workflows."""

from __future__ import annotations


class MarketdeskError(Exception):
    """Base class for every error raised by marketdesk."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class Misconfigured(MarketdeskError):
    """The storage gateway cannot be used (missing URL, key, or client)."""


class InvalidKind(MarketdeskError, ValueError):
    """A value outside the closed set of interest kinds was supplied."""


class NotFound(MarketdeskError):
    """No primary record matched the requested identifier."""


class IntegrityError(MarketdeskError):
    """More than one primary record matched an identifier that must be unique."""


class StorageError(MarketdeskError):
    """The storage gateway reported a failure."""


class InsertFailed(StorageError):
    """Inserting a row failed; ``message`` carries the storage error verbatim."""


class UpdateFailed(StorageError):
    """Updating a row failed; ``message`` carries the storage error verbatim."""


class AuthUpdateFailed(MarketdeskError):
    """The authentication subsystem rejected a ban-state change."""


class PartiallyApplied(MarketdeskError):
    """The authentication subsystem changed but the profile subsystem did not."""
