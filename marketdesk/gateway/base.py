"""Storage gateway contract consumed by the interest and moderation workflows."""

from __future__ import annotations

from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, Optional


class BanDuration(str, Enum):
    """Ban representations understood by the authentication subsystem."""

    # Supabase has no "forever"; 100 years is its conventional stand-in.
    INDEFINITE = "876000h"
    NONE = "none"


class StorageGateway(ABC):
    """Narrow read/insert/update/admin contract over the hosted store.

    Filters are equality matches, ``{"column": value}``.  Every method raises
    :class:`marketdesk.errors.StorageError` when the store reports a failure.
    """

    @abstractmethod
    def select(self, table: str, filters: dict[str, Any]) -> list[dict[str, Any]]:
        """Return every row of *table* matching *filters*."""

    @abstractmethod
    def select_ordered(
        self,
        table: str,
        filters: dict[str, Any],
        order_by: str,
        ascending: bool = True,
    ) -> list[dict[str, Any]]:
        """Return matching rows sorted by *order_by*."""

    @abstractmethod
    def insert(self, table: str, row: dict[str, Any]) -> dict[str, Any]:
        """Insert *row* and return the stored row (with generated columns)."""

    @abstractmethod
    def update(self, table: str, filters: dict[str, Any], patch: dict[str, Any]) -> int:
        """Apply *patch* to every row matching *filters*; return how many matched."""

    @abstractmethod
    def auth_admin_update_ban_state(self, user_id: str, ban_duration: BanDuration) -> None:
        """Ban or un-ban *user_id* in the authentication subsystem."""

    @abstractmethod
    def auth_admin_get_ban_state(self, user_id: str) -> Optional[str]:
        """Return the authentication subsystem's ``banned_until`` for *user_id*."""
