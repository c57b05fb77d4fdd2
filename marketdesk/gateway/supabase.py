"""Hosted-store gateway speaking the Supabase REST and auth-admin APIs.

Table access goes through PostgREST (``/rest/v1/<table>``); ban changes go
through the GoTrue admin endpoint (``/auth/v1/admin/users/<id>``).  Both are
authenticated with the service-role key, so this gateway must only run
server-side.
"""

from __future__ import annotations

from typing import Any, Optional

import httpx

from marketdesk.errors import Misconfigured, StorageError
from marketdesk.gateway.base import BanDuration, StorageGateway


def _filter_params(filters: dict[str, Any]) -> dict[str, str]:
    params: dict[str, str] = {}
    for column, value in filters.items():
        if value is None:
            params[column] = "is.null"
        elif isinstance(value, bool):
            params[column] = f"eq.{str(value).lower()}"
        else:
            params[column] = f"eq.{value}"
    return params


def _error_message(response: httpx.Response) -> str:
    """Pull the human-readable message out of a PostgREST/GoTrue error body."""
    try:
        body = response.json()
    except ValueError:
        return response.text or f"HTTP {response.status_code}"
    if isinstance(body, dict):
        for key in ("message", "msg", "error_description", "error"):
            if body.get(key):
                return str(body[key])
    return f"HTTP {response.status_code}"


class SupabaseGateway(StorageGateway):
    """httpx-backed :class:`StorageGateway` for a Supabase project.

    Parameters
    ----------
    url : str
        Project URL, e.g. ``https://abc.supabase.co``.
    service_role_key : str
        Service-role key; bypasses row-level security.
    timeout : float
        Per-request timeout in seconds.
    transport : httpx.BaseTransport | None
        Optional transport override (tests use ``httpx.MockTransport``).
    """

    def __init__(
        self,
        url: str,
        service_role_key: str,
        timeout: float = 10.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        if not url or not service_role_key:
            raise Misconfigured(
                "Server is not configured for admin actions. Supabase URL or Service Role Key is missing."
            )
        self._client = httpx.Client(
            base_url=url.rstrip("/"),
            headers={
                "apikey": service_role_key,
                "Authorization": f"Bearer {service_role_key}",
            },
            timeout=timeout,
            transport=transport,
        )

    def close(self) -> None:
        self._client.close()

    # -- plumbing ------------------------------------------------------------

    def _request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        try:
            response = self._client.request(method, path, **kwargs)
        except httpx.HTTPError as exc:
            raise StorageError(f"{method} {path} failed: {exc}") from exc
        if response.is_error:
            raise StorageError(_error_message(response))
        return response

    # -- table access --------------------------------------------------------

    def select(self, table: str, filters: dict[str, Any]) -> list[dict[str, Any]]:
        params = {"select": "*", **_filter_params(filters)}
        return self._request("GET", f"/rest/v1/{table}", params=params).json()

    def select_ordered(
        self,
        table: str,
        filters: dict[str, Any],
        order_by: str,
        ascending: bool = True,
    ) -> list[dict[str, Any]]:
        params = {
            "select": "*",
            **_filter_params(filters),
            "order": f"{order_by}.{'asc' if ascending else 'desc'}",
        }
        return self._request("GET", f"/rest/v1/{table}", params=params).json()

    def insert(self, table: str, row: dict[str, Any]) -> dict[str, Any]:
        response = self._request(
            "POST",
            f"/rest/v1/{table}",
            json=row,
            headers={"Prefer": "return=representation"},
        )
        rows = response.json()
        if isinstance(rows, list):
            if len(rows) != 1:
                raise StorageError(f"Insert into {table} returned {len(rows)} rows")
            return rows[0]
        return rows

    def update(self, table: str, filters: dict[str, Any], patch: dict[str, Any]) -> int:
        if not filters:
            raise StorageError(f"Refusing unfiltered update of {table}")
        # PostgREST answers a PATCH that matched nothing with 200 and [].
        response = self._request(
            "PATCH",
            f"/rest/v1/{table}",
            params={"select": "id", **_filter_params(filters)},
            json=patch,
            headers={"Prefer": "return=representation"},
        )
        rows = response.json() if response.content else []
        return len(rows) if isinstance(rows, list) else 1

    # -- auth admin ----------------------------------------------------------

    def auth_admin_update_ban_state(self, user_id: str, ban_duration: BanDuration) -> None:
        self._request(
            "PUT",
            f"/auth/v1/admin/users/{user_id}",
            json={"ban_duration": BanDuration(ban_duration).value},
        )

    def auth_admin_get_ban_state(self, user_id: str) -> Optional[str]:
        user = self._request("GET", f"/auth/v1/admin/users/{user_id}").json()
        return user.get("banned_until") or None
