from __future__ import annotations

import logging
from datetime import date, datetime
from enum import Enum
from typing import Any

import httpx

from salon_booking.application.exceptions import RemoteStoreError


def to_json_value(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, (list, tuple)):
        return [to_json_value(v) for v in value]
    return value


def _filter_literal(value: Any) -> str:
    value = to_json_value(value)
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


class SupabaseClient:
    """Thin PostgREST client: one httpx.Client, errors raised as RemoteStoreError."""

    def __init__(
        self,
        base_url: str,
        api_key: str,
        timeout: float = 10.0,
        http_client: httpx.Client | None = None,
    ) -> None:
        if not base_url:
            raise ValueError("SUPABASE_URL is required for the Supabase store")
        if not api_key:
            raise ValueError("SUPABASE_ANON_KEY is required for the Supabase store")
        self._base_url = base_url.rstrip("/")
        self._api_key = api_key
        self._client = http_client or httpx.Client(timeout=timeout)
        self._logger = logging.getLogger(__name__)

    @property
    def base_url(self) -> str:
        return self._base_url

    @property
    def api_key(self) -> str:
        return self._api_key

    @property
    def http(self) -> httpx.Client:
        return self._client

    def table(self, name: str) -> "TableQuery":
        return TableQuery(self, name)

    def close(self) -> None:
        self._client.close()

    def headers(self, access_token: str | None = None, extra: dict[str, str] | None = None) -> dict[str, str]:
        headers = {
            "apikey": self._api_key,
            "Authorization": f"Bearer {access_token or self._api_key}",
        }
        if extra:
            headers.update(extra)
        return headers

    def request(
        self,
        method: str,
        path: str,
        params: list[tuple[str, str]] | None = None,
        json: Any = None,
        headers: dict[str, str] | None = None,
        access_token: str | None = None,
    ) -> httpx.Response:
        url = f"{self._base_url}{path}"
        try:
            resp = self._client.request(
                method,
                url,
                params=params,
                json=json,
                headers=self.headers(access_token, headers),
            )
        except httpx.HTTPError as e:
            self._logger.error("Supabase request failed", extra={"table": path, "error": str(e)})
            raise RemoteStoreError(f"Request to {path} failed: {e}") from e

        if resp.status_code >= 400:
            message, code = _error_details(resp)
            self._logger.error(
                "Supabase returned an error",
                extra={"table": path, "status": resp.status_code, "error": message},
            )
            raise RemoteStoreError(message, status_code=resp.status_code, code=code)
        return resp


def _error_details(resp: httpx.Response) -> tuple[str, str | None]:
    try:
        body = resp.json()
    except ValueError:
        return resp.text or f"HTTP {resp.status_code}", None
    if isinstance(body, dict):
        message = body.get("message") or body.get("msg") or body.get("error_description") or body.get("error")
        code = body.get("code")
        return str(message or f"HTTP {resp.status_code}"), str(code) if code is not None else None
    return resp.text, None


class TableQuery:
    """
    PostgREST query builder for one table, e.g.

        client.table("services").select("*,category:service_categories(*)")
              .eq("is_active", True).order("sort_order").execute()
    """

    def __init__(self, client: SupabaseClient, table: str) -> None:
        self._client = client
        self._table = table
        self._params: list[tuple[str, str]] = []
        self._headers: dict[str, str] = {}
        self._access_token: str | None = None
        self._range: tuple[int, int] | None = None

    def auth(self, access_token: str | None) -> "TableQuery":
        self._access_token = access_token
        return self

    def select(self, columns: str = "*") -> "TableQuery":
        self._params.append(("select", columns))
        return self

    def eq(self, column: str, value: Any) -> "TableQuery":
        op = "is" if value is None else "eq"
        self._params.append((column, f"{op}.{_filter_literal(value)}"))
        return self

    def gte(self, column: str, value: Any) -> "TableQuery":
        self._params.append((column, f"gte.{_filter_literal(value)}"))
        return self

    def lte(self, column: str, value: Any) -> "TableQuery":
        self._params.append((column, f"lte.{_filter_literal(value)}"))
        return self

    def in_(self, column: str, values: list[Any]) -> "TableQuery":
        joined = ",".join(_filter_literal(v) for v in values)
        self._params.append((column, f"in.({joined})"))
        return self

    def or_(self, expression: str) -> "TableQuery":
        self._params.append(("or", f"({expression})"))
        return self

    def order(self, column: str, ascending: bool = True) -> "TableQuery":
        direction = "asc" if ascending else "desc"
        for i, (key, value) in enumerate(self._params):
            if key == "order":
                self._params[i] = ("order", f"{value},{column}.{direction}")
                return self
        self._params.append(("order", f"{column}.{direction}"))
        return self

    def range(self, start: int, end: int) -> "TableQuery":
        self._range = (start, end)
        return self

    def count_exact(self) -> "TableQuery":
        self._headers["Prefer"] = "count=exact"
        return self

    def execute(self) -> tuple[list[dict[str, Any]], int | None]:
        headers = dict(self._headers)
        if self._range is not None:
            headers["Range-Unit"] = "items"
            headers["Range"] = f"{self._range[0]}-{self._range[1]}"
        resp = self._client.request(
            "GET",
            f"/rest/v1/{self._table}",
            params=self._params,
            headers=headers,
            access_token=self._access_token,
        )
        return resp.json() or [], _parse_count(resp.headers.get("Content-Range"))

    def insert(self, values: dict[str, Any] | list[dict[str, Any]]) -> list[dict[str, Any]]:
        return self._write("POST", values, "return=representation")

    def upsert(self, values: dict[str, Any], on_conflict: str = "id") -> list[dict[str, Any]]:
        self._params.append(("on_conflict", on_conflict))
        return self._write("POST", values, "return=representation,resolution=merge-duplicates")

    def update(self, values: dict[str, Any]) -> list[dict[str, Any]]:
        return self._write("PATCH", values, "return=representation")

    def _write(self, method: str, values: Any, prefer: str) -> list[dict[str, Any]]:
        if isinstance(values, list):
            payload: Any = [{k: to_json_value(v) for k, v in row.items()} for row in values]
        else:
            payload = {k: to_json_value(v) for k, v in values.items()}
        resp = self._client.request(
            method,
            f"/rest/v1/{self._table}",
            params=self._params,
            json=payload,
            headers={**self._headers, "Prefer": prefer},
            access_token=self._access_token,
        )
        if not resp.content:
            return []
        data = resp.json()
        return data if isinstance(data, list) else [data]


def _parse_count(content_range: str | None) -> int | None:
    # "0-9/42" or "*/0"
    if not content_range or "/" not in content_range:
        return None
    total = content_range.rsplit("/", 1)[1]
    return int(total) if total.isdigit() else None
