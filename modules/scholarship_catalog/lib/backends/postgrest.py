# modules/scholarship_catalog/lib/backends/postgrest.py
from __future__ import annotations

import asyncio
import re
from typing import Any

import requests

from ..config import Settings
from ..http_client import HttpClient
from ..models import Listing
from .base import BackendError, CatalogBackend
from .registry import register

# Columns of `grants` plus the embedded university, as the catalog page selects them.
LISTING_SELECT = (
    "id,title,description,grant_type,university_id,degree_levels,fields_of_study,"
    "min_gpa,funding_amount,covers_tuition,covers_living,deadline,is_featured,created_at,"
    "universities:university_id(id,name,country,city,logo_url)"
)

_CONTENT_RANGE_RE = re.compile(r"^\s*(?:\d+-\d+|\*)/(\d+|\*)\s*$")


def parse_content_range_total(value: str | None) -> int:
    """
    Extract the total from a Content-Range header such as '0-14/137' or '*/0'.
    Raises BackendError when the header is missing or has no exact count.
    """
    m = _CONTENT_RANGE_RE.match(value or "")
    if not m or m.group(1) == "*":
        raise BackendError(f"Content-Range without exact count: {value!r}")
    return int(m.group(1))


@register
class PostgrestBackend(CatalogBackend):
    """
    Hosted relational store reached over its PostgREST interface.

    Tables:
      grants(id, title, ..., created_at, university_id -> universities)
      saved_grants(user_id, grant_id)

    requests is blocking, so every call is pushed to a worker thread with
    asyncio.to_thread; the event loop only suspends the awaiting operation.
    """

    kind = "postgrest"

    def __init__(
        self,
        rest_url: str,
        api_key: str | None = None,
        *,
        access_token: str | None = None,
        timeout: float = 15.0,
        client: HttpClient | None = None,
    ) -> None:
        self.base_url = rest_url.rstrip("/")
        headers: dict[str, str] = {"Accept": "application/json"}
        if api_key:
            headers["apikey"] = api_key
        bearer = access_token or api_key
        if bearer:
            headers["Authorization"] = f"Bearer {bearer}"
        self._client = client or HttpClient(timeout=timeout)
        self._client.session.headers.update(headers)

    @classmethod
    def from_settings(cls, settings: Settings) -> PostgrestBackend:
        if not settings.rest_url:
            raise BackendError("postgrest backend requires rest_url")
        return cls(settings.rest_url, settings.api_key, timeout=settings.http_timeout)

    def _url(self, table: str) -> str:
        return f"{self.base_url}/{table}"

    async def _call(self, op: str, fn: Any, *args: Any, **kwargs: Any) -> Any:
        try:
            return await asyncio.to_thread(fn, *args, **kwargs)
        except BackendError:
            raise
        except (requests.RequestException, ValueError) as e:
            raise BackendError(f"{op} failed: {e!r}") from e

    # ---- listings ----
    async def fetch_listings(self, offset: int, limit: int) -> list[Listing]:
        if limit <= 0:
            return []
        params = {
            "select": LISTING_SELECT,
            "order": "created_at.desc",
            "offset": str(offset),
            "limit": str(limit),
        }
        rows = await self._call("fetch_listings", self._client.get_json, self._url("grants"), params=params)
        if not isinstance(rows, list):
            raise BackendError(f"fetch_listings: expected a JSON array, got {type(rows).__name__}")
        try:
            return [Listing.from_row(r) for r in rows]
        except (TypeError, ValueError) as e:
            raise BackendError(f"fetch_listings: malformed row: {e}") from e

    async def count_listings(self) -> int:
        resp = await self._call(
            "count_listings",
            self._client.head,
            self._url("grants"),
            params={"select": "id"},
            headers={"Prefer": "count=exact", "Range-Unit": "items"},
        )
        return parse_content_range_total(resp.headers.get("Content-Range"))

    # ---- save marks ----
    async def list_saved(self, user_id: str) -> list[str]:
        rows = await self._call(
            "list_saved",
            self._client.get_json,
            self._url("saved_grants"),
            params={"select": "grant_id", "user_id": f"eq.{user_id}"},
        )
        if not isinstance(rows, list):
            raise BackendError("list_saved: expected a JSON array")
        return [str(r["grant_id"]) for r in rows if isinstance(r, dict) and r.get("grant_id") is not None]

    async def insert_save(self, user_id: str, listing_id: str) -> None:
        await self._call(
            "insert_save",
            self._client.post_json,
            self._url("saved_grants"),
            {"user_id": user_id, "grant_id": listing_id},
            headers={"Prefer": "return=minimal"},
        )

    async def delete_save(self, user_id: str, listing_id: str) -> None:
        await self._call(
            "delete_save",
            self._client.delete,
            self._url("saved_grants"),
            params={"user_id": f"eq.{user_id}", "grant_id": f"eq.{listing_id}"},
        )

    async def close(self) -> None:
        self._client.close()
