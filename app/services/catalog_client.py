from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Any

import httpx

from app.core.config import settings
from app.core.errors import InvalidFilterField, NetworkError, RemoteFailure, error_from_status
from app.schemas.list_query import ListQuery, RangeValue
from app.services.pager import PageResult

_LOG = logging.getLogger("app.catalog_client")

KITS_PATH = "/api/kits"
KIT_TABLE = "gundam_kits"
ADMIN_CRUD_PATH = "/api/admin/crud"
# Public kit listing parameters, keyed by the filter name a list query uses.
KIT_LIST_PARAMS = ("grade", "series", "scale", "timeline", "limitedTypes", "isPbandai")
KIT_PRICE_FILTER = "price"


def _format_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    return str(value)


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _paging_params(query: ListQuery) -> list[tuple[str, str]]:
    params: list[tuple[str, str]] = []
    if query.committed_search:
        params.append(("search", query.committed_search))
    if query.sort_field:
        params.append(("sortBy", query.sort_field))
        params.append(("sortOrder", "desc" if query.sort_descending else "asc"))
    params.append(("page", str(query.page)))
    params.append(("limit", str(query.page_size)))
    return params


def serialize_kit_query(query: ListQuery) -> list[tuple[str, str]]:
    """Query-string pairs for the public kit listing.

    Multi-select filters become comma separated values, the price range
    becomes priceMin/priceMax and empty filters are left out.
    """
    params: list[tuple[str, str]] = []
    for key in sorted(query.filters):
        value = query.filters[key]
        if key == KIT_PRICE_FILTER:
            if isinstance(value, RangeValue):
                if value.min is not None:
                    params.append(("priceMin", _format_value(value.min)))
                if value.max is not None:
                    params.append(("priceMax", _format_value(value.max)))
                continue
            raise InvalidFilterField(key, table=query.table_name)
        if key not in KIT_LIST_PARAMS:
            raise InvalidFilterField(key, table=query.table_name)
        if isinstance(value, list):
            values = [_format_value(item) for item in value if not _is_blank(item)]
            if values:
                params.append((key, ",".join(values)))
        elif not _is_blank(value):
            params.append((key, _format_value(value)))
    return params + _paging_params(query)


def serialize_admin_query(query: ListQuery) -> list[tuple[str, str]]:
    params: list[tuple[str, str]] = []
    for key in sorted(query.filters):
        value = query.filters[key]
        if isinstance(value, RangeValue):
            if value.min is not None:
                params.append((f"{key}__min", _format_value(value.min)))
            if value.max is not None:
                params.append((f"{key}__max", _format_value(value.max)))
        elif isinstance(value, list):
            values = [_format_value(item) for item in value if not _is_blank(item)]
            if values:
                params.append((key, ",".join(values)))
        elif not _is_blank(value):
            params.append((key, _format_value(value)))
    return params + _paging_params(query)


def serialize_list_query(query: ListQuery) -> list[tuple[str, str]]:
    if query.table_name == KIT_TABLE:
        return serialize_kit_query(query)
    return serialize_admin_query(query)


def _resource_path(resource: str) -> str:
    return f"{ADMIN_CRUD_PATH}/{resource.strip().replace('_', '-')}"


class CatalogApiClient:
    def __init__(
        self,
        base_url: str,
        *,
        token: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        headers = {"Authorization": f"Bearer {token}"} if token else {}
        self._client = httpx.AsyncClient(
            base_url=base_url,
            headers=headers,
            timeout=timeout if timeout is not None else settings.CLIENT_REQUEST_TIMEOUT_SECONDS,
            transport=transport,
        )

    async def __aenter__(self) -> "CatalogApiClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _request(self, method: str, url: str, **kwargs) -> Any:
        try:
            response = await self._client.request(method, url, **kwargs)
        except httpx.TimeoutException as exc:
            _LOG.warning("%s %s timed out: %s", method, url, exc)
            raise RemoteFailure("Request timed out")
        except httpx.HTTPError as exc:
            _LOG.warning("%s %s failed: %s", method, url, exc)
            raise NetworkError(str(exc) or "Network request failed")
        if response.status_code >= 400:
            try:
                body = response.json()
            except ValueError:
                body = {}
            if not isinstance(body, dict):
                body = {}
            message = body.get("error") or body.get("detail") or response.reason_phrase
            raise error_from_status(response.status_code, str(message), body.get("details"))
        try:
            return response.json()
        except ValueError:
            _LOG.warning("%s %s returned a non-JSON body status=%s", method, url, response.status_code)
            raise RemoteFailure("Malformed response from catalog service")

    async def fetch_kits(self, query: ListQuery) -> PageResult:
        payload = await self._request("GET", KITS_PATH, params=serialize_kit_query(query))
        return PageResult.from_envelope(payload)

    async def fetch_admin_page(self, query: ListQuery) -> PageResult:
        payload = await self._request("GET", _resource_path(query.table_name), params=serialize_admin_query(query))
        return PageResult.from_envelope(payload)

    async def create(self, resource: str, record: dict[str, Any]) -> dict[str, Any]:
        return await self._request("POST", _resource_path(resource), json=record)

    async def update(self, resource: str, row_id: Any, partial: dict[str, Any]) -> dict[str, Any]:
        return await self._request("PATCH", f"{_resource_path(resource)}/{row_id}", json=partial)

    async def delete(self, resource: str, row_id: Any) -> dict[str, Any]:
        return await self._request("DELETE", f"{_resource_path(resource)}/{row_id}")
