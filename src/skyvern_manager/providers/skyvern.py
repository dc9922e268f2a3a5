"""Skyvern API client.

Thin async wrapper over the Skyvern REST API:
- GET  /workflows                       paged workflow listing
- GET  /workflows/runs                  paged run listing (newest first)
- GET  /workflows/{workflow_permanent_id}
- POST /workflows/{workflow_permanent_id}
- GET  /runs/{run_id}

Every failure becomes UpstreamError carrying the upstream status and body.
Nothing is retried.
"""

from __future__ import annotations

import logging
from typing import Any
from urllib.parse import quote

import httpx

from skyvern_manager.config import Settings
from skyvern_manager.errors import UpstreamError
from skyvern_manager.providers.base import WorkflowSource

logger = logging.getLogger(__name__)


def _query_items(params: dict[str, Any]) -> list[tuple[str, str]]:
    """Flatten params; list values become repeated keys."""
    items: list[tuple[str, str]] = []
    for key, value in params.items():
        if isinstance(value, (list, tuple)):
            items.extend((key, str(v)) for v in value)
        else:
            items.append((key, str(value)))
    return items


def _response_detail(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return response.text


class SkyvernClient(WorkflowSource):
    """Workflow source backed by the Skyvern API.

    Use as an async context manager, or call aclose() when done.
    """

    def __init__(
        self,
        settings: Settings,
        *,
        client: httpx.AsyncClient | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        newest_first: bool = True,
    ):
        """Initialize the client.

        Args:
            settings: Base URL, API key and timeout.
            client: Optional preconfigured httpx client.
            transport: Optional transport for the default client (tests pass
                an httpx.MockTransport).
            newest_first: Whether the run listing is newest first.
        """
        self.settings = settings
        self.runs_newest_first = newest_first
        self._client = client or httpx.AsyncClient(
            base_url=settings.skyvern_base_url.rstrip("/"),
            headers={"x-api-key": settings.skyvern_api_key},
            timeout=settings.timeout_seconds,
            transport=transport,
        )

    async def __aenter__(self) -> SkyvernClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close the underlying HTTP client."""
        await self._client.aclose()

    async def _request(
        self,
        method: str,
        path: str,
        *,
        params: list[tuple[str, str]] | None = None,
        json: Any = None,
    ) -> Any:
        try:
            response = await self._client.request(method, path, params=params, json=json)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            detail = _response_detail(e.response)
            logger.error(f"Skyvern API error: {method} {path} -> {e.response.status_code}")
            raise UpstreamError(
                f"Skyvern API returned {e.response.status_code} for {method} {path}",
                status_code=e.response.status_code,
                detail=detail,
                url=str(e.request.url),
            ) from e
        except httpx.RequestError as e:
            logger.error(f"Skyvern API unreachable: {method} {path}: {e}")
            raise UpstreamError(
                f"Skyvern API request failed: {e}",
                detail=str(e),
                url=str(self._client.base_url) + path,
            ) from e
        try:
            return response.json()
        except ValueError as e:
            raise UpstreamError(
                f"Skyvern API returned a non-JSON body for {method} {path}",
                status_code=response.status_code,
                detail=response.text,
                url=str(response.request.url),
            ) from e

    async def _get_page(
        self, path: str, page: int, page_size: int, params: dict[str, Any] | None
    ) -> list[dict[str, Any]]:
        query = _query_items({**(params or {}), "page": page, "page_size": page_size})
        data = await self._request("GET", path, params=query)
        if not isinstance(data, list):
            raise UpstreamError(
                f"Expected a JSON array from {path}",
                detail=data,
            )
        logger.debug(f"GET {path} page={page} -> {len(data)} item(s)")
        return data

    async def list_workflows(
        self, page: int, page_size: int, params: dict[str, Any] | None = None
    ) -> list[dict[str, Any]]:
        return await self._get_page("/workflows", page, page_size, params)

    async def list_workflow_runs(self, page: int, page_size: int) -> list[dict[str, Any]]:
        return await self._get_page("/workflows/runs", page, page_size, None)

    async def get_workflow(self, workflow_permanent_id: str) -> dict[str, Any]:
        return await self._request("GET", f"/workflows/{quote(workflow_permanent_id, safe='')}")

    async def get_run(self, run_id: str) -> dict[str, Any]:
        return await self._request("GET", f"/runs/{quote(run_id, safe='')}")

    async def update_workflow(
        self, workflow_permanent_id: str, json_definition: dict[str, Any]
    ) -> dict[str, Any]:
        return await self._request(
            "POST",
            f"/workflows/{quote(workflow_permanent_id, safe='')}",
            json={"json_definition": json_definition},
        )
