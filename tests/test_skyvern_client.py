"""Tests for the Skyvern API client over a mock transport."""

import asyncio
import json

import httpx
import pytest

from skyvern_manager.config import Settings
from skyvern_manager.errors import UpstreamError
from skyvern_manager.models.types import FilterConfig
from skyvern_manager.providers.base import WorkflowSource
from skyvern_manager.providers.skyvern import SkyvernClient

SETTINGS = Settings(skyvern_base_url="https://skyvern.test/v1/", skyvern_api_key="sk-test")


def _call(handler, coro_fn):
    """Run coro_fn(client) against a client whose transport is handler."""

    async def _run():
        async with SkyvernClient(SETTINGS, transport=httpx.MockTransport(handler)) as client:
            return await coro_fn(client)

    return asyncio.run(_run())


class TestSkyvernClientRequests:
    """Test request construction."""

    def test_is_workflow_source(self):
        assert issubclass(SkyvernClient, WorkflowSource)

    def test_list_workflows_query_and_headers(self):
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json=[{"workflow_permanent_id": "wpid_1"}])

        result = _call(
            handler,
            lambda c: c.list_workflows(2, 50, {"status": ["published", "draft"], "search_key": "log"}),
        )

        assert result == [{"workflow_permanent_id": "wpid_1"}]
        request = seen[0]
        assert request.method == "GET"
        assert request.url.path == "/v1/workflows"
        assert request.headers["x-api-key"] == "sk-test"
        assert request.url.params.get_list("status") == ["published", "draft"]
        assert request.url.params["search_key"] == "log"
        assert request.url.params["page"] == "2"
        assert request.url.params["page_size"] == "50"

    def test_list_workflow_runs(self):
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json=[])

        assert _call(handler, lambda c: c.list_workflow_runs(1, 20)) == []
        assert seen[0].url.path == "/v1/workflows/runs"

    def test_get_run_quotes_id(self):
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"run_id": "wr/1"})

        assert _call(handler, lambda c: c.get_run("wr/1")) == {"run_id": "wr/1"}
        assert seen[0].url.raw_path.decode() == "/v1/runs/wr%2F1"

    def test_fetch_all_workflows_per_folder(self):
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            folder = request.url.params["folder_id"]
            return httpx.Response(200, json=[{"workflow_permanent_id": f"in_{folder}"}])

        config = FilterConfig(status="published", folder_id=["f1", "f2"], only_workflows=True)
        result = _call(handler, lambda c: c.fetch_all_workflows(config, page_size=10))

        assert result == [{"workflow_permanent_id": "in_f1"}, {"workflow_permanent_id": "in_f2"}]
        assert len(seen) == 2
        assert all(r.url.params["only_workflows"] == "true" for r in seen)
        assert all(r.url.params["status"] == "published" for r in seen)


class TestUpdateDescription:
    """Test the description update round trip."""

    def test_output_parameters_are_not_sent_back(self, workflows):
        posted: list[dict] = []

        def handler(request: httpx.Request) -> httpx.Response:
            if request.method == "GET":
                return httpx.Response(200, json=workflows[0])
            posted.append(json.loads(request.content))
            return httpx.Response(200, json={"workflow_permanent_id": "wpid_login"})

        _call(handler, lambda c: c.update_workflow_description("wpid_login", "New text"))

        body = posted[0]["json_definition"]
        assert body["title"] == "Login flow"
        assert body["description"] == "New text"
        keys = [p["key"] for p in body["workflow_definition"]["parameters"]]
        assert keys == ["username", "password"]
        assert body["workflow_definition"]["blocks"] == [{"label": "login", "block_type": "login"}]


class TestSkyvernClientErrors:
    """Test failure mapping."""

    def test_http_error_carries_status_and_body(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(403, json={"detail": "Invalid API key"})

        with pytest.raises(UpstreamError) as exc_info:
            _call(handler, lambda c: c.list_workflows(1, 10))
        assert exc_info.value.status_code == 403
        assert exc_info.value.detail == {"detail": "Invalid API key"}
        assert exc_info.value.url.endswith("/v1/workflows?page=1&page_size=10")

    def test_non_json_error_body_is_text(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(500, text="upstream exploded")

        with pytest.raises(UpstreamError) as exc_info:
            _call(handler, lambda c: c.get_workflow("wpid_1"))
        assert exc_info.value.detail == "upstream exploded"

    def test_transport_error(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(UpstreamError) as exc_info:
            _call(handler, lambda c: c.list_workflow_runs(1, 10))
        assert exc_info.value.status_code is None
        assert "connection refused" in exc_info.value.detail

    def test_listing_must_be_array(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"items": []})

        with pytest.raises(UpstreamError):
            _call(handler, lambda c: c.list_workflows(1, 10))

    def test_invalid_json_body(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, text="<html>")

        with pytest.raises(UpstreamError):
            _call(handler, lambda c: c.get_run("r1"))
