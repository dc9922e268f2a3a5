"""Tests for workflow listing, description update and doc export endpoints."""

from skyvern_manager.db import repo
from skyvern_manager.errors import UpstreamError
from skyvern_manager.providers.static import StaticWorkflowSource
from skyvern_manager.store import documents


class FailingWorkflowSource(StaticWorkflowSource):
    """Source whose workflow listing is rejected upstream."""

    async def list_workflows(self, page, page_size, params=None):
        self.calls.append(("workflows", page, dict(params or {})))
        raise UpstreamError(
            "Skyvern API returned 401 for GET /workflows",
            status_code=401,
            detail={"detail": "Invalid credentials"},
        )


class TestListWorkflows:
    """Test GET /api/workflows."""

    def test_default_configs(self, make_client, static_source):
        client = make_client(static_source)
        response = client.get("/api/workflows")
        assert response.status_code == 200

        shaped = response.json()
        assert [w["workflow_permanent_id"] for w in shaped] == ["wpid_login", "wpid_invoice"]
        params = shaped[0]["workflow_definition"]["parameters"]
        assert [p["key"] for p in params] == ["username", "password"]
        assert set(params[0]) == {"key", "description", "workflow_parameter_type"}
        assert static_source.calls[0][2] == {"status": "published"}

    def test_folder_fan_out(self, make_client, static_source):
        client = make_client(static_source)
        client.put("/api/config/filter", json={"folder_id": ["fld_b", "fld_a"]})
        shaped = client.get("/api/workflows").json()
        assert [w["workflow_permanent_id"] for w in shaped] == [
            "wpid_invoice",
            "wpid_login",
            "wpid_draft",
        ]

    def test_upstream_error_is_502(self, make_client, workflows):
        client = make_client(FailingWorkflowSource(workflows))
        response = client.get("/api/workflows")
        assert response.status_code == 502
        assert response.json() == {
            "error": "Skyvern API error",
            "status": 401,
            "detail": {"detail": "Invalid credentials"},
        }

    def test_invalid_config_fails_before_fetch(self, make_client, engine, static_source):
        from sqlalchemy.orm import Session

        with Session(engine) as session:
            repo.put_document(session, documents.FIELD_CONFIG, '{"fields": "title"}')
            repo.commit(session)

        client = make_client(static_source)
        response = client.get("/api/workflows")
        assert response.status_code == 400
        assert static_source.calls == []


class TestUpdateDescription:
    """Test PUT /api/workflows/{id}/description."""

    def test_update(self, make_client, static_source):
        client = make_client(static_source)
        response = client.put(
            "/api/workflows/wpid_login/description", json={"description": "Signs in"}
        )
        assert response.status_code == 200
        assert response.json()["description"] == "Signs in"

        workflow_id, sent = static_source.updates[0]
        assert workflow_id == "wpid_login"
        assert [p["key"] for p in sent["workflow_definition"]["parameters"]] == [
            "username",
            "password",
        ]

    def test_unknown_workflow(self, make_client, static_source):
        client = make_client(static_source)
        response = client.put("/api/workflows/nope/description", json={"description": "x"})
        assert response.status_code == 502
        assert response.json()["status"] == 404


class TestExportHtml:
    """Test POST /api/export/html."""

    def test_export(self, make_client, static_source):
        client = make_client(static_source)
        response = client.post("/api/export/html")
        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/html")
        assert 'filename="workflow-doc.html"' in response.headers["content-disposition"]

        html = response.text
        assert html.startswith("<!DOCTYPE html>")
        assert html.count('<div class="workflow-entry">') == 2
        assert '<h2 class="workflow-title">Login flow</h2>' in html
        assert '<td class="param-key">username</td>' in html
        assert "login_result" not in html
        assert "Draft scraper" not in html

    def test_custom_template(self, make_client, static_source):
        client = make_client(static_source)
        client.put(
            "/api/config/template",
            content=b"<li>{title}</li>",
            headers={"content-type": "text/plain"},
        )
        html = client.post("/api/export/html").text
        assert "<li>Login flow</li><li>Invoice download</li>" in html

    def test_upstream_error(self, make_client, workflows):
        client = make_client(FailingWorkflowSource(workflows))
        assert client.post("/api/export/html").status_code == 502
