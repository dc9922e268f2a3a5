"""Tests for the workflow run explorer endpoints."""

from conftest import make_run
from skyvern_manager.config import Settings
from skyvern_manager.providers.static import StaticWorkflowSource

SETTINGS = Settings(workflow_run_page_size=3, workflow_run_excluded_statuses=["queued", "running"])


def _runs() -> list[dict]:
    return [
        make_run("r1", "wpid_login", "Login flow", "completed", day=12, duration=10),
        make_run("r2", "wpid_login", "Login flow", "Running", day=12),
        make_run("r3", "wpid_invoice", "Invoice download", "failed", day=11, duration=4),
        make_run("r4", "wpid_login", "Login flow", "QUEUED", day=11),
    ]


class TestListWorkflowRuns:
    """Test GET /api/workflow-runs."""

    def test_first_page(self, make_client):
        client = make_client(StaticWorkflowSource(runs=_runs()), SETTINGS)
        body = client.get("/api/workflow-runs").json()
        assert [r["workflow_run_id"] for r in body["runs"]] == ["r1", "r3"]
        assert body["page"] == 1
        assert body["page_size"] == 3
        assert body["has_more"] is True

    def test_page_filtered_to_nothing_still_reports_size(self, make_client):
        client = make_client(StaticWorkflowSource(runs=_runs()), SETTINGS)
        body = client.get("/api/workflow-runs", params={"page": 2}).json()
        assert body["runs"] == []
        assert body["has_more"] is False

    def test_invalid_page(self, make_client):
        client = make_client(StaticWorkflowSource(runs=_runs()), SETTINGS)
        assert client.get("/api/workflow-runs", params={"page": 0}).status_code == 422

    def test_upstream_error(self, make_client):
        source = StaticWorkflowSource(runs=_runs(), fail_on_run_page=1)
        response = make_client(source, SETTINGS).get("/api/workflow-runs")
        assert response.status_code == 502
        assert response.json()["status"] == 503


class TestGetWorkflowRun:
    """Test GET /api/workflow-runs/{run_id}."""

    def test_detail_passed_through(self, make_client):
        detail = {"run_id": "r1", "status": "completed", "outputs": {"x": [1, 2]}}
        source = StaticWorkflowSource(run_details={"r1": detail})
        assert make_client(source, SETTINGS).get("/api/workflow-runs/r1").json() == detail

    def test_unknown_run(self, make_client):
        response = make_client(StaticWorkflowSource(), SETTINGS).get("/api/workflow-runs/nope")
        assert response.status_code == 502
        assert response.json()["status"] == 404
