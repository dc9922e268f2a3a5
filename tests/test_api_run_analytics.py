"""Tests for run analytics endpoints."""

from conftest import CUTOFF, make_run, make_workflows
from skyvern_manager.config import Settings
from skyvern_manager.providers.static import StaticWorkflowSource

SETTINGS = Settings(run_analytics_page_size=2)


def _source(**kwargs) -> StaticWorkflowSource:
    runs = [
        make_run("r1", "wpid_login", "Login flow", "completed", day=14, duration=10),
        make_run("r2", "wpid_login", "Login flow", "completed", day=13, duration=30),
        make_run("r3", "wpid_invoice", "Invoice download", "failed", day=12, duration=65),
        make_run("r4", "wpid_login", "Login flow", "running", day=12),
        make_run("r5", "wpid_draft", "Draft scraper", "completed", day=11, duration=1),
        make_run("r6", "wpid_login", "Login flow", "completed", day=9, duration=99),
    ]
    return StaticWorkflowSource(make_workflows(), runs, **kwargs)


class TestSettingsEndpoints:
    """Test GET/PUT /api/run-analytics/settings and workflow-filter."""

    def test_settings_missing(self, make_client):
        response = make_client(_source(), SETTINGS).get("/api/run-analytics/settings")
        assert response.status_code == 400
        assert "error" in response.json()

    def test_settings_round_trip(self, make_client):
        client = make_client(_source(), SETTINGS)
        assert client.put("/api/run-analytics/settings", json={"cutoff_timestamp": CUTOFF}).json() == {
            "ok": True
        }
        assert client.get("/api/run-analytics/settings").json() == {"cutoff_timestamp": CUTOFF}

    def test_invalid_cutoff(self, make_client):
        client = make_client(_source(), SETTINGS)
        response = client.put("/api/run-analytics/settings", json={"cutoff_timestamp": "soon"})
        assert response.status_code == 400

    def test_workflow_filter_default_and_alias(self, make_client):
        client = make_client(_source(), SETTINGS)
        assert client.get("/api/run-analytics/workflow-filter").json() == {}
        client.put("/api/run-analytics/workflow-filter", json={"group_id": ["fld_a"]})
        assert client.get("/api/run-analytics/workflow-filter").json() == {"folder_id": ["fld_a"]}


class TestResults:
    """Test GET /api/run-analytics/results."""

    def test_results_require_settings(self, make_client):
        source = _source()
        response = make_client(source, SETTINGS).get("/api/run-analytics/results")
        assert response.status_code == 400
        assert source.calls == []

    def test_results(self, make_client):
        client = make_client(_source(), SETTINGS)
        client.put("/api/run-analytics/settings", json={"cutoff_timestamp": CUTOFF})
        client.put("/api/run-analytics/workflow-filter", json={"status": ["published"]})

        summaries = client.get("/api/run-analytics/results").json()
        assert [s["workflow_title"] for s in summaries] == ["Login flow", "Invoice download"]

        login = summaries[0]
        assert login["total_count"] == 2
        assert login["status_rows"] == [
            {
                "status": "completed",
                "count": 2,
                "avg_run_time_seconds": 20.0,
                "max_run_time_seconds": 30.0,
                "min_run_time_seconds": 10.0,
            }
        ]

    def test_upstream_failure(self, make_client):
        client = make_client(_source(fail_on_run_page=2), SETTINGS)
        client.put("/api/run-analytics/settings", json={"cutoff_timestamp": CUTOFF})
        response = client.get("/api/run-analytics/results")
        assert response.status_code == 502
        assert response.json()["status"] == 503


class TestExportHtml:
    """Test GET /api/run-analytics/export/html."""

    def test_export(self, make_client):
        client = make_client(_source(), SETTINGS)
        client.put("/api/run-analytics/settings", json={"cutoff_timestamp": CUTOFF})

        response = client.get("/api/run-analytics/export/html")
        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/html")
        disposition = response.headers["content-disposition"]
        assert disposition.startswith('attachment; filename="run-analytics-')
        assert disposition.endswith('.html"')

        html = response.text
        assert "<td>Login flow</td>" in html
        assert "<td>Draft scraper</td>" in html
        assert "<td>1m 5s</td>" in html
        assert f"Cut-off: {CUTOFF}" in html
