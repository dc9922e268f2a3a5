"""In-memory workflow source.

Serves fixed workflow and run lists with the same paging contract as the
Skyvern API. Used for tests, demos and offline rendering without calling
the real API.
"""

from __future__ import annotations

import copy
from typing import Any

from skyvern_manager.errors import UpstreamError
from skyvern_manager.providers.base import WorkflowSource


class StaticWorkflowSource(WorkflowSource):
    """Workflow source over in-memory lists.

    Workflows are matched against the status, folder_id and search_key
    params. Runs are served in list order, so pass them newest first (or set
    newest_first=False). Every list call is recorded in `calls`.
    """

    def __init__(
        self,
        workflows: list[dict[str, Any]] | None = None,
        runs: list[dict[str, Any]] | None = None,
        *,
        run_details: dict[str, dict[str, Any]] | None = None,
        newest_first: bool = True,
        fail_on_run_page: int | None = None,
    ):
        """Initialize source.

        Args:
            workflows: Workflow records.
            runs: Run listing records, in listing order.
            run_details: Full run detail keyed by run id.
            newest_first: Capability flag for run ordering.
            fail_on_run_page: Run page number that raises UpstreamError.
        """
        self.workflows = list(workflows or [])
        self.runs = list(runs or [])
        self.run_details = dict(run_details or {})
        self.runs_newest_first = newest_first
        self.fail_on_run_page = fail_on_run_page
        self.calls: list[tuple[str, int, dict[str, Any]]] = []
        self.updates: list[tuple[str, dict[str, Any]]] = []

    @staticmethod
    def _page(items: list[dict[str, Any]], page: int, page_size: int) -> list[dict[str, Any]]:
        start = (page - 1) * page_size
        return copy.deepcopy(items[start : start + page_size])

    @staticmethod
    def _matches(workflow: dict[str, Any], params: dict[str, Any]) -> bool:
        for key in ("status", "folder_id"):
            wanted = params.get(key)
            if wanted is None:
                continue
            allowed = wanted if isinstance(wanted, list) else [wanted]
            if workflow.get(key) not in allowed:
                return False
        search_key = params.get("search_key")
        if search_key and search_key.lower() not in str(workflow.get("title", "")).lower():
            return False
        return True

    async def list_workflows(
        self, page: int, page_size: int, params: dict[str, Any] | None = None
    ) -> list[dict[str, Any]]:
        params = params or {}
        self.calls.append(("workflows", page, dict(params)))
        selected = [w for w in self.workflows if self._matches(w, params)]
        return self._page(selected, page, page_size)

    async def list_workflow_runs(self, page: int, page_size: int) -> list[dict[str, Any]]:
        self.calls.append(("runs", page, {}))
        if self.fail_on_run_page == page:
            raise UpstreamError(
                "Skyvern API returned 503 for GET /workflows/runs",
                status_code=503,
                detail={"detail": "unavailable"},
            )
        return self._page(self.runs, page, page_size)

    async def get_workflow(self, workflow_permanent_id: str) -> dict[str, Any]:
        for workflow in self.workflows:
            if workflow.get("workflow_permanent_id") == workflow_permanent_id:
                return copy.deepcopy(workflow)
        raise UpstreamError(
            f"Workflow {workflow_permanent_id} not found",
            status_code=404,
            detail={"detail": "Workflow not found"},
        )

    async def get_run(self, run_id: str) -> dict[str, Any]:
        if run_id not in self.run_details:
            raise UpstreamError(
                f"Run {run_id} not found",
                status_code=404,
                detail={"detail": "Run not found"},
            )
        return copy.deepcopy(self.run_details[run_id])

    async def update_workflow(
        self, workflow_permanent_id: str, json_definition: dict[str, Any]
    ) -> dict[str, Any]:
        current = await self.get_workflow(workflow_permanent_id)
        self.updates.append((workflow_permanent_id, copy.deepcopy(json_definition)))
        current.update(copy.deepcopy(json_definition))
        for index, workflow in enumerate(self.workflows):
            if workflow.get("workflow_permanent_id") == workflow_permanent_id:
                self.workflows[index] = current
        return copy.deepcopy(current)
