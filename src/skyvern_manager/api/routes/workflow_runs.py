"""Workflow run explorer endpoints.

GET /api/workflow-runs?page=N   - One page of runs, configured statuses dropped
GET /api/workflow-runs/{run_id} - Full run detail
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, Query

from skyvern_manager.api.app import get_settings, get_workflow_source
from skyvern_manager.config import Settings
from skyvern_manager.models.types import WorkflowRunsPage
from skyvern_manager.providers.base import WorkflowSource

router = APIRouter()


@router.get("/workflow-runs", response_model=WorkflowRunsPage)
async def list_workflow_runs(
    page: int = Query(1, ge=1),
    settings: Settings = Depends(get_settings),
    source: WorkflowSource = Depends(get_workflow_source),
) -> WorkflowRunsPage:
    """One page of workflow runs.

    has_more reflects the unfiltered page size, so a page can be short (or
    empty) after status filtering and still have a successor.
    """
    page_size = settings.workflow_run_page_size
    excluded = {s.lower() for s in settings.workflow_run_excluded_statuses}

    raw_runs = await source.list_workflow_runs(page, page_size)
    runs = [run for run in raw_runs if str(run.get("status") or "").lower() not in excluded]

    return WorkflowRunsPage(
        runs=runs,
        page=page,
        page_size=page_size,
        has_more=len(raw_runs) == page_size,
    )


@router.get("/workflow-runs/{run_id}")
async def get_workflow_run(
    run_id: str,
    source: WorkflowSource = Depends(get_workflow_source),
) -> dict[str, Any]:
    """Full detail for one run, passed through unchanged."""
    return await source.get_run(run_id)
