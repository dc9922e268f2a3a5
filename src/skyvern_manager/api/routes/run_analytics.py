"""Run analytics endpoints.

GET/PUT /api/run-analytics/settings        - Cutoff timestamp
GET/PUT /api/run-analytics/workflow-filter - Eligible workflows
GET     /api/run-analytics/results         - Per-title run summaries
GET     /api/run-analytics/export/html     - Summary report page
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any

from fastapi import APIRouter, Body, Depends
from fastapi.responses import HTMLResponse

from skyvern_manager.aggregation.report import build_report_html
from skyvern_manager.aggregation.runs import summarize_runs
from skyvern_manager.api.app import get_db_session, get_settings, get_workflow_source
from skyvern_manager.config import Settings
from skyvern_manager.db.repo import DbSession
from skyvern_manager.errors import InternalError
from skyvern_manager.models.types import RunAnalyticsSettings, WorkflowRunSummary
from skyvern_manager.providers.base import WorkflowSource
from skyvern_manager.store import documents

logger = logging.getLogger(__name__)

router = APIRouter()


async def _summaries(
    session: DbSession, source: WorkflowSource, settings: Settings
) -> tuple[RunAnalyticsSettings, list[WorkflowRunSummary]]:
    """Load stored settings and filter, then run the three phases."""
    analytics = documents.read_run_analytics_settings(session)
    workflow_filter = documents.read_workflow_filter(session)

    summaries = await summarize_runs(
        source,
        workflow_filter,
        analytics.cutoff,
        settings.run_analytics_exclude_statuses,
        workflow_page_size=settings.workflow_page_size,
        run_page_size=settings.run_analytics_page_size,
        early_exit=settings.run_analytics_early_exit and source.runs_newest_first,
    )
    return analytics, summaries


@router.get("/run-analytics/settings")
def get_analytics_settings(session: DbSession = Depends(get_db_session)) -> dict:
    """Get saved analytics settings (400 if never saved)."""
    return documents.read_run_analytics_settings(session).model_dump()


@router.put("/run-analytics/settings")
def put_analytics_settings(
    body: Any = Body(...),
    session: DbSession = Depends(get_db_session),
) -> dict:
    """Save analytics settings."""
    documents.write_run_analytics_settings(session, body)
    return {"ok": True}


@router.get("/run-analytics/workflow-filter")
def get_workflow_filter(session: DbSession = Depends(get_db_session)) -> dict:
    """Get the analytics workflow filter."""
    return documents.read_workflow_filter(session).model_dump(exclude_none=True)


@router.put("/run-analytics/workflow-filter")
def put_workflow_filter(
    body: Any = Body(...),
    session: DbSession = Depends(get_db_session),
) -> dict:
    """Save the analytics workflow filter (group_id accepted for folder_id)."""
    documents.write_workflow_filter(session, body)
    return {"ok": True}


@router.get("/run-analytics/results", response_model=list[WorkflowRunSummary])
async def get_results(
    session: DbSession = Depends(get_db_session),
    settings: Settings = Depends(get_settings),
    source: WorkflowSource = Depends(get_workflow_source),
) -> list[WorkflowRunSummary]:
    """Summaries of runs since the cutoff, largest groups first."""
    _, summaries = await _summaries(session, source, settings)
    return summaries


@router.get("/run-analytics/export/html")
async def export_report_html(
    session: DbSession = Depends(get_db_session),
    settings: Settings = Depends(get_settings),
    source: WorkflowSource = Depends(get_workflow_source),
) -> HTMLResponse:
    """Summary report as a downloadable HTML page for an external PDF engine."""
    analytics, summaries = await _summaries(session, source, settings)
    generated_at = datetime.now(timezone.utc)

    try:
        content = build_report_html(summaries, analytics.cutoff_timestamp, generated_at)
    except Exception as e:
        logger.exception("Failed to render run analytics report")
        raise InternalError("Failed to render run analytics report") from e

    filename = f"run-analytics-{generated_at.date().isoformat()}.html"
    return HTMLResponse(
        content=content,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
