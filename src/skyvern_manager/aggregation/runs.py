"""Run analytics: eligible workflows, bounded run collection, summaries.

Three phases over a WorkflowSource:

A. Eligibility - page the workflow listing with the workflow filter and
   collect every workflow_permanent_id. Folders are fetched concurrently
   and the first failing folder cancels the rest.
B. Collection - page the run listing, dropping excluded statuses from each
   page. When the listing is newest first, stop once a page's earliest
   started_at (over the whole page, excluded runs included) is before the
   cutoff.
C. Aggregation - keep runs started at or after the cutoff that belong to
   an eligible workflow, then group by title and status.

Phase B's early stop only saves requests; phase C's filter is what decides
which runs count. If the listing is not really newest first, stopping early
can miss older eligible runs, so sources must report their ordering.

Any UpstreamError aborts the whole call. Nothing partial is returned.
"""

from __future__ import annotations

import logging
from collections.abc import Collection, Iterable
from datetime import datetime

import numpy as np

from skyvern_manager.models.domain import RunRecord
from skyvern_manager.models.types import (
    WorkflowFilterConfig,
    WorkflowRunSummary,
    WorkflowStatusRow,
)
from skyvern_manager.providers.base import WorkflowSource, gather_or_abort

logger = logging.getLogger(__name__)

ELIGIBILITY_PAGE_SIZE = 100
RUN_PAGE_SIZE = 20


# ============================================================================
# Phase A: eligibility
# ============================================================================


async def _collect_workflow_ids(
    source: WorkflowSource, params: dict, page_size: int
) -> set[str]:
    ids: set[str] = set()
    page = 1
    while True:
        batch = await source.list_workflows(page, page_size, params)
        for workflow in batch:
            permanent_id = workflow.get("workflow_permanent_id")
            if permanent_id:
                ids.add(permanent_id)
        if len(batch) < page_size:
            break
        page += 1
    return ids


async def fetch_eligible_workflow_ids(
    source: WorkflowSource,
    workflow_filter: WorkflowFilterConfig,
    page_size: int = ELIGIBILITY_PAGE_SIZE,
) -> set[str]:
    """Permanent ids of every workflow matching workflow_filter.

    Args:
        source: Workflow source.
        workflow_filter: Status, folder and search filters.
        page_size: Workflow listing page size.

    Returns:
        Set of workflow_permanent_id values.
    """
    params: dict = {}
    if workflow_filter.status:
        params["status"] = list(workflow_filter.status)
    if workflow_filter.search_key:
        params["search_key"] = workflow_filter.search_key

    if not workflow_filter.folder_id:
        ids = await _collect_workflow_ids(source, params, page_size)
    else:
        per_folder = await gather_or_abort(
            _collect_workflow_ids(source, {**params, "folder_id": folder_id}, page_size)
            for folder_id in workflow_filter.folder_id
        )
        ids = set().union(*per_folder)

    logger.info(f"Eligible workflows: {len(ids)}")
    return ids


# ============================================================================
# Phase B: bounded collection
# ============================================================================


def _earliest_start(batch: Iterable[RunRecord]) -> datetime | None:
    starts = [run.started_at for run in batch if run.started_at is not None]
    return min(starts) if starts else None


async def collect_runs(
    source: WorkflowSource,
    cutoff: datetime,
    exclude_statuses: Collection[str],
    page_size: int = RUN_PAGE_SIZE,
    early_exit: bool | None = None,
) -> list[RunRecord]:
    """Collect runs page by page, stopping early past the cutoff.

    Args:
        source: Workflow source.
        cutoff: Oldest started_at of interest (aware datetime).
        exclude_statuses: Statuses dropped from every page.
        page_size: Run listing page size.
        early_exit: Stop once a page reaches past the cutoff. None uses
            source.runs_newest_first.

    Returns:
        Runs not excluded by status, in listing order. Not yet cutoff-filtered.
    """
    if early_exit is None:
        early_exit = source.runs_newest_first
    excluded = set(exclude_statuses)

    collected: list[RunRecord] = []
    page = 1
    while True:
        raw_batch = await source.list_workflow_runs(page, page_size)
        if not raw_batch:
            break

        batch = [RunRecord.from_api(item) for item in raw_batch]
        collected.extend(run for run in batch if run.status not in excluded)

        if len(raw_batch) < page_size:
            break
        if early_exit:
            earliest = _earliest_start(batch)
            if earliest is not None and earliest < cutoff:
                logger.info(f"Run page {page} reaches past cutoff; stopping")
                break
        page += 1

    logger.info(f"Collected {len(collected)} runs over {page} page(s)")
    return collected


# ============================================================================
# Phase C: aggregation
# ============================================================================


def filter_runs(
    runs: Iterable[RunRecord], eligible_ids: Collection[str], cutoff: datetime
) -> list[RunRecord]:
    """Runs started at or after cutoff that belong to an eligible workflow."""
    return [
        run
        for run in runs
        if run.started_at is not None
        and run.started_at >= cutoff
        and run.workflow_permanent_id in eligible_ids
    ]


def _status_row(status: str, runs: list[RunRecord]) -> WorkflowStatusRow:
    durations = np.array(
        [d for d in (run.duration_seconds for run in runs) if d is not None],
        dtype=float,
    )
    if durations.size == 0:
        avg = max_ = min_ = None
    else:
        avg = float(durations.mean())
        max_ = float(durations.max())
        min_ = float(durations.min())
    return WorkflowStatusRow(
        status=status,
        count=len(runs),
        avg_run_time_seconds=avg,
        max_run_time_seconds=max_,
        min_run_time_seconds=min_,
    )


def aggregate_runs(runs: Iterable[RunRecord]) -> list[WorkflowRunSummary]:
    """Group runs by title, then status, with duration statistics.

    Status rows are ordered by count descending and titles by total count
    descending. Both sorts are stable, so ties keep first-seen order.
    """
    by_title: dict[str, list[RunRecord]] = {}
    for run in runs:
        by_title.setdefault(run.display_title, []).append(run)

    summaries: list[WorkflowRunSummary] = []
    for title, group in by_title.items():
        by_status: dict[str, list[RunRecord]] = {}
        for run in group:
            by_status.setdefault(run.status, []).append(run)

        rows = [_status_row(status, status_runs) for status, status_runs in by_status.items()]
        rows.sort(key=lambda row: row.count, reverse=True)

        summaries.append(
            WorkflowRunSummary(
                workflow_title=title,
                workflow_permanent_id=group[0].workflow_permanent_id,
                total_count=len(group),
                status_rows=rows,
            )
        )

    summaries.sort(key=lambda summary: summary.total_count, reverse=True)
    return summaries


async def summarize_runs(
    source: WorkflowSource,
    workflow_filter: WorkflowFilterConfig,
    cutoff: datetime,
    exclude_statuses: Collection[str],
    *,
    workflow_page_size: int = ELIGIBILITY_PAGE_SIZE,
    run_page_size: int = RUN_PAGE_SIZE,
    early_exit: bool | None = None,
) -> list[WorkflowRunSummary]:
    """Run all three phases and return per-title summaries.

    Raises:
        UpstreamError: If any page fetch fails.
    """
    eligible_ids = await fetch_eligible_workflow_ids(source, workflow_filter, workflow_page_size)
    collected = await collect_runs(
        source, cutoff, exclude_statuses, run_page_size, early_exit=early_exit
    )
    runs = filter_runs(collected, eligible_ids, cutoff)
    logger.info(f"Aggregating {len(runs)} of {len(collected)} collected runs")
    return aggregate_runs(runs)
