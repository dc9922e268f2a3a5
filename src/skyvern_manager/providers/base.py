"""Base interface for workflow sources.

A workflow source lists workflows and workflow runs page by page. Pages
have a fixed size per call; a page shorter than the requested size is the
last one. Implementations raise UpstreamError on failure and never retry.
"""

from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod
from collections.abc import Coroutine, Iterable
from typing import Any, TypeVar

from skyvern_manager.models.types import FilterConfig

logger = logging.getLogger(__name__)

DEFAULT_WORKFLOW_PAGE_SIZE = 100

T = TypeVar("T")


async def gather_or_abort(coros: Iterable[Coroutine[Any, Any, T]]) -> list[T]:
    """Run coroutines concurrently and return their results in order.

    The first failure cancels every sibling still running and is re-raised
    on its own, so no further upstream requests go out after it.
    """
    try:
        async with asyncio.TaskGroup() as group:
            tasks = [group.create_task(coro) for coro in coros]
    except ExceptionGroup as failure:
        raise failure.exceptions[0] from None
    return [task.result() for task in tasks]


class WorkflowSource(ABC):
    """Abstract base class for workflow sources.

    Attributes:
        runs_newest_first: Whether list_workflow_runs returns runs ordered
            newest first. Run analytics stops paging early only when this
            holds; sources with another ordering must set it to False.
    """

    runs_newest_first: bool = True

    @abstractmethod
    async def list_workflows(
        self, page: int, page_size: int, params: dict[str, Any] | None = None
    ) -> list[dict[str, Any]]:
        """List one page of workflows matching params."""

    @abstractmethod
    async def list_workflow_runs(self, page: int, page_size: int) -> list[dict[str, Any]]:
        """List one page of workflow runs."""

    @abstractmethod
    async def get_workflow(self, workflow_permanent_id: str) -> dict[str, Any]:
        """Fetch one workflow by permanent id."""

    @abstractmethod
    async def get_run(self, run_id: str) -> dict[str, Any]:
        """Fetch full detail for one run."""

    @abstractmethod
    async def update_workflow(
        self, workflow_permanent_id: str, json_definition: dict[str, Any]
    ) -> dict[str, Any]:
        """Replace a workflow definition."""

    async def list_all_workflows(
        self,
        params: dict[str, Any] | None = None,
        page_size: int = DEFAULT_WORKFLOW_PAGE_SIZE,
    ) -> list[dict[str, Any]]:
        """Page through list_workflows until a short page."""
        results: list[dict[str, Any]] = []
        page = 1
        while True:
            batch = await self.list_workflows(page, page_size, params)
            results.extend(batch)
            if len(batch) < page_size:
                break
            page += 1
        logger.info(f"Fetched {len(results)} workflows over {page} page(s)")
        return results

    async def fetch_all_workflows(
        self,
        filter_config: FilterConfig,
        page_size: int = DEFAULT_WORKFLOW_PAGE_SIZE,
    ) -> list[dict[str, Any]]:
        """Fetch every workflow matching filter_config.

        Each folder id is paged independently and folders are fetched
        concurrently; results keep folder order. The first failing folder
        cancels the others.
        """
        params = filter_config.query_params()
        folder_ids = filter_config.folder_ids()
        if folder_ids is None:
            return await self.list_all_workflows(params, page_size)

        batches = await gather_or_abort(
            self.list_all_workflows({**params, "folder_id": folder_id}, page_size)
            for folder_id in folder_ids
        )
        return [workflow for batch in batches for workflow in batch]

    async def update_workflow_description(
        self, workflow_permanent_id: str, description: str
    ) -> dict[str, Any]:
        """Set a workflow's description, keeping the rest of its definition.

        Output parameters are managed upstream and are not sent back.
        """
        current = await self.get_workflow(workflow_permanent_id)
        definition = dict(current.get("workflow_definition") or {})
        definition["parameters"] = [
            p
            for p in definition.get("parameters") or []
            if not (isinstance(p, dict) and p.get("parameter_type") == "output")
        ]
        return await self.update_workflow(
            workflow_permanent_id,
            {
                "title": current.get("title"),
                "description": description,
                "workflow_definition": definition,
            },
        )
