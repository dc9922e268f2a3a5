"""Workflow endpoints.

GET /api/workflows                    - Projected workflows for the doc
PUT /api/workflows/{id}/description   - Update a workflow description
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Depends

from skyvern_manager.api.app import get_db_session, get_settings, get_workflow_source
from skyvern_manager.config import Settings
from skyvern_manager.db.repo import DbSession
from skyvern_manager.errors import InternalError
from skyvern_manager.models.types import DescriptionUpdate
from skyvern_manager.projection.engine import apply_filter_config, project_many
from skyvern_manager.providers.base import WorkflowSource
from skyvern_manager.store import documents

logger = logging.getLogger(__name__)

router = APIRouter()


async def load_shaped_workflows(
    session: DbSession, source: WorkflowSource, settings: Settings
) -> list[dict[str, Any]]:
    """Fetch workflows per the stored filter and project them.

    Config documents are validated before anything is fetched.

    Raises:
        ConfigValidationError: If a stored document is invalid.
        UpstreamError: If any listing page fails.
        InternalError: If projection fails.
    """
    filter_config = documents.read_filter_config(session)
    field_config = documents.read_field_config(session)

    raw = await source.fetch_all_workflows(filter_config, settings.workflow_page_size)
    try:
        return project_many(apply_filter_config(raw, filter_config), field_config)
    except Exception as e:
        logger.exception("Failed to project workflows")
        raise InternalError("Failed to shape workflows") from e


@router.get("/workflows")
async def list_workflows(
    session: DbSession = Depends(get_db_session),
    settings: Settings = Depends(get_settings),
    source: WorkflowSource = Depends(get_workflow_source),
) -> list[dict[str, Any]]:
    """List workflows shaped by the field config."""
    return await load_shaped_workflows(session, source, settings)


@router.put("/workflows/{workflow_permanent_id}/description")
async def update_description(
    workflow_permanent_id: str,
    update: DescriptionUpdate,
    source: WorkflowSource = Depends(get_workflow_source),
) -> dict[str, Any]:
    """Set a workflow's description, keeping the rest of its definition."""
    logger.info(f"Updating description of {workflow_permanent_id}")
    return await source.update_workflow_description(workflow_permanent_id, update.description)
