"""Workflow doc export endpoint.

POST /api/export/html - Rendered workflow doc as a downloadable HTML page
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends
from fastapi.responses import HTMLResponse

from skyvern_manager.api.app import get_db_session, get_settings, get_workflow_source
from skyvern_manager.api.routes.workflows import load_shaped_workflows
from skyvern_manager.config import Settings
from skyvern_manager.db.repo import DbSession
from skyvern_manager.errors import InternalError
from skyvern_manager.providers.base import WorkflowSource
from skyvern_manager.store import documents
from skyvern_manager.templating.documents import wrap_document
from skyvern_manager.templating.renderer import compile_template

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/export/html")
async def export_doc_html(
    session: DbSession = Depends(get_db_session),
    settings: Settings = Depends(get_settings),
    source: WorkflowSource = Depends(get_workflow_source),
) -> HTMLResponse:
    """Render every workflow through the doc template.

    The page is meant for an external PDF engine; nothing partial is
    returned if any step fails.

    Returns:
        HTML response with Content-Disposition header for download.
    """
    template = documents.read_template(session)
    shaped = await load_shaped_workflows(session, source, settings)

    try:
        body = compile_template(template).render_many(shaped)
    except Exception as e:
        logger.exception("Failed to render workflow doc")
        raise InternalError("Failed to render workflow doc") from e

    logger.info(f"Exported doc for {len(shaped)} workflows")
    return HTMLResponse(
        content=wrap_document(body),
        headers={"Content-Disposition": 'attachment; filename="workflow-doc.html"'},
    )
