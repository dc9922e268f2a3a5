"""Workflow doc configuration endpoints.

GET/PUT /api/config/filter   - Workflow listing filter
GET/PUT /api/config/fields   - Projection fields and array filters
GET/PUT /api/config/template - Doc template (text/plain)
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Body, Depends, Request
from fastapi.responses import PlainTextResponse

from skyvern_manager.api.app import get_db_session
from skyvern_manager.db.repo import DbSession
from skyvern_manager.errors import ConfigValidationError
from skyvern_manager.store import documents

router = APIRouter()


def _require_object(body: Any) -> dict:
    if not isinstance(body, dict):
        raise ConfigValidationError("Request body must be a JSON object")
    return body


@router.get("/config/filter")
def get_filter_config(session: DbSession = Depends(get_db_session)) -> dict:
    """Get the workflow listing filter."""
    config = documents.read_filter_config(session)
    return {"data": config.model_dump(mode="json", exclude_none=True)}


@router.put("/config/filter")
def put_filter_config(
    body: Any = Body(...),
    session: DbSession = Depends(get_db_session),
) -> dict:
    """Replace the workflow listing filter.

    Raises:
        ConfigValidationError: 400 if the body is not a valid filter.
    """
    documents.write_filter_config(session, _require_object(body))
    return {"ok": True}


@router.get("/config/fields")
def get_field_config(session: DbSession = Depends(get_db_session)) -> dict:
    """Get the field config."""
    config = documents.read_field_config(session)
    return {"data": config.model_dump(mode="json")}


@router.put("/config/fields")
def put_field_config(
    body: Any = Body(...),
    session: DbSession = Depends(get_db_session),
) -> dict:
    """Replace the field config.

    Raises:
        ConfigValidationError: 400 if fields or filters are malformed.
    """
    body = _require_object(body)
    if not isinstance(body.get("fields"), list) or not isinstance(body.get("filters"), list):
        raise ConfigValidationError('Field config must have "fields" and "filters" arrays')
    documents.write_field_config(session, body)
    return {"ok": True}


@router.get("/config/template", response_class=PlainTextResponse)
def get_template(session: DbSession = Depends(get_db_session)) -> str:
    """Get the doc template source."""
    return documents.read_template(session)


@router.put("/config/template")
async def put_template(
    request: Request,
    session: DbSession = Depends(get_db_session),
) -> dict:
    """Replace the doc template with the raw request body."""
    raw = await request.body()
    try:
        source = raw.decode("utf-8")
    except UnicodeDecodeError:
        raise ConfigValidationError("Request body must be UTF-8 text") from None
    documents.write_template(session, source)
    return {"ok": True}
