"""Read and write named configuration documents.

Each document is one row in config_documents. JSON documents are validated
with their pydantic model on every read and write, so a malformed document
fails with ConfigValidationError before any remote fetch. Reading a
document that was never saved seeds its default (run analytics settings
have none and must be saved first).
"""

from __future__ import annotations

import json
import logging
from typing import Any, TypeVar

from pydantic import BaseModel, ValidationError

from skyvern_manager.db import repo
from skyvern_manager.db.repo import DbSession
from skyvern_manager.errors import ConfigValidationError
from skyvern_manager.models.types import (
    FieldConfig,
    FilterConfig,
    RunAnalyticsSettings,
    WorkflowFilterConfig,
)
from skyvern_manager.store.defaults import (
    DEFAULT_FIELD_CONFIG,
    DEFAULT_FILTER_CONFIG,
    DEFAULT_TEMPLATE,
    DEFAULT_WORKFLOW_FILTER,
)

logger = logging.getLogger(__name__)

FILTER_CONFIG = "filter-config"
FIELD_CONFIG = "field-config"
DOC_TEMPLATE = "doc-template"
RUN_ANALYTICS_SETTINGS = "run-analytics-settings"
WORKFLOW_FILTER = "workflow-filter-config"

ModelT = TypeVar("ModelT", bound=BaseModel)


def _validate(model: type[ModelT], data: Any, name: str) -> ModelT:
    try:
        return model.model_validate(data)
    except ValidationError as e:
        raise ConfigValidationError(f"Invalid {name}: {e}") from e


def _read_json(session: DbSession, name: str, default: dict | None) -> Any:
    document = repo.get_document(session, name)
    if document is None:
        if default is None:
            raise ConfigValidationError(f"{name} has not been saved yet")
        logger.info(f"Seeding default {name}")
        repo.put_document(session, name, json.dumps(default, indent=2))
        repo.commit(session)
        return json.loads(json.dumps(default))
    try:
        return json.loads(document.content)
    except json.JSONDecodeError as e:
        raise ConfigValidationError(f"{name} is not valid JSON: {e}") from e


def _write_json(session: DbSession, name: str, model: BaseModel) -> None:
    content = json.dumps(model.model_dump(mode="json", exclude_none=True), indent=2)
    repo.put_document(session, name, content)
    repo.commit(session)
    logger.info(f"Saved {name}")


# ============================================================================
# Workflow doc configuration
# ============================================================================


def read_filter_config(session: DbSession) -> FilterConfig:
    """Workflow listing filter used by the doc export."""
    data = _read_json(session, FILTER_CONFIG, DEFAULT_FILTER_CONFIG)
    return _validate(FilterConfig, data, FILTER_CONFIG)


def write_filter_config(session: DbSession, data: Any) -> FilterConfig:
    """Validate and persist the workflow listing filter.

    Raises:
        ConfigValidationError: If data is not a valid filter config.
    """
    config = _validate(FilterConfig, data, FILTER_CONFIG)
    _write_json(session, FILTER_CONFIG, config)
    return config


def read_field_config(session: DbSession) -> FieldConfig:
    """Projection fields and array filters for workflow docs."""
    data = _read_json(session, FIELD_CONFIG, DEFAULT_FIELD_CONFIG)
    return _validate(FieldConfig, data, FIELD_CONFIG)


def write_field_config(session: DbSession, data: Any) -> FieldConfig:
    """Validate and persist the field config.

    Raises:
        ConfigValidationError: If a path is malformed or an operator unknown.
    """
    config = _validate(FieldConfig, data, FIELD_CONFIG)
    _write_json(session, FIELD_CONFIG, config)
    return config


def read_template(session: DbSession) -> str:
    """Workflow doc template source."""
    document = repo.get_document(session, DOC_TEMPLATE)
    if document is None:
        logger.info(f"Seeding default {DOC_TEMPLATE}")
        repo.put_document(session, DOC_TEMPLATE, DEFAULT_TEMPLATE)
        repo.commit(session)
        return DEFAULT_TEMPLATE
    return document.content


def write_template(session: DbSession, source: str) -> str:
    """Persist template source verbatim."""
    if not isinstance(source, str):
        raise ConfigValidationError("Template must be text")
    repo.put_document(session, DOC_TEMPLATE, source)
    repo.commit(session)
    logger.info(f"Saved {DOC_TEMPLATE} ({len(source)} chars)")
    return source


# ============================================================================
# Run analytics configuration
# ============================================================================


def read_run_analytics_settings(session: DbSession) -> RunAnalyticsSettings:
    """Saved analytics settings.

    Raises:
        ConfigValidationError: If settings were never saved or are invalid.
    """
    data = _read_json(session, RUN_ANALYTICS_SETTINGS, None)
    return _validate(RunAnalyticsSettings, data, RUN_ANALYTICS_SETTINGS)


def write_run_analytics_settings(session: DbSession, data: Any) -> RunAnalyticsSettings:
    """Validate and persist analytics settings."""
    settings = _validate(RunAnalyticsSettings, data, RUN_ANALYTICS_SETTINGS)
    _write_json(session, RUN_ANALYTICS_SETTINGS, settings)
    return settings


def read_workflow_filter(session: DbSession) -> WorkflowFilterConfig:
    """Which workflows count toward run analytics."""
    data = _read_json(session, WORKFLOW_FILTER, DEFAULT_WORKFLOW_FILTER)
    return _validate(WorkflowFilterConfig, data, WORKFLOW_FILTER)


def write_workflow_filter(session: DbSession, data: Any) -> WorkflowFilterConfig:
    """Validate and persist the analytics workflow filter.

    group_id is accepted as an alias of folder_id and stored as folder_id.
    """
    config = _validate(WorkflowFilterConfig, data, WORKFLOW_FILTER)
    _write_json(session, WORKFLOW_FILTER, config)
    return config
