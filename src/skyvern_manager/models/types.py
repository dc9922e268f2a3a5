"""Pydantic models for configuration documents and API payloads.

Configuration documents (filter, field config, analytics settings and
workflow filter) are validated with these models on every read and write.
"""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from skyvern_manager.core.timestamps import parse_timestamp

FilterOperator = Literal["eq", "neq", "contains", "startsWith"]


def _check_path(path: str) -> str:
    segments = path.strip().split(".")
    if any(not s.strip() for s in segments):
        raise ValueError(f"invalid dot path {path!r}: empty segment")
    return path.strip()


# ============================================================================
# Workflow doc configuration
# ============================================================================


class FilterConfig(BaseModel):
    """Workflow listing filter sent upstream as query parameters.

    Unknown keys are kept so newer upstream filters survive a round trip.
    """

    model_config = ConfigDict(extra="allow")

    status: str | list[str] | None = None
    folder_id: str | list[str] | None = None
    only_workflows: bool | None = None
    only_saved_tasks: bool | None = None
    only_templates: bool | None = None
    search_key: str | None = None

    def folder_ids(self) -> list[str] | None:
        """Folder ids as a list, or None when unset."""
        if self.folder_id is None:
            return None
        if isinstance(self.folder_id, str):
            return [self.folder_id]
        return list(self.folder_id)

    def query_params(self) -> dict[str, str | list[str]]:
        """Upstream query parameters, excluding folder_id (fanned out separately)."""
        params: dict[str, str | list[str]] = {}
        if self.status is not None:
            params["status"] = self.status
        for flag in ("only_workflows", "only_saved_tasks", "only_templates"):
            value = getattr(self, flag)
            if value is not None:
                params[flag] = "true" if value else "false"
        if self.search_key is not None:
            params["search_key"] = self.search_key
        return params


class FieldFilter(BaseModel):
    """Declarative filter scoped to one array boundary.

    field is "<arrayPath>.<property>"; elements of the array at arrayPath are
    kept only when the property compares true under operator.
    """

    field: str
    operator: FilterOperator
    value: str | int | float | bool

    @field_validator("field")
    @classmethod
    def _field_names_array_property(cls, v: str) -> str:
        v = _check_path(v)
        if "." not in v:
            raise ValueError(f"filter field {v!r} must have the form <arrayPath>.<property>")
        return v


class FieldConfig(BaseModel):
    """Projection config: field paths to extract plus array filters."""

    fields: list[str]
    filters: list[FieldFilter] = Field(default_factory=list)

    @field_validator("fields")
    @classmethod
    def _valid_paths(cls, v: list[str]) -> list[str]:
        return [_check_path(p) for p in v]


# ============================================================================
# Run analytics configuration
# ============================================================================


class WorkflowFilterConfig(BaseModel):
    """Which workflows are eligible for run analytics."""

    status: list[str] | None = None
    folder_id: list[str] | None = Field(
        default=None, validation_alias=AliasChoices("folder_id", "group_id")
    )
    search_key: str | None = None


class RunAnalyticsSettings(BaseModel):
    """Persisted run analytics settings."""

    cutoff_timestamp: str

    @field_validator("cutoff_timestamp")
    @classmethod
    def _parseable(cls, v: str) -> str:
        if parse_timestamp(v) is None:
            raise ValueError("cutoff_timestamp must not be empty")
        return v

    @property
    def cutoff(self) -> datetime:
        """Cutoff as an aware UTC datetime."""
        return parse_timestamp(self.cutoff_timestamp)


# ============================================================================
# Run analytics output
# ============================================================================


class WorkflowStatusRow(BaseModel):
    """Aggregate over runs of one workflow title with one status."""

    status: str
    count: int
    avg_run_time_seconds: float | None
    max_run_time_seconds: float | None
    min_run_time_seconds: float | None


class WorkflowRunSummary(BaseModel):
    """All status rows for one workflow title."""

    workflow_title: str
    workflow_permanent_id: str
    total_count: int
    status_rows: list[WorkflowStatusRow]


# ============================================================================
# Workflow run explorer
# ============================================================================


class WorkflowRunsPage(BaseModel):
    """One explorer page of workflow runs."""

    runs: list[dict]
    page: int
    page_size: int
    has_more: bool


class DescriptionUpdate(BaseModel):
    """Body for a workflow description update."""

    description: str
