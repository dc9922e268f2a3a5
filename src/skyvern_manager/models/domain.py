"""Domain models for Skyvern Manager.

Pure Python dataclasses for records pulled from the Skyvern API.
Raw workflow records stay as plain dicts; the projection engine works on
arbitrary trees and needs no schema.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from skyvern_manager.core.timestamps import duration_seconds, parse_timestamp

logger = logging.getLogger(__name__)

UNTITLED_WORKFLOW = "(Untitled)"


def _timestamp_field(payload: dict[str, Any], key: str) -> datetime | None:
    """Parse a timestamp field, treating malformed values as absent."""
    raw = payload.get(key)
    if raw is not None and not isinstance(raw, str):
        logger.debug(f"Ignoring non-string {key}={raw!r}")
        return None
    try:
        return parse_timestamp(raw)
    except ValueError:
        logger.debug(f"Ignoring unparseable {key}={raw!r}")
        return None


# ============================================================================
# Workflow Run Domain
# ============================================================================


@dataclass
class RunRecord:
    """One workflow run as listed by the Skyvern API."""

    workflow_run_id: str
    workflow_permanent_id: str
    workflow_title: str | None
    status: str
    started_at: datetime | None = None
    finished_at: datetime | None = None
    queued_at: datetime | None = None

    @classmethod
    def from_api(cls, payload: dict[str, Any]) -> RunRecord:
        """Build from a run listing item."""
        return cls(
            workflow_run_id=str(payload.get("workflow_run_id") or ""),
            workflow_permanent_id=str(payload.get("workflow_permanent_id") or ""),
            workflow_title=payload.get("workflow_title"),
            status=str(payload.get("status") or ""),
            started_at=_timestamp_field(payload, "started_at"),
            finished_at=_timestamp_field(payload, "finished_at"),
            queued_at=_timestamp_field(payload, "queued_at"),
        )

    @property
    def display_title(self) -> str:
        """Title used for grouping; untitled runs share one group."""
        return self.workflow_title if self.workflow_title is not None else UNTITLED_WORKFLOW

    @property
    def duration_seconds(self) -> float | None:
        """finished_at - started_at in seconds, when both are present."""
        return duration_seconds(self.started_at, self.finished_at)
