"""Projection of raw workflow records into shaped records.

- filters: array-scoped filter matching
- engine: field-path projection with a per-call filtered-array cache
"""

from skyvern_manager.projection.engine import ProjectionContext, project, project_many
from skyvern_manager.projection.filters import filter_array, matches

__all__ = [
    "ProjectionContext",
    "filter_array",
    "matches",
    "project",
    "project_many",
]
