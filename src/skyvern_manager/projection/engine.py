"""Field-path projection engine.

Builds a shaped record from a raw record and a FieldConfig:

- Each field path is walked through mappings from the root.
- If the walk reaches a list, the consumed prefix is the array path and the
  next segment is the leaf property copied out of every element.
- The list is filtered once per call by the filters scoped to that array
  path. Every field under the same array path reads the same filtered list
  and writes into the same output list, so indices line up across fields.
- Without an array boundary the resolved value is copied verbatim.
- Anything absent along the way contributes nothing.

Fields are applied shortest path first, so the result does not depend on
the order of the field list. When one field names an array ("items") and
another projects a leaf out of it ("items.v"), the leaf projection wins and
the output holds the filtered list of leaves.

Only one array boundary per field path is supported. A path such as
"a.items.b.c" where "items" is a list has more than one segment after the
boundary and is skipped.
"""

from __future__ import annotations

import copy
import logging
from collections.abc import Iterable, Sequence
from typing import Any

from skyvern_manager.core.paths import MISSING, set_path, split_path
from skyvern_manager.models.types import FieldConfig, FieldFilter, FilterConfig
from skyvern_manager.projection.filters import filter_array

logger = logging.getLogger(__name__)


class ProjectionContext:
    """State for projecting one record.

    Holds the filtered list for each array path and the output list built
    for it. Create one per record and discard it afterwards.
    """

    def __init__(self, filters: Sequence[FieldFilter]):
        self.filters = list(filters)
        self._filtered: dict[str, list[Any]] = {}
        self._outputs: dict[str, list[dict[str, Any]]] = {}

    def filtered_items(self, array_path: str, items: list[Any]) -> list[Any]:
        """Filtered version of items, computed on first use of array_path."""
        if array_path not in self._filtered:
            self._filtered[array_path] = filter_array(items, array_path, self.filters)
        return self._filtered[array_path]

    def output_array(
        self, output: dict[str, Any], array_segments: list[str], size: int
    ) -> list[dict[str, Any]]:
        """Output list for an array path, created and placed on first use."""
        array_path = ".".join(array_segments)
        out = self._outputs.get(array_path)
        if out is None:
            out = [{} for _ in range(size)]
            self._outputs[array_path] = out
            set_path(output, array_segments, out)
        return out


def _extract_into(
    raw: Any,
    segments: list[str],
    output: dict[str, Any],
    context: ProjectionContext,
) -> None:
    """Project one field path from raw into output."""
    current = raw
    for index, segment in enumerate(segments):
        if isinstance(current, list):
            array_segments = segments[:index]
            leaf_path = segments[index:]
            if len(leaf_path) != 1:
                logger.debug(
                    f"Skipping field {'.'.join(segments)!r}: "
                    f"expected one property after array {'.'.join(array_segments)!r}"
                )
                return
            leaf = leaf_path[0]
            items = context.filtered_items(".".join(array_segments), current)
            out_array = context.output_array(output, array_segments, len(items))
            for out_elem, item in zip(out_array, items):
                if isinstance(item, dict) and leaf in item:
                    out_elem[leaf] = copy.deepcopy(item[leaf])
            return

        if not isinstance(current, dict) or segment not in current:
            return
        current = current[segment]

    set_path(output, segments, copy.deepcopy(current))


def project(
    raw: dict[str, Any],
    fields: Iterable[str],
    filters: Sequence[FieldFilter] = (),
) -> dict[str, Any]:
    """Project raw into a new record containing only the requested fields.

    Args:
        raw: Arbitrary JSON record. Not modified.
        fields: Dot paths to extract.
        filters: Array-scoped filters.

    Returns:
        Shaped record. Identical inputs always give equal outputs.
    """
    context = ProjectionContext(filters)
    output: dict[str, Any] = {}
    # Shorter paths first, so a deeper path always refines its ancestor.
    for segments in sorted((split_path(f) for f in fields), key=len):
        _extract_into(raw, segments, output, context)
    return output


def project_many(records: Iterable[dict[str, Any]], field_config: FieldConfig) -> list[dict[str, Any]]:
    """Project each record with its own context."""
    return [project(raw, field_config.fields, field_config.filters) for raw in records]


def apply_filter_config(
    records: list[dict[str, Any]], filter_config: FilterConfig
) -> list[dict[str, Any]]:
    """Post-fetch filtering of listed workflows.

    Every supported FilterConfig key is already sent upstream as a query
    parameter, so records pass through unchanged.
    """
    return records
