"""Array-scoped filter matching.

All comparisons are string comparisons of the values' JSON text form.
There are no ordering operators; "10" and "9" compare as strings.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from typing import Any

from skyvern_manager.core.paths import MISSING, resolve, to_text
from skyvern_manager.models.types import FieldFilter


def matches(actual: Any, operator: str, expected: str | int | float | bool) -> bool:
    """Compare an element value against a filter value.

    Absent and null values never match, whatever the operator.
    """
    if actual is MISSING or actual is None:
        return False
    actual_text = to_text(actual)
    expected_text = to_text(expected)
    if operator == "eq":
        return actual_text == expected_text
    if operator == "neq":
        return actual_text != expected_text
    if operator == "contains":
        return expected_text in actual_text
    if operator == "startsWith":
        return actual_text.startswith(expected_text)
    return False


def filters_for(array_path: str, filters: Iterable[FieldFilter]) -> list[FieldFilter]:
    """Filters scoped to the array at array_path."""
    prefix = array_path + "."
    return [f for f in filters if f.field.startswith(prefix)]


def element_passes(element: Any, array_path: str, filters: Sequence[FieldFilter]) -> bool:
    """True when element satisfies every filter scoped to array_path."""
    offset = len(array_path) + 1
    for f in filters:
        value = resolve(element, f.field[offset:].split("."))
        if not matches(value, f.operator, f.value):
            return False
    return True


def filter_array(items: list[Any], array_path: str, filters: Iterable[FieldFilter]) -> list[Any]:
    """Keep elements of items that pass all filters scoped to array_path.

    Order is preserved. With no scoped filters the input list is returned.
    """
    scoped = filters_for(array_path, filters)
    if not scoped:
        return items
    return [item for item in items if element_passes(item, array_path, scoped)]
