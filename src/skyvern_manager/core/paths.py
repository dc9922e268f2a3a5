"""Dot-path access over nested JSON records.

Paths are dot-separated key sequences ("workflow_definition.parameters").
Only mappings are traversed: lists, scalars and None stop resolution.
Lookups never raise; a path that cannot be followed is absent.
"""

from __future__ import annotations

import math
from collections.abc import Mapping, Sequence
from decimal import Decimal
from typing import Any


class _Missing:
    """Sentinel type for an absent value (distinct from JSON null)."""

    _instance: _Missing | None = None

    def __new__(cls) -> _Missing:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False


MISSING: Any = _Missing()


def split_path(path: str) -> list[str]:
    """Split a dot path into segments, trimming surrounding whitespace."""
    return path.strip().split(".")


def resolve(root: Any, segments: Sequence[str]) -> Any:
    """Resolve segments against root.

    Returns:
        The value found, or MISSING if any step is not a mapping
        or the key is not present.
    """
    current = root
    for segment in segments:
        if not isinstance(current, Mapping):
            return MISSING
        if segment not in current:
            return MISSING
        current = current[segment]
    return current


def get_path(root: Any, path: str, default: Any = None) -> Any:
    """Get the value at a dot path, or default when absent."""
    value = resolve(root, split_path(path))
    return default if value is MISSING else value


def set_path(root: dict, path: str | Sequence[str], value: Any) -> None:
    """Assign value at path, creating intermediate mappings.

    Any intermediate that is missing or not a dict is replaced by an
    empty dict. Lists are never created here.
    """
    segments = split_path(path) if isinstance(path, str) else list(path)
    if not segments:
        return
    current = root
    for segment in segments[:-1]:
        child = current.get(segment)
        if not isinstance(child, dict):
            child = {}
            current[segment] = child
        current = child
    current[segments[-1]] = value


def _number_text(value: float) -> str:
    """Shortest round-trip text in JSON number spelling.

    Decimal notation for magnitudes in [1e-6, 1e21), exponent notation
    ("1e-7", "1.5e+21") outside that range.
    """
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "Infinity" if value > 0 else "-Infinity"
    if value.is_integer() and abs(value) < 1e21:
        return str(int(value))
    text = repr(value)
    if "e" not in text:
        return text
    mantissa, exponent = text.split("e")
    power = int(exponent)
    if -7 < power < 21:
        return format(Decimal(text), "f")
    return f"{mantissa}e{'+' if power > 0 else '-'}{abs(power)}"


def to_text(value: Any) -> str:
    """String form used for filter comparison and template output.

    Booleans follow JSON spelling and floats are written the way they
    appear in JSON ("2" for 2.0, "1e-7" for 1e-07), so values compare the
    same way they appear in the source record.
    """
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        return _number_text(value)
    return str(value)


def is_scalar(value: Any) -> bool:
    """True for str, int, float and bool values."""
    return isinstance(value, (str, int, float, bool))
