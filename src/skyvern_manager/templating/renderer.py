"""Template rendering over parsed nodes.

Placeholders render scalars through to_text. Absent values, null,
mappings and lists all render as the empty string; structured values are
never stringified into the output.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from functools import lru_cache
from typing import Any

from skyvern_manager.core.paths import MISSING, is_scalar, resolve, split_path, to_text
from skyvern_manager.templating.parser import Block, Literal, Node, Placeholder, parse_template

_EMPTY_CONTEXT: Mapping[str, Any] = {}


def _placeholder_text(context: Any, path: str) -> str:
    value = resolve(context, split_path(path))
    if value is MISSING or not is_scalar(value):
        return ""
    return to_text(value)


def _render_nodes(nodes: Iterable[Node], context: Any, parts: list[str]) -> None:
    for node in nodes:
        if isinstance(node, Literal):
            parts.append(node.text)
        elif isinstance(node, Placeholder):
            parts.append(_placeholder_text(context, node.path))
        elif isinstance(node, Block):
            items = resolve(context, split_path(node.path))
            if not isinstance(items, list):
                continue
            for item in items:
                inner = item if isinstance(item, Mapping) else _EMPTY_CONTEXT
                _render_nodes(node.body, inner, parts)


class CompiledTemplate:
    """A template parsed once and rendered against many contexts."""

    def __init__(self, source: str):
        self.source = source
        self.nodes = parse_template(source)

    def render(self, context: Mapping[str, Any]) -> str:
        """Render against one record."""
        parts: list[str] = []
        _render_nodes(self.nodes, context, parts)
        return "".join(parts)

    def render_many(self, contexts: Iterable[Mapping[str, Any]]) -> str:
        """Render once per record and concatenate, no separator."""
        return "".join(self.render(context) for context in contexts)


@lru_cache(maxsize=32)
def compile_template(source: str) -> CompiledTemplate:
    """Parse source, reusing the result for repeated sources."""
    return CompiledTemplate(source)


def render(template: str, context: Mapping[str, Any]) -> str:
    """Render template against context."""
    return compile_template(template).render(context)


def render_many(template: str, contexts: Iterable[Mapping[str, Any]]) -> str:
    """Render template once per context and concatenate."""
    return compile_template(template).render_many(contexts)
