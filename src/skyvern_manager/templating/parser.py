"""Template parser.

Grammar:
- literal text
- {path}                         placeholder, resolved by dot path
- {{#each path}} ... {{/each}}   block, body rendered once per list element

Blocks do not nest. An opening tag that meets another opening tag before
its close is kept as literal text together with everything up to the close
tag that balances the nesting, so no part of a nested block is ever
substituted. An opening tag that is never balanced turns the rest of the
input into literal text. A closing tag without an opening tag is literal.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Union

_TOKEN_RE = re.compile(
    r"(?P<open>\{\{#each\s+(?P<block_path>[^{}]+?)\s*\}\})"
    r"|(?P<close>\{\{/each\}\})"
    r"|(?P<placeholder>\{(?P<path>[^{}]+)\})"
)


@dataclass(frozen=True)
class Literal:
    """Text copied to the output unchanged."""

    text: str


@dataclass(frozen=True)
class Placeholder:
    """Value looked up by dot path in the active context."""

    path: str


@dataclass(frozen=True)
class Block:
    """Body rendered once per element of the list at path."""

    path: str
    body: tuple[Node, ...]


Node = Union[Literal, Placeholder, Block]


@dataclass(frozen=True)
class _Token:
    kind: str  # "text", "open", "close" or "placeholder"
    raw: str
    path: str = ""


def _tokenize(source: str) -> list[_Token]:
    tokens: list[_Token] = []
    pos = 0
    for match in _TOKEN_RE.finditer(source):
        if match.start() > pos:
            tokens.append(_Token("text", source[pos : match.start()]))
        if match.group("open"):
            tokens.append(_Token("open", match.group(0), match.group("block_path").strip()))
        elif match.group("close"):
            tokens.append(_Token("close", match.group(0)))
        else:
            tokens.append(_Token("placeholder", match.group(0), match.group("path").strip()))
        pos = match.end()
    if pos < len(source):
        tokens.append(_Token("text", source[pos:]))
    return tokens


def _append_literal(nodes: list[Node], text: str) -> None:
    """Append text, merging with a preceding literal."""
    if nodes and isinstance(nodes[-1], Literal):
        nodes[-1] = Literal(nodes[-1].text + text)
    else:
        nodes.append(Literal(text))


def _leaf_node(token: _Token, nodes: list[Node]) -> None:
    if token.kind == "placeholder":
        nodes.append(Placeholder(token.path))
    else:
        _append_literal(nodes, token.raw)


def _matching_close(tokens: list[_Token], start: int) -> int | None:
    """Index of the close tag for the open tag at start, if well formed."""
    for index in range(start + 1, len(tokens)):
        kind = tokens[index].kind
        if kind == "close":
            return index
        if kind == "open":
            return None
    return None


def _unmatched_end(tokens: list[_Token], start: int) -> int:
    """End index (exclusive) of the literal run for a broken open tag at start.

    The run reaches the close tag that balances every open tag after start,
    or the end of input when the tags never balance.
    """
    depth = 0
    for index in range(start, len(tokens)):
        kind = tokens[index].kind
        if kind == "open":
            depth += 1
        elif kind == "close":
            depth -= 1
            if depth == 0:
                return index + 1
    return len(tokens)


def parse_template(source: str) -> tuple[Node, ...]:
    """Parse template source into a tuple of nodes."""
    tokens = _tokenize(source)
    nodes: list[Node] = []
    index = 0
    while index < len(tokens):
        token = tokens[index]
        if token.kind != "open":
            _leaf_node(token, nodes)
            index += 1
            continue

        close = _matching_close(tokens, index)
        if close is None:
            end = _unmatched_end(tokens, index)
            _append_literal(nodes, "".join(t.raw for t in tokens[index:end]))
            index = end
            continue

        body: list[Node] = []
        for inner in tokens[index + 1 : close]:
            _leaf_node(inner, body)
        nodes.append(Block(token.path, tuple(body)))
        index = close + 1
    return tuple(nodes)
