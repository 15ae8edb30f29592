from __future__ import annotations

from typing import Iterable

import regex

from .model import Annotation, Block, Em, Inline, LineBlock, Ruby, Strong, Text

_WS_RE = regex.compile(r"\s+")


def _collect(inlines: Iterable[Inline], parts: list[str]) -> None:
    for node in inlines:
        if isinstance(node, (Text, Annotation)):
            if node.text:
                parts.append(node.text)
        elif isinstance(node, Ruby):
            # gloss is a reading aid, not searchable content
            if node.base:
                parts.append(node.base)
        elif isinstance(node, (Em, Strong)):
            _collect(node.children, parts)


def flatten_line(block: LineBlock) -> str:
    parts: list[str] = []
    _collect(block.children, parts)
    return _WS_RE.sub(" ", "".join(parts)).strip()


def flatten(blocks: Iterable[Block]) -> str:
    """
    Searchable plain text: one normalized line per LineBlock, empty lines
    dropped, ParagraphBlocks ignored.
    """
    lines = (flatten_line(b) for b in blocks if isinstance(b, LineBlock))
    return "\n".join(line for line in lines if line)
