from __future__ import annotations

import json
from typing import Any

from koiro_lyrics.errors import DocumentDecodeError

from .model import (
    AST_FORMAT,
    Annotation,
    Block,
    Break,
    Em,
    Inline,
    LineBlock,
    LineTime,
    LyricsDocument,
    ParagraphBlock,
    Ruby,
    Strong,
    Text,
)
from .plain_text import flatten


def _inline_to_dict(node: Inline) -> dict[str, Any]:
    if isinstance(node, Text):
        return {"type": "text", "text": node.text}
    if isinstance(node, Ruby):
        return {"type": "ruby", "base": node.base, "ruby": node.ruby}
    if isinstance(node, Em):
        return {"type": "em", "children": [_inline_to_dict(c) for c in node.children]}
    if isinstance(node, Strong):
        return {"type": "strong", "children": [_inline_to_dict(c) for c in node.children]}
    if isinstance(node, Annotation):
        return {"type": "annotation", "text": node.text, "note": node.note}
    return {"type": "br"}


def _block_to_dict(block: Block) -> dict[str, Any]:
    children = [_inline_to_dict(c) for c in block.children]
    if isinstance(block, ParagraphBlock):
        return {"type": "p", "children": children}
    out: dict[str, Any] = {"type": "line"}
    if block.time is not None:
        time: dict[str, int] = {"startMs": block.time.start_ms}
        if block.time.end_ms is not None:
            time["endMs"] = block.time.end_ms
        out["time"] = time
    out["children"] = children
    return out


def document_to_dict(doc: LyricsDocument) -> dict[str, Any]:
    out: dict[str, Any] = {"type": doc.type}
    if doc.languages is not None:
        out["meta"] = {"languages": list(doc.languages)}
    out["blocks"] = [_block_to_dict(b) for b in doc.blocks]
    return out


def _str(data: dict[str, Any], key: str, where: str) -> str:
    v = data.get(key, "")
    if not isinstance(v, str):
        raise DocumentDecodeError(f"{where}: '{key}' must be a string")
    return v


def _int(v: Any, where: str) -> int:
    # bool is an int subclass; reject it explicitly
    if isinstance(v, bool) or not isinstance(v, (int, float)):
        raise DocumentDecodeError(f"{where}: expected a number, got {v!r}")
    return int(v)


def _inlines_from_list(items: Any, where: str) -> tuple[Inline, ...]:
    if not isinstance(items, list):
        raise DocumentDecodeError(f"{where}: 'children' must be a list")
    return tuple(_inline_from_dict(item, f"{where}[{i}]") for i, item in enumerate(items))


def _inline_from_dict(data: Any, where: str) -> Inline:
    if not isinstance(data, dict):
        raise DocumentDecodeError(f"{where}: inline must be an object")
    kind = data.get("type")
    if kind == "text":
        return Text(text=_str(data, "text", where))
    if kind == "ruby":
        return Ruby(base=_str(data, "base", where), ruby=_str(data, "ruby", where))
    if kind == "em":
        return Em(children=_inlines_from_list(data.get("children", []), where))
    if kind == "strong":
        return Strong(children=_inlines_from_list(data.get("children", []), where))
    if kind == "annotation":
        return Annotation(text=_str(data, "text", where), note=_str(data, "note", where))
    if kind == "br":
        return Break()
    raise DocumentDecodeError(f"{where}: unknown inline type {kind!r}")


def _block_from_dict(data: Any, where: str) -> Block:
    if not isinstance(data, dict):
        raise DocumentDecodeError(f"{where}: block must be an object")
    kind = data.get("type")
    children = _inlines_from_list(data.get("children", []), where)
    if kind == "p":
        return ParagraphBlock(children=children)
    if kind != "line":
        raise DocumentDecodeError(f"{where}: unknown block type {kind!r}")

    raw_time = data.get("time")
    if raw_time is None:
        return LineBlock(time=None, children=children)
    if not isinstance(raw_time, dict) or "startMs" not in raw_time:
        raise DocumentDecodeError(f"{where}: 'time.startMs' is required")
    end = raw_time.get("endMs")
    time = LineTime(
        start_ms=_int(raw_time["startMs"], where),
        end_ms=_int(end, where) if end is not None else None,
    )
    return LineBlock(time=time, children=children)


def document_from_dict(data: Any) -> LyricsDocument:
    if not isinstance(data, dict) or data.get("type") != LyricsDocument.type:
        raise DocumentDecodeError("expected a record with type 'doc'")
    blocks = data.get("blocks", [])
    if not isinstance(blocks, list):
        raise DocumentDecodeError("'blocks' must be a list")

    languages: tuple[str, ...] | None = None
    meta = data.get("meta")
    if isinstance(meta, dict) and isinstance(meta.get("languages"), list):
        languages = tuple(str(x) for x in meta["languages"])

    return LyricsDocument(
        blocks=tuple(_block_from_dict(b, f"blocks[{i}]") for i, b in enumerate(blocks)),
        languages=languages,
    )


def dumps(doc: LyricsDocument) -> str:
    return json.dumps(document_to_dict(doc), ensure_ascii=False, indent=2)


def loads(text: str) -> LyricsDocument:
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise DocumentDecodeError(f"invalid JSON: {e}") from e
    # accept both a bare document and a persisted record
    if isinstance(data, dict) and "content" in data and data.get("type") != "doc":
        data = data["content"]
    return document_from_dict(data)


def to_record(doc: LyricsDocument, version_key: str = "default", is_default: bool = True) -> dict[str, Any]:
    """Persisted shape; plainText is always recomputed from the content."""
    return {
        "versionKey": version_key,
        "isDefault": is_default,
        "format": AST_FORMAT,
        "content": document_to_dict(doc),
        "plainText": flatten(doc.blocks),
    }
