from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Mapping

from .model import Break, Inline, LineBlock, LineTime, LyricsDocument, Ruby, Text

_SEPARATOR = "/"


@dataclass(frozen=True, slots=True)
class LineDraft:
    """One line as entered in the editor: raw text plus sparse ruby map."""

    start_ms: int
    text: str
    end_ms: int | None = None
    ruby_by_index: Mapping[int, str] | None = None
    id: str | None = None


@dataclass(slots=True)
class _TokenCounter:
    value: int = 0


def _build_segment(
    text: str,
    ruby_by_index: Mapping[int, str] | None,
    counter: _TokenCounter,
) -> list[Inline]:
    out: list[Inline] = []
    for token in text.split(_SEPARATOR):
        if not token:
            continue
        ruby = ruby_by_index.get(counter.value) if ruby_by_index else None
        if ruby:
            out.append(Ruby(base=token, ruby=ruby))
        else:
            out.append(Text(text=token))
        # positional: only kept tokens advance the index
        counter.value += 1
    return out


def build_inlines(raw_text: str, ruby_by_index: Mapping[int, str] | None = None) -> list[Inline]:
    """
    "君/の声が", {0: "きみ"} -> [Ruby("君", "きみ"), Text("の声が")]

    Never returns an empty list; degenerate input degrades to [Text("")].
    """
    if not raw_text:
        return [Text(text="")]
    out = _build_segment(raw_text, ruby_by_index, _TokenCounter())
    return out or [Text(text="")]


def build_line_inlines(raw_text: str, ruby_by_index: Mapping[int, str] | None = None) -> list[Inline]:
    """
    Like build_inlines, but embedded newlines become Break nodes.
    The ruby index keeps running across segments.
    """
    if not raw_text:
        return [Text(text="")]

    segments = raw_text.replace("\r\n", "\n").split("\n")
    counter = _TokenCounter()
    out: list[Inline] = []
    for i, segment in enumerate(segments):
        out.extend(_build_segment(segment, ruby_by_index, counter) or [Text(text="")])
        if i < len(segments) - 1:
            out.append(Break())
    return out


def build_block(draft: LineDraft) -> LineBlock:
    return LineBlock(
        time=LineTime(start_ms=draft.start_ms, end_ms=draft.end_ms),
        children=tuple(build_line_inlines(draft.text, draft.ruby_by_index)),
    )


def build_blocks(drafts: Iterable[LineDraft]) -> list[LineBlock]:
    return [build_block(d) for d in drafts]


def build_document(
    drafts: Iterable[LineDraft],
    languages: Iterable[str] | None = ("ja",),
) -> LyricsDocument:
    return LyricsDocument(
        blocks=tuple(build_blocks(drafts)),
        languages=tuple(languages) if languages is not None else None,
    )
