from __future__ import annotations

import math
from dataclasses import dataclass

from koiro_lyrics.ast.model import LineBlock, LyricsDocument


@dataclass(frozen=True, slots=True)
class LyricLine:
    index: int
    start_ms: int
    end_ms: int | None
    block: LineBlock


@dataclass(frozen=True, slots=True)
class LyricsSync:
    lines: tuple[LyricLine, ...]
    current_index: int
    prev_line: LyricLine | None
    current_line: LyricLine | None
    next_line: LyricLine | None
    # before the first line starts; the three lines are a preview, none current
    is_preview: bool

    @property
    def has_lyrics(self) -> bool:
        return bool(self.lines)


def seconds_to_ms(seconds: float) -> int:
    return math.floor(seconds * 1000)


def extract_lines(doc: LyricsDocument | None) -> tuple[LyricLine, ...]:
    """Timed LineBlocks in document order; paragraphs and untimed lines are skipped."""
    if doc is None:
        return ()
    out: list[LyricLine] = []
    for block in doc.blocks:
        if isinstance(block, LineBlock) and block.time is not None:
            out.append(
                LyricLine(
                    index=len(out),
                    start_ms=block.time.start_ms,
                    end_ms=block.time.end_ms,
                    block=block,
                )
            )
    return tuple(out)


def find_current_index(lines: tuple[LyricLine, ...] | list[LyricLine], current_time_ms: float) -> int:
    """
    Greatest k with lines[k].start_ms <= current_time_ms, or -1 when there are
    no lines or playback has not reached the first one. end_ms is ignored:
    a line stays current until the next one starts.
    """
    if not lines:
        return -1
    if current_time_ms < lines[0].start_ms:
        return -1

    left, right = 0, len(lines) - 1
    while left < right:
        mid = (left + right + 1) // 2
        if lines[mid].start_ms <= current_time_ms:
            left = mid
        else:
            right = mid - 1
    return left


def sync_lines(lines: tuple[LyricLine, ...], current_time_ms: float) -> LyricsSync:
    idx = find_current_index(lines, current_time_ms)

    if idx == -1 and lines:
        return LyricsSync(
            lines=lines,
            current_index=-1,
            prev_line=lines[0],
            current_line=lines[1] if len(lines) > 1 else None,
            next_line=lines[2] if len(lines) > 2 else None,
            is_preview=True,
        )
    if idx >= 0:
        return LyricsSync(
            lines=lines,
            current_index=idx,
            prev_line=lines[idx - 1] if idx > 0 else None,
            current_line=lines[idx],
            next_line=lines[idx + 1] if idx < len(lines) - 1 else None,
            is_preview=False,
        )
    return LyricsSync(
        lines=lines,
        current_index=-1,
        prev_line=None,
        current_line=None,
        next_line=None,
        is_preview=False,
    )


def sync(doc: LyricsDocument | None, current_time_ms: float) -> LyricsSync:
    return sync_lines(extract_lines(doc), current_time_ms)


@dataclass(slots=True)
class LineTracker:
    """
    Caller-side memoization for a render loop: lines are derived once per
    document, and changed_index() reports only when the current line moves.
    """

    lines: tuple[LyricLine, ...]
    last_idx: int | None = None

    @classmethod
    def from_document(cls, doc: LyricsDocument | None) -> "LineTracker":
        return cls(lines=extract_lines(doc))

    def current_index(self, now_ms: float) -> int:
        return find_current_index(self.lines, now_ms)

    def sync(self, now_ms: float) -> LyricsSync:
        return sync_lines(self.lines, now_ms)

    def changed_index(self, now_ms: float) -> int | None:
        i = self.current_index(now_ms)
        if i != self.last_idx:
            self.last_idx = i
            return i
        return None
