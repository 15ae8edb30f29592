from __future__ import annotations

import logging
import re
from dataclasses import dataclass

from koiro_lyrics.ast.builder import LineDraft

logger = logging.getLogger(__name__)

_TS_RE = re.compile(r"\[(\d{1,2}):(\d{2})(?:\.(\d+))?\]")  # [mm:ss] / [mm:ss.x...], fraction cut to ms
_OFFSET_RE = re.compile(r"^\[offset:([+-]?\d+)\]\s*$", re.IGNORECASE)
_TAG_RE = re.compile(r"^\[([a-zA-Z]{1,8}):(.*)\]\s*$")


class LrcParseError(ValueError):
    pass


@dataclass(frozen=True, slots=True)
class LrcImport:
    lines: tuple[LineDraft, ...]
    offset_ms: int = 0
    tags: dict[str, str] | None = None


@dataclass(frozen=True, slots=True)
class LrcParseStats:
    lines_total: int
    drafts_total: int
    lines_with_timestamps: int
    lines_untimed: int
    lines_ignored: int


def _parse_ts_to_ms(m: int, s: int, frac: str | None) -> int:
    if not (0 <= s <= 59):
        raise LrcParseError(f"Invalid seconds: {s}")
    if frac is None:
        ms = 0
    else:
        # "2" -> 200ms, "23" -> 230ms, "2345" -> 234ms
        ms = int(frac.ljust(3, "0")[:3])
    return (m * 60 + s) * 1000 + ms


def parse_lrc_with_stats(text: str) -> tuple[LrcImport, LrcParseStats]:
    """
    Supported:
    - [mm:ss] and [mm:ss.f...]; the fraction is padded or cut to 3 digits
    - multiple timestamps per line (one draft per timestamp)
    - [offset:+/-ms]
    - basic tags: [ar:], [ti:], [al:], ...

    A non-empty line without timestamps becomes a draft at 0 ms.
    Drafts are sorted by start time; equal times keep file order.
    """
    offset_ms = 0
    tags: dict[str, str] = {}
    # (start_ms before offset, file line number, text, timed)
    found: list[tuple[int, int, str, bool]] = []

    total = 0
    lines_with_ts = 0
    untimed = 0
    ignored = 0

    for lineno, raw in enumerate(text.splitlines()):
        total += 1
        line = raw.rstrip("\r\n")
        if not line.strip():
            ignored += 1
            continue

        off = _OFFSET_RE.match(line)
        if off:
            offset_ms = int(off.group(1))
            continue

        tag = _TAG_RE.match(line)
        if tag and not _TS_RE.search(line):
            k = tag.group(1).strip().lower()
            v = tag.group(2).strip()
            if k and v:
                tags[k] = v
            continue

        payload = _TS_RE.sub("", line).strip()
        ts = list(_TS_RE.finditer(line))
        if not ts:
            untimed += 1
            found.append((0, lineno, payload, False))
            continue

        lines_with_ts += 1
        for m in ts:
            found.append((_parse_ts_to_ms(int(m.group(1)), int(m.group(2)), m.group(3)), lineno, payload, True))

    drafts: list[LineDraft] = []
    for t_ms, lineno, payload, timed in found:
        if timed:
            t_ms = max(t_ms + offset_ms, 0)
        drafts.append(LineDraft(start_ms=t_ms, text=payload, id=f"lrc_{lineno}_{t_ms}"))
    drafts.sort(key=lambda d: d.start_ms)

    if ignored:
        logger.debug("LRC: %d blank lines ignored", ignored)

    doc = LrcImport(lines=tuple(drafts), offset_ms=offset_ms, tags=tags)
    stats = LrcParseStats(
        lines_total=total,
        drafts_total=len(drafts),
        lines_with_timestamps=lines_with_ts,
        lines_untimed=untimed,
        lines_ignored=ignored,
    )
    return doc, stats


def parse_lrc(text: str) -> LrcImport:
    doc, _stats = parse_lrc_with_stats(text)
    return doc
