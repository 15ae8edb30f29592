from __future__ import annotations

import json

from koiro_lyrics.ast.codec import document_to_dict
from koiro_lyrics.ast.model import AST_FORMAT, LyricsDocument
from koiro_lyrics.ast.plain_text import flatten, flatten_line
from koiro_lyrics.sync.tracker import extract_lines


def export_json(doc: LyricsDocument) -> str:
    return json.dumps(
        {
            "format": AST_FORMAT,
            "content": document_to_dict(doc),
            "plainText": flatten(doc.blocks),
        },
        ensure_ascii=False,
        indent=2,
    )


def _fmt_lrc_time(ms: int) -> str:
    m, rem = divmod(max(ms, 0), 60_000)
    s, ms2 = divmod(rem, 1_000)
    # keep 2 decimals for compatibility
    return f"{m:02d}:{s:02d}.{ms2 // 10:02d}"


def export_lrc(doc: LyricsDocument, tags: dict[str, str] | None = None) -> str:
    out: list[str] = []
    for k in sorted((tags or {}).keys()):
        out.append(f"[{k}:{tags[k]}]")
    for line in extract_lines(doc):
        out.append(f"[{_fmt_lrc_time(line.start_ms)}]{flatten_line(line.block)}")
    return "\n".join(out) + ("\n" if out else "")


def _fmt_srt_time(ms: int) -> str:
    # HH:MM:SS,mmm
    h, rem = divmod(max(ms, 0), 3_600_000)
    m, rem = divmod(rem, 60_000)
    s, ms2 = divmod(rem, 1_000)
    return f"{h:02d}:{m:02d}:{s:02d},{ms2:03d}"


def export_srt(doc: LyricsDocument, last_line_duration_ms: int = 2000) -> str:
    """
    End time is the line's own endMs when set, else next start time;
    last line ends at +last_line_duration_ms.
    """
    lines = extract_lines(doc)
    if not lines:
        return ""
    out: list[str] = []
    for i, line in enumerate(lines, start=1):
        start = line.start_ms
        if line.end_ms is not None and line.end_ms > start:
            end = line.end_ms
        elif i < len(lines):
            end = max(lines[i].start_ms, start + 1)
        else:
            end = start + last_line_duration_ms
        out.append(str(i))
        out.append(f"{_fmt_srt_time(start)} --> {_fmt_srt_time(end)}")
        out.append(flatten_line(line.block))
        out.append("")
    return "\n".join(out)
