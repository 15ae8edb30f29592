from __future__ import annotations

from dataclasses import dataclass

import regex


@dataclass(frozen=True, slots=True)
class HighlightSegment:
    text: str
    highlight: bool = False


def keyword_pattern(keyword: str) -> regex.Pattern[str]:
    # matched against the original text so offsets never drift from lower()
    return regex.compile(regex.escape(keyword), regex.IGNORECASE)


def highlight(text: str, keyword: str) -> list[HighlightSegment]:
    """
    Split `text` into plain and highlighted runs of case-insensitive matches,
    keeping the original casing.
    "Rain Radio" / "ra" -> [Ra*] [in ] [Ra*] [dio]
    """
    if not keyword or not text:
        return [HighlightSegment(text=text)]

    out: list[HighlightSegment] = []
    pos = 0
    for m in keyword_pattern(keyword).finditer(text):
        if m.start() > pos:
            out.append(HighlightSegment(text=text[pos : m.start()]))
        out.append(HighlightSegment(text=m.group(), highlight=True))
        pos = m.end()

    if pos < len(text) or not out:
        out.append(HighlightSegment(text=text[pos:]))
    return out
