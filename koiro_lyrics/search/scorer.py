from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Iterable, Sequence

import regex

from .highlight import HighlightSegment, highlight, keyword_pattern

logger = logging.getLogger(__name__)

TITLE_WEIGHT = 100
STAFF_WEIGHT = 50
LYRICS_WEIGHT = 20

EXACT_BONUS = 0.5
PREFIX_BONUS = 0.3

SNIPPET_CONTEXT = 15
ELLIPSIS = "..."
NAME_JOINER = "、"


@dataclass(frozen=True, slots=True)
class StaffEntry:
    role: str
    name: str | tuple[str, ...]

    @property
    def names(self) -> tuple[str, ...]:
        if isinstance(self.name, str):
            return (self.name,)
        return tuple(self.name)

    @property
    def display_name(self) -> str:
        return format_staff_name(self.name)


@dataclass(frozen=True, slots=True)
class SearchableItem:
    id: str
    title: str
    staff: tuple[StaffEntry, ...] = ()
    # flattened text of each lyric version, see ast.plain_text.flatten
    lyrics_plain_texts: tuple[str, ...] = ()
    description: str | None = None


@dataclass(frozen=True, slots=True)
class StaffHighlight:
    role: str
    name: list[HighlightSegment]


@dataclass(frozen=True, slots=True)
class ScoredResult:
    item: SearchableItem
    score: float
    match_types: tuple[str, ...]
    match_snippet: str | None
    title_highlights: list[HighlightSegment]
    staff_highlights: list[StaffHighlight]
    snippet_highlights: list[HighlightSegment] | None


@dataclass(frozen=True, slots=True)
class SearchPage:
    results: list[ScoredResult]
    total: int
    page: int
    page_size: int
    total_pages: int


def format_staff_name(name: str | Sequence[str] | None) -> str:
    if not name:
        return ""
    if isinstance(name, str):
        return name
    return NAME_JOINER.join(n for n in name if n)


def _snippet(line: str, m: regex.Match[str]) -> str:
    start = max(0, m.start() - SNIPPET_CONTEXT)
    end = min(len(line), m.end() + SNIPPET_CONTEXT)
    prefix = ELLIPSIS if start > 0 else ""
    suffix = ELLIPSIS if end < len(line) else ""
    return prefix + line[start:end] + suffix


def _first_lyric_snippet(plain_texts: Iterable[str], pattern: regex.Pattern[str]) -> str | None:
    for text in plain_texts:
        if not text or pattern.search(text) is None:
            continue
        for line in text.split("\n"):
            m = pattern.search(line)
            if m is not None:
                return _snippet(line, m)
    return None


def _score_item(
    item: SearchableItem, keyword: str, pattern: regex.Pattern[str]
) -> tuple[float, list[str], str | None]:
    score = 0.0
    match_types: list[str] = []
    snippet: str | None = None

    title_lower = item.title.lower()
    if pattern.search(item.title):
        score += TITLE_WEIGHT
        if title_lower.strip() == keyword:
            score += TITLE_WEIGHT * EXACT_BONUS
        if title_lower.startswith(keyword):
            score += TITLE_WEIGHT * PREFIX_BONUS
        match_types.append("title")

    staff_hit = False
    for entry in item.staff:
        for name in entry.names:
            if not name or pattern.search(name) is None:
                continue
            name_lower = name.lower()
            score += STAFF_WEIGHT
            if name_lower.strip() == keyword:
                score += STAFF_WEIGHT * EXACT_BONUS
            match_types.append("staff")
            snippet = f"{entry.role}: {entry.display_name}"
            staff_hit = True
            break
        if staff_hit:
            break

    lyric_snippet = _first_lyric_snippet(item.lyrics_plain_texts, pattern)
    if lyric_snippet is not None:
        score += LYRICS_WEIGHT
        match_types.append("lyrics")
        if snippet is None:
            snippet = lyric_snippet

    return score, match_types, snippet


def search(corpus: Iterable[SearchableItem], keyword: str) -> list[ScoredResult]:
    """
    Rank items against a keyword by case-insensitive substring match.

    Title hits weigh 100, staff names 50, lyric text 20. Title and staff get
    +50% for an exact match and titles +30% for a prefix match. Staff and
    lyrics score at most once per item. Items that match nothing are dropped;
    equal scores keep corpus order.
    """
    term = (keyword or "").strip()
    needle = term.lower()
    if not needle:
        return []

    pattern = keyword_pattern(term)
    scored: list[ScoredResult] = []
    total = 0
    for item in corpus:
        total += 1
        score, match_types, snippet = _score_item(item, needle, pattern)
        if score <= 0:
            continue
        scored.append(
            ScoredResult(
                item=item,
                score=score,
                match_types=tuple(match_types),
                match_snippet=snippet,
                title_highlights=highlight(item.title, term),
                staff_highlights=[
                    StaffHighlight(role=e.role, name=highlight(e.display_name, term)) for e in item.staff
                ],
                snippet_highlights=highlight(snippet, term) if snippet is not None else None,
            )
        )

    scored.sort(key=lambda r: r.score, reverse=True)
    logger.debug("search %r: %d of %d items matched", needle, len(scored), total)
    return scored


def paginate(results: Sequence[ScoredResult], page: int = 1, page_size: int = 20) -> SearchPage:
    page = max(page, 1)
    page_size = max(page_size, 1)
    start = (page - 1) * page_size
    return SearchPage(
        results=list(results[start : start + page_size]),
        total=len(results),
        page=page,
        page_size=page_size,
        total_pages=math.ceil(len(results) / page_size),
    )
