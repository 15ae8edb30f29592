from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar, Union

AST_FORMAT = "KOIRO_AST_V1"


@dataclass(frozen=True, slots=True)
class Text:
    text: str


@dataclass(frozen=True, slots=True)
class Ruby:
    base: str
    ruby: str


@dataclass(frozen=True, slots=True)
class Em:
    children: tuple[Inline, ...]


@dataclass(frozen=True, slots=True)
class Strong:
    children: tuple[Inline, ...]


@dataclass(frozen=True, slots=True)
class Annotation:
    text: str
    note: str


@dataclass(frozen=True, slots=True)
class Break:
    pass


Inline = Union[Text, Ruby, Em, Strong, Annotation, Break]


@dataclass(frozen=True, slots=True)
class LineTime:
    start_ms: int
    end_ms: int | None = None


@dataclass(frozen=True, slots=True)
class LineBlock:
    """One timed lyric line. `time` is None only for untimed stored content."""

    time: LineTime | None
    children: tuple[Inline, ...]


@dataclass(frozen=True, slots=True)
class ParagraphBlock:
    """Untimed prose (liner notes etc.), never part of playback or search."""

    children: tuple[Inline, ...]


Block = Union[LineBlock, ParagraphBlock]


@dataclass(frozen=True, slots=True)
class LyricsDocument:
    type: ClassVar[str] = "doc"

    blocks: tuple[Block, ...]
    # rendering hint only
    languages: tuple[str, ...] | None = None
