from __future__ import annotations

import signal
import sys
from dataclasses import dataclass
from typing import Callable, Iterable

import colorama

from koiro_lyrics.ast.model import Annotation, Break, Em, Inline, Ruby, Strong, Text
from koiro_lyrics.i18n import t
from koiro_lyrics.search.highlight import HighlightSegment
from koiro_lyrics.search.scorer import ScoredResult
from koiro_lyrics.sync.tracker import LyricLine, LyricsSync

CSI = "\x1b["


def _sgr(*codes: int) -> str:
    return CSI + ";".join(str(c) for c in codes) + "m"


@dataclass(frozen=True, slots=True)
class Theme:
    title: str = _sgr(36, 1)  # cyan bold
    current: str = _sgr(32, 1)  # green bold
    dim: str = _sgr(90)  # bright black
    ruby: str = _sgr(35)  # magenta
    highlight: str = _sgr(33, 1)  # yellow bold
    italic: str = _sgr(3)
    bold: str = _sgr(1)
    reset: str = _sgr(0)


def render_inlines(inlines: Iterable[Inline], theme: Theme, base: str = "") -> str:
    """Single-line terminal form: ruby as base(gloss), breaks as ' / '."""
    out: list[str] = []
    for node in inlines:
        if isinstance(node, Text):
            out.append(node.text)
        elif isinstance(node, Ruby):
            out.append(f"{node.base}{theme.ruby}({node.ruby}){theme.reset}{base}")
        elif isinstance(node, Em):
            out.append(f"{theme.italic}{render_inlines(node.children, theme, base + theme.italic)}{theme.reset}{base}")
        elif isinstance(node, Strong):
            out.append(f"{theme.bold}{render_inlines(node.children, theme, base + theme.bold)}{theme.reset}{base}")
        elif isinstance(node, Annotation):
            out.append(f"{node.text}{theme.dim}[{node.note}]{theme.reset}{base}")
        elif isinstance(node, Break):
            out.append(" / ")
    return "".join(out)


def render_segments(segments: Iterable[HighlightSegment], theme: Theme) -> str:
    return "".join(f"{theme.highlight}{s.text}{theme.reset}" if s.highlight else s.text for s in segments)


def format_results(results: Iterable[ScoredResult], theme: Theme | None = None, start: int = 1) -> list[str]:
    theme = theme or Theme()
    out: list[str] = []
    for i, r in enumerate(results, start):
        out.append(f"{i}. {render_segments(r.title_highlights, theme)}  {theme.dim}[{r.score:g}]{theme.reset}")
        for sh in r.staff_highlights:
            out.append(f"   {sh.role} · {render_segments(sh.name, theme)}")
        if r.snippet_highlights:
            out.append(f"   {theme.dim}»{theme.reset} {render_segments(r.snippet_highlights, theme)}")
        out.append(f"   {theme.dim}{r.item.id}  ({', '.join(r.match_types)}){theme.reset}")
    return out


class AnsiRenderer:
    def __init__(self, use_alt_screen: bool = True, theme: Theme | None = None):
        self.use_alt_screen = use_alt_screen
        self.theme = theme or Theme()
        self._entered = False
        self._resize_handler: Callable[[], None] | None = None
        self._last_render_args: tuple[str, LyricsSync] | None = None

    def __enter__(self):
        self.enter()
        return self

    def __exit__(self, exc_type, exc, tb):
        self.exit()

    def enter(self) -> None:
        if self._entered:
            return
        colorama.just_fix_windows_console()
        if self.use_alt_screen:
            sys.stdout.write(CSI + "?1049h")  # alt screen
        sys.stdout.write(CSI + "?25l")  # hide cursor
        sys.stdout.write(CSI + "H" + CSI + "2J")  # home + clear
        sys.stdout.flush()
        self._entered = True

        def _on_resize(signum=None, frame=None):
            if self._last_render_args:
                self.render(*self._last_render_args)

        self._resize_handler = _on_resize
        # SIGWINCH is POSIX only
        if hasattr(signal, "SIGWINCH"):
            signal.signal(signal.SIGWINCH, _on_resize)

    def exit(self) -> None:
        if not self._entered:
            return
        if self._resize_handler and hasattr(signal, "SIGWINCH"):
            signal.signal(signal.SIGWINCH, signal.SIG_DFL)
        self._resize_handler = None
        sys.stdout.write(self.theme.reset)
        sys.stdout.write(CSI + "?25h")  # show cursor
        if self.use_alt_screen:
            sys.stdout.write(CSI + "?1049l")  # normal screen
        sys.stdout.flush()
        self._entered = False
        self._last_render_args = None

    def _line(self, line: LyricLine | None, current: bool) -> str:
        if line is None:
            return ""
        style = self.theme.current if current else self.theme.dim
        text = render_inlines(line.block.children, self.theme, base=style)
        marker = "> " if current else "  "
        return f"{marker}{style}{text}{self.theme.reset}"

    def frame(self, title: str, state: LyricsSync) -> list[str]:
        out = [f"{self.theme.title}♫ {title} ♫{self.theme.reset}", ""]
        if not state.has_lyrics:
            out.append(f"{self.theme.dim}{t('no_lyrics')}{self.theme.reset}")
            return out
        if state.is_preview:
            # nothing is current before the first line starts
            out.append(f"{self.theme.dim}{t('preview')}{self.theme.reset}")
        out.append(self._line(state.prev_line, False))
        out.append(self._line(state.current_line, not state.is_preview))
        out.append(self._line(state.next_line, False))
        return out

    def render(self, title: str, state: LyricsSync) -> None:
        # Store args for SIGWINCH redraw
        self._last_render_args = (title, state)

        out = self.frame(title, state)

        # move home + clear, then print full frame
        sys.stdout.write(CSI + "H" + CSI + "2J")
        sys.stdout.write("\n".join(out))
        sys.stdout.write(self.theme.reset)
        sys.stdout.flush()
