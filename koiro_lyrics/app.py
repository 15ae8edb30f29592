from __future__ import annotations

import logging
import signal
import time
from typing import Callable

from koiro_lyrics.ast.model import LyricsDocument
from koiro_lyrics.config import AppConfig
from koiro_lyrics.render.ansi import AnsiRenderer
from koiro_lyrics.sync.tracker import LineTracker, seconds_to_ms

logger = logging.getLogger(__name__)

TAIL_MS = 3000


def play(
    cfg: AppConfig,
    doc: LyricsDocument | None,
    *,
    title: str,
    start_s: float = 0.0,
    renderer: AnsiRenderer | None = None,
    clock: Callable[[], float] = time.monotonic,
    sleep: Callable[[float], None] = time.sleep,
) -> int:
    """
    Main playback loop:
    clock -> elapsed seconds -> ms -> tracker -> render on change.
    Stops TAIL_MS after the last line starts.
    """
    renderer = renderer or AnsiRenderer(use_alt_screen=cfg.use_alt_screen)
    tracker = LineTracker.from_document(doc)
    if not tracker.lines:
        logger.info("Document has no timed lines")

    end_ms = (tracker.lines[-1].start_ms if tracker.lines else 0) + TAIL_MS
    tick_s = 1.0 / max(cfg.refresh_hz, 1.0)

    renderer.enter()
    previous = signal.getsignal(signal.SIGINT)

    # Handle SIGINT (Ctrl+C) gracefully
    def _on_sigint(signum, frame):
        renderer.exit()
        raise KeyboardInterrupt

    signal.signal(signal.SIGINT, _on_sigint)

    t0 = clock() - start_s
    try:
        while True:
            now_ms = seconds_to_ms(clock() - t0)
            if tracker.changed_index(now_ms) is not None:
                state = tracker.sync(now_ms)
                logger.debug("t=%dms line=%d preview=%s", now_ms, state.current_index, state.is_preview)
                renderer.render(title, state)
            if now_ms >= end_ms:
                return 0
            sleep(tick_s)
    except KeyboardInterrupt:
        return 130
    finally:
        signal.signal(signal.SIGINT, previous)
        renderer.exit()
