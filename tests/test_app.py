from __future__ import annotations

from dataclasses import replace
from unittest.mock import Mock

from koiro_lyrics.app import TAIL_MS, play
from koiro_lyrics.ast.builder import LineDraft, build_document
from koiro_lyrics.config import load_config


class FakeClock:
    def __init__(self, step_s: float):
        self.now = 100.0
        self.step_s = step_s

    def __call__(self) -> float:
        return self.now

    def sleep(self, _s: float) -> None:
        self.now += self.step_s


def test_play_renders_on_line_changes_only():
    doc = build_document(
        [
            LineDraft(start_ms=500, text="a"),
            LineDraft(start_ms=1000, text="b"),
        ]
    )
    cfg = replace(load_config(), use_alt_screen=False)
    renderer = Mock()
    clock = FakeClock(step_s=0.25)

    code = play(cfg, doc, title="T", renderer=renderer, clock=clock, sleep=clock.sleep)

    assert code == 0
    renderer.enter.assert_called_once()
    renderer.exit.assert_called()
    states = [c.args[1] for c in renderer.render.call_args_list]
    assert [s.current_index for s in states] == [-1, 0, 1]
    assert states[0].is_preview
    assert clock.now >= 100.0 + (1000 + TAIL_MS) / 1000


def test_play_start_offset_skips_preview():
    doc = build_document([LineDraft(start_ms=0, text="a"), LineDraft(start_ms=5000, text="b")])
    renderer = Mock()
    clock = FakeClock(step_s=1.0)

    play(load_config(), doc, title="T", start_s=6.0, renderer=renderer, clock=clock, sleep=clock.sleep)

    states = [c.args[1] for c in renderer.render.call_args_list]
    assert [s.current_index for s in states] == [1]


def test_play_without_lyrics_renders_empty_state():
    renderer = Mock()
    clock = FakeClock(step_s=1.0)

    assert play(load_config(), None, title="T", renderer=renderer, clock=clock, sleep=clock.sleep) == 0
    state = renderer.render.call_args_list[0].args[1]
    assert not state.has_lyrics
