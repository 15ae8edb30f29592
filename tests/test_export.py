import json

from koiro_lyrics.ast.builder import LineDraft, build_document
from koiro_lyrics.ast.model import AST_FORMAT
from koiro_lyrics.lrc.export import export_json, export_lrc, export_srt


def _doc():
    return build_document(
        [
            LineDraft(start_ms=0, text="君/の声が", ruby_by_index={0: "きみ"}),
            LineDraft(start_ms=1000, text="b"),
        ]
    )


def test_export_srt_basic():
    srt = export_srt(_doc(), last_line_duration_ms=2000)
    assert "00:00:00,000 --> 00:00:01,000" in srt
    assert "00:00:01,000 --> 00:00:03,000" in srt
    assert "\n君の声が\n" in srt
    assert "\nb\n" in srt


def test_export_srt_uses_end_ms():
    doc = build_document([LineDraft(start_ms=0, end_ms=400, text="a"), LineDraft(start_ms=1000, text="b")])
    assert "00:00:00,000 --> 00:00:00,400" in export_srt(doc)


def test_export_lrc():
    assert export_lrc(_doc(), tags={"ti": "T"}) == "[ti:T]\n[00:00.00]君の声が\n[00:01.00]b\n"


def test_export_json_carries_format_and_plain_text():
    data = json.loads(export_json(_doc()))
    assert data["format"] == AST_FORMAT
    assert data["plainText"] == "君の声が\nb"
    assert data["content"]["blocks"][0]["children"][0] == {"type": "ruby", "base": "君", "ruby": "きみ"}
