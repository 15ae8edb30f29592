from koiro_lyrics.ast.builder import (
    LineDraft,
    build_document,
    build_inlines,
    build_line_inlines,
)
from koiro_lyrics.ast.model import Break, LineBlock, LineTime, Ruby, Text


def test_build_ruby_and_text():
    assert build_inlines("君/の声が", {0: "きみ"}) == [Ruby(base="君", ruby="きみ"), Text(text="の声が")]


def test_build_without_ruby_map():
    assert build_inlines("a/b") == [Text("a"), Text("b")]


def test_empty_input_gives_single_empty_text():
    assert build_inlines("") == [Text("")]
    assert build_line_inlines("") == [Text("")]


def test_only_separators_degrades_to_empty_text():
    assert build_inlines("///") == [Text("")]


def test_empty_tokens_do_not_advance_index():
    # "/君//声/" keeps two tokens: 君 -> 0, 声 -> 1
    out = build_inlines("/君//声/", {0: "きみ", 1: "こえ"})
    assert out == [Ruby("君", "きみ"), Ruby("声", "こえ")]


def test_empty_annotation_and_out_of_range_index_are_plain_text():
    out = build_inlines("空/を", {0: "", 5: "x"})
    assert out == [Text("空"), Text("を")]


def test_newlines_insert_breaks_with_running_index():
    out = build_line_inlines("君/と\n空/へ", {0: "きみ", 2: "そら"})
    assert out == [
        Ruby("君", "きみ"),
        Text("と"),
        Break(),
        Ruby("空", "そら"),
        Text("へ"),
    ]


def test_empty_segment_between_newlines():
    assert build_line_inlines("a\n\nb") == [Text("a"), Break(), Text(""), Break(), Text("b")]


def test_build_document_from_drafts():
    doc = build_document(
        [
            LineDraft(start_ms=10500, end_ms=14200, text="君/の声が", ruby_by_index={0: "きみ"}),
            LineDraft(start_ms=16800, text="世界を変える"),
        ]
    )
    assert doc.languages == ("ja",)
    assert doc.blocks[0] == LineBlock(
        time=LineTime(10500, 14200),
        children=(Ruby("君", "きみ"), Text("の声が")),
    )
    assert doc.blocks[1].time == LineTime(16800, None)