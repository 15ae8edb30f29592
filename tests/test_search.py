from koiro_lyrics.search.highlight import HighlightSegment, highlight
from koiro_lyrics.search.scorer import (
    SearchableItem,
    StaffEntry,
    format_staff_name,
    paginate,
    search,
)


def _ids(results):
    return [r.item.id for r in results]


def test_exact_beats_prefix_beats_contains():
    corpus = [
        SearchableItem(id="a", title="Glass Sea"),
        SearchableItem(id="b", title="Sea Glass"),
        SearchableItem(id="c", title="Sea"),
    ]
    results = search(corpus, "sea")
    assert _ids(results) == ["c", "b", "a"]
    assert [r.score for r in results] == [180, 130, 100]


def test_empty_keyword_returns_nothing():
    corpus = [SearchableItem(id="a", title="Anything")]
    assert search(corpus, "") == []
    assert search(corpus, "   ") == []


def test_keyword_is_trimmed_and_case_insensitive():
    corpus = [SearchableItem(id="a", title="Blue Moon")]
    assert _ids(search(corpus, "  MOON ")) == ["a"]


def test_zero_score_items_are_excluded():
    corpus = [
        SearchableItem(id="miss", title="Nothing here"),
        SearchableItem(id="hit", title="Rain"),
        SearchableItem(id="miss2", title="Snow", staff=(StaffEntry("作曲", "Kai"),)),
    ]
    assert _ids(search(corpus, "rain")) == ["hit"]


def test_staff_scored_once_per_item():
    item = SearchableItem(
        id="s",
        title="Untitled",
        staff=(
            StaffEntry("作词", ("Mika", "Aoi")),
            StaffEntry("编曲", "Aoi"),
        ),
    )
    [res] = search([item], "aoi")
    # 50 + exact 25, no second award for the arranger entry
    assert res.score == 75
    assert res.match_types == ("staff",)
    assert res.match_snippet == "作词: Mika、Aoi"


def test_staff_partial_match_has_no_exact_bonus():
    item = SearchableItem(id="s", title="x", staff=(StaffEntry("vocal", "Aoi Sora"),))
    assert search([item], "sora")[0].score == 50


def test_lyrics_scored_once_and_snippet_from_first_matching_line():
    item = SearchableItem(
        id="l",
        title="Untitled",
        lyrics_plain_texts=(
            "first line\nthe rain keeps falling over the quiet harbour\nrain again",
            "rain in another version",
        ),
    )
    [res] = search([item], "rain")
    assert res.score == 20
    assert res.match_types == ("lyrics",)
    assert res.match_snippet == "the rain keeps falling ..."


def test_snippet_ellipsis_both_sides():
    line = "a" * 20 + "KEY" + "b" * 20
    item = SearchableItem(id="l", title="t", lyrics_plain_texts=(line,))
    [res] = search([item], "key")
    assert res.match_snippet == "..." + "a" * 15 + "KEY" + "b" * 15 + "..."


def test_staff_snippet_takes_precedence_over_lyrics():
    item = SearchableItem(
        id="x",
        title="t",
        staff=(StaffEntry("作词", "Umi"),),
        lyrics_plain_texts=("umi no oto",),
    )
    [res] = search([item], "umi")
    assert res.score == 50 + 25 + 20
    assert res.match_types == ("staff", "lyrics")
    assert res.match_snippet == "作词: Umi"


def test_title_only_match_has_no_snippet():
    [res] = search([SearchableItem(id="t", title="Rain Radio")], "radio")
    assert res.match_snippet is None
    assert res.snippet_highlights is None


def test_ties_keep_corpus_order():
    corpus = [SearchableItem(id=str(i), title=f"song {i}") for i in range(5)]
    assert _ids(search(corpus, "song")) == ["0", "1", "2", "3", "4"]


def test_highlights_attached_to_results():
    item = SearchableItem(
        id="h",
        title="Rain Radio",
        staff=(StaffEntry("vocal", ("Ran", "Kei")),),
    )
    [res] = search([item], "ra")
    assert res.title_highlights == [
        HighlightSegment("Ra", True),
        HighlightSegment("in "),
        HighlightSegment("Ra", True),
        HighlightSegment("dio"),
    ]
    assert res.staff_highlights[0].role == "vocal"
    assert res.staff_highlights[0].name == [HighlightSegment("Ra", True), HighlightSegment("n、Kei")]
    assert res.snippet_highlights == [
        HighlightSegment("vocal: "),
        HighlightSegment("Ra", True),
        HighlightSegment("n、Kei"),
    ]


def test_highlight_segments():
    assert highlight("Rain Radio", "ra") == [
        HighlightSegment(text="Ra", highlight=True),
        HighlightSegment(text="in "),
        HighlightSegment(text="Ra", highlight=True),
        HighlightSegment(text="dio"),
    ]


def test_highlight_without_match():
    assert highlight("Snow", "ra") == [HighlightSegment("Snow")]


def test_highlight_whole_and_trailing_match():
    assert highlight("SEA", "sea") == [HighlightSegment("SEA", True)]
    assert highlight("deep sea", "sea") == [HighlightSegment("deep "), HighlightSegment("sea", True)]


def test_format_staff_name():
    assert format_staff_name(("A", "", "B")) == "A、B"
    assert format_staff_name("Solo") == "Solo"
    assert format_staff_name(None) == ""


def test_paginate_after_sorting():
    corpus = [SearchableItem(id=str(i), title=f"x{i}") for i in range(5)]
    results = search(corpus, "x")
    page = paginate(results, page=2, page_size=2)
    assert [r.item.id for r in page.results] == ["2", "3"]
    assert page.total == 5
    assert page.total_pages == 3

    assert paginate(results, page=9, page_size=2).results == []


def test_highlight_offsets_follow_original_text():
    # "İ".lower() is two characters long
    assert highlight("İstanbul", "stan") == [
        HighlightSegment("İ"),
        HighlightSegment("stan", True),
        HighlightSegment("bul"),
    ]


def test_snippet_window_measured_on_original_line():
    line = "İİİİİ" + "x" * 12 + "KEY" + "y" * 20
    item = SearchableItem(id="l", title="t", lyrics_plain_texts=(line,))
    [res] = search([item], "key")
    assert res.match_snippet == "..." + "İİİ" + "x" * 12 + "KEY" + "y" * 15 + "..."
    assert [s.text for s in res.snippet_highlights if s.highlight] == ["KEY"]
