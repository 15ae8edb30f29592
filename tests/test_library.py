import pytest

from koiro_lyrics.ast.builder import LineDraft, build_document
from koiro_lyrics.errors import SongNotFound
from koiro_lyrics.library.store import LyricsLibrary
from koiro_lyrics.search.scorer import StaffEntry, search


@pytest.fixture
def lib(tmp_path):
    return LyricsLibrary(tmp_path / "lib" / "library.sqlite3")


def test_round_trip_document_and_corpus(lib):
    doc = build_document([LineDraft(start_ms=0, text="君/の声が", ruby_by_index={0: "きみ"})])
    sid = lib.add_song("Koe", staff=[StaffEntry("作词", ("Aoi", "Mika"))], description=" demo ")
    lib.set_lyrics(sid, doc, version_key="ja")

    assert lib.get_document(sid) == doc
    assert lib.get_document(sid, "ja") == doc
    assert lib.get_document(sid, "zh") is None

    [item] = lib.corpus()
    assert item.id == sid
    assert item.title == "Koe"
    assert item.staff == (StaffEntry("作词", ("Aoi", "Mika")),)
    assert item.lyrics_plain_texts == ("君の声が",)
    assert item.description == "demo"


def test_plain_text_follows_rewrites(lib):
    sid = lib.add_song("Song")
    lib.set_lyrics(sid, build_document([LineDraft(start_ms=0, text="old words")]))
    lib.set_lyrics(sid, build_document([LineDraft(start_ms=0, text="new words")]))
    [item] = lib.corpus()
    assert item.lyrics_plain_texts == ("new words",)


def test_default_version_preferred(lib):
    sid = lib.add_song("Song")
    lib.set_lyrics(sid, build_document([LineDraft(start_ms=0, text="zh")]), version_key="zh", is_default=False)
    lib.set_lyrics(sid, build_document([LineDraft(start_ms=0, text="ja")]), version_key="ja", is_default=True)
    doc = lib.get_document(sid)
    assert doc.blocks[0].children[0].text == "ja"


def test_unknown_song(lib):
    with pytest.raises(SongNotFound):
        lib.get_document("missing")
    with pytest.raises(SongNotFound):
        lib.set_lyrics("missing", build_document([]))


def test_corpus_feeds_search_in_insertion_order(lib):
    lib.add_song("Glass Sea", song_id="a")
    lib.add_song("Sea Glass", song_id="b")
    lib.add_song("Sea", song_id="c")
    lib.add_song("Other", song_id="d")
    assert [r.item.id for r in search(lib.corpus(), "sea")] == ["c", "b", "a"]


def test_clear(lib):
    sid = lib.add_song("Song")
    lib.set_lyrics(sid, build_document([LineDraft(start_ms=0, text="x")]))
    lib.clear()
    assert lib.corpus() == []
