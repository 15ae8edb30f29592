from __future__ import annotations

import json
import logging
import sqlite3
import time
import uuid
from pathlib import Path
from typing import Iterable

from koiro_lyrics.ast.codec import document_from_dict, to_record
from koiro_lyrics.ast.model import LyricsDocument
from koiro_lyrics.errors import SongNotFound
from koiro_lyrics.search.scorer import SearchableItem, StaffEntry

logger = logging.getLogger(__name__)


def _staff_to_json(staff: Iterable[StaffEntry]) -> str:
    return json.dumps(
        [{"role": s.role, "name": s.name if isinstance(s.name, str) else list(s.name)} for s in staff],
        ensure_ascii=False,
    )


def _staff_from_json(raw: str | None) -> tuple[StaffEntry, ...]:
    if not raw:
        return ()
    out: list[StaffEntry] = []
    for item in json.loads(raw):
        name = item.get("name") or ""
        out.append(StaffEntry(role=item.get("role") or "", name=tuple(name) if isinstance(name, list) else name))
    return tuple(out)


class LyricsLibrary:
    """
    sqlite-backed song + lyrics store. Every lyrics write stores the
    flattened plain text next to the document for search.
    """

    def __init__(self, db_path: Path):
        self.db_path = db_path
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._init_db()

    def _connect(self) -> sqlite3.Connection:
        con = sqlite3.connect(self.db_path)
        con.row_factory = sqlite3.Row
        return con

    def _init_db(self) -> None:
        with self._connect() as con:
            con.execute(
                """
                CREATE TABLE IF NOT EXISTS songs (
                    id TEXT PRIMARY KEY,
                    title TEXT NOT NULL,
                    description TEXT,
                    staff TEXT NOT NULL DEFAULT '[]',
                    updated_at INTEGER NOT NULL
                );
                """
            )
            con.execute(
                """
                CREATE TABLE IF NOT EXISTS lyrics (
                    song_id TEXT NOT NULL REFERENCES songs(id) ON DELETE CASCADE,
                    version_key TEXT NOT NULL,
                    format TEXT NOT NULL,
                    content TEXT NOT NULL,
                    plain_text TEXT NOT NULL,
                    is_default INTEGER NOT NULL DEFAULT 0,
                    updated_at INTEGER NOT NULL,
                    PRIMARY KEY (song_id, version_key)
                );
                """
            )
            con.execute("CREATE INDEX IF NOT EXISTS idx_lyrics_song_id ON lyrics(song_id);")

    def add_song(
        self,
        title: str,
        *,
        staff: Iterable[StaffEntry] = (),
        description: str | None = None,
        song_id: str | None = None,
    ) -> str:
        sid = song_id or uuid.uuid4().hex
        with self._connect() as con:
            con.execute(
                """
                INSERT INTO songs(id, title, description, staff, updated_at)
                VALUES (?, ?, ?, ?, ?)
                ON CONFLICT(id) DO UPDATE SET
                    title=excluded.title,
                    description=excluded.description,
                    staff=excluded.staff,
                    updated_at=excluded.updated_at
                """,
                (sid, title.strip(), (description or "").strip(), _staff_to_json(staff), int(time.time())),
            )
        logger.debug("Stored song %s (%s)", sid, title)
        return sid

    def _require_song(self, con: sqlite3.Connection, song_id: str) -> None:
        row = con.execute("SELECT 1 FROM songs WHERE id=?", (song_id,)).fetchone()
        if row is None:
            raise SongNotFound(song_id)

    def set_lyrics(
        self,
        song_id: str,
        doc: LyricsDocument,
        *,
        version_key: str = "default",
        is_default: bool = True,
    ) -> None:
        record = to_record(doc, version_key=version_key, is_default=is_default)
        with self._connect() as con:
            self._require_song(con, song_id)
            if is_default:
                con.execute("UPDATE lyrics SET is_default=0 WHERE song_id=?", (song_id,))
            con.execute(
                """
                INSERT INTO lyrics(song_id, version_key, format, content, plain_text, is_default, updated_at)
                VALUES (?, ?, ?, ?, ?, ?, ?)
                ON CONFLICT(song_id, version_key) DO UPDATE SET
                    format=excluded.format,
                    content=excluded.content,
                    plain_text=excluded.plain_text,
                    is_default=excluded.is_default,
                    updated_at=excluded.updated_at
                """,
                (
                    song_id,
                    record["versionKey"],
                    record["format"],
                    json.dumps(record["content"], ensure_ascii=False),
                    record["plainText"],
                    int(is_default),
                    int(time.time()),
                ),
            )

    def get_document(self, song_id: str, version_key: str | None = None) -> LyricsDocument | None:
        """
        Returns the requested version (default version when None), or None
        when the song has no lyrics.
        """
        with self._connect() as con:
            self._require_song(con, song_id)
            if version_key is None:
                row = con.execute(
                    "SELECT content FROM lyrics WHERE song_id=? ORDER BY is_default DESC, rowid LIMIT 1",
                    (song_id,),
                ).fetchone()
            else:
                row = con.execute(
                    "SELECT content FROM lyrics WHERE song_id=? AND version_key=?",
                    (song_id, version_key),
                ).fetchone()
        if row is None:
            return None
        return document_from_dict(json.loads(row["content"]))

    def corpus(self) -> list[SearchableItem]:
        with self._connect() as con:
            songs = con.execute("SELECT id, title, description, staff FROM songs ORDER BY rowid").fetchall()
            texts: dict[str, list[str]] = {}
            for row in con.execute("SELECT song_id, plain_text FROM lyrics ORDER BY rowid"):
                texts.setdefault(row["song_id"], []).append(row["plain_text"])
        return [
            SearchableItem(
                id=row["id"],
                title=row["title"],
                staff=_staff_from_json(row["staff"]),
                lyrics_plain_texts=tuple(texts.get(row["id"], ())),
                description=row["description"] or None,
            )
            for row in songs
        ]

    def clear(self) -> None:
        with self._connect() as con:
            con.execute("DELETE FROM lyrics")
            con.execute("DELETE FROM songs")
