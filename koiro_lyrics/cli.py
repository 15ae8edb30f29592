from __future__ import annotations

import json
from dataclasses import replace
from pathlib import Path

import typer

from koiro_lyrics.app import play as play_loop
from koiro_lyrics.ast.builder import build_document
from koiro_lyrics.ast.codec import dumps, loads
from koiro_lyrics.ast.model import LyricsDocument
from koiro_lyrics.ast.plain_text import flatten
from koiro_lyrics.ast.validate import validate_blocks
from koiro_lyrics.config import SUPPORTED_LANGS, AppConfig, load_config, save_config_lang
from koiro_lyrics.errors import DocumentDecodeError, SongNotFound
from koiro_lyrics.i18n import set_lang, t
from koiro_lyrics.library.store import LyricsLibrary
from koiro_lyrics.logging_setup import setup_logging
from koiro_lyrics.lrc.export import export_json, export_lrc, export_srt
from koiro_lyrics.lrc.parse import LrcParseError, parse_lrc, parse_lrc_with_stats
from koiro_lyrics.render.ansi import format_results
from koiro_lyrics.search.scorer import StaffEntry, paginate, search as run_search
from koiro_lyrics.sync.tracker import extract_lines

app = typer.Typer(no_args_is_help=True, add_completion=False)


@app.callback()
def _main(debug: bool = typer.Option(False, "--debug", help="Enable debug logging")):
    setup_logging(debug)
    set_lang(load_config().lang)


def _load_document(path: Path, languages: list[str] | None = None) -> LyricsDocument:
    text = path.read_text(encoding="utf-8")
    try:
        if path.suffix.lower() == ".lrc":
            return build_document(parse_lrc(text).lines, languages=languages or ["ja"])
        return loads(text)
    except (DocumentDecodeError, LrcParseError) as e:
        typer.echo(t("invalid_document", error=str(e)), err=True)
        raise typer.Exit(code=2) from e


def _parse_staff(raw: list[str]) -> list[StaffEntry]:
    # "role=name" or "role=name1,name2"
    out: list[StaffEntry] = []
    for item in raw:
        role, sep, names = item.partition("=")
        if not sep:
            raise typer.BadParameter(f"staff must look like role=name, got {item!r}")
        parts = tuple(n.strip() for n in names.split(",") if n.strip())
        out.append(StaffEntry(role=role.strip(), name=parts[0] if len(parts) == 1 else parts))
    return out


@app.command()
def validate(doc_path: Path):
    """Check timing of a lyrics document (JSON or LRC)."""
    doc = _load_document(doc_path)
    result = validate_blocks(doc.blocks)
    for err in result.errors:
        typer.echo(err)
    if not result.ok:
        raise typer.Exit(code=1)
    typer.echo(t("validate_ok", count=len(extract_lines(doc))))


@app.command(name="flatten")
def flatten_cmd(doc_path: Path):
    """Print the searchable plain text of a document."""
    doc = _load_document(doc_path)
    typer.echo(flatten(doc.blocks))


@app.command(name="import-lrc")
def import_lrc(
    lrc_path: Path,
    out: Path | None = typer.Option(None, "--out", help="Output file (default: stdout)"),
    lang: list[str] = typer.Option(["ja"], "--lang", help="Language hint, repeatable"),
    stats: bool = typer.Option(False, "--stats", help="Print parse stats to stderr"),
):
    """Convert LRC into a lyrics document."""
    try:
        imported, st = parse_lrc_with_stats(lrc_path.read_text(encoding="utf-8"))
    except LrcParseError as e:
        typer.echo(t("invalid_document", error=str(e)), err=True)
        raise typer.Exit(code=2) from e
    if not imported.lines:
        typer.echo(t("lrc_no_lines"), err=True)
        raise typer.Exit(code=1)
    if stats:
        typer.echo(f"lines_total={st.lines_total}", err=True)
        typer.echo(f"lines_with_timestamps={st.lines_with_timestamps}", err=True)
        typer.echo(f"lines_untimed={st.lines_untimed}", err=True)
        typer.echo(f"lines_ignored={st.lines_ignored}", err=True)
        typer.echo(f"drafts_total={st.drafts_total}", err=True)
        typer.echo(f"tags={imported.tags or {}}", err=True)

    data = dumps(build_document(imported.lines, languages=lang))
    if out:
        out.write_text(data, encoding="utf-8")
    else:
        typer.echo(data)


@app.command()
def export(
    doc_path: Path,
    fmt: str = typer.Option("lrc", "--format", case_sensitive=False, help="lrc|srt|json"),
    out: Path | None = typer.Option(None, "--out", help="Output file (default: stdout)"),
):
    """Export a document to LRC/SRT/JSON."""
    doc = _load_document(doc_path)
    fmt_l = fmt.lower()
    if fmt_l == "json":
        data = export_json(doc)
    elif fmt_l == "lrc":
        data = export_lrc(doc)
    elif fmt_l == "srt":
        data = export_srt(doc)
    else:
        raise typer.BadParameter("format must be one of: lrc, srt, json")

    if out:
        out.write_text(data, encoding="utf-8")
    else:
        typer.echo(data, nl=False)


@app.command(name="add-song")
def add_song(
    title: str = typer.Option(..., "--title", help="Song title"),
    staff: list[str] = typer.Option([], "--staff", help="role=name[,name...], repeatable"),
    lyrics: list[Path] = typer.Option([], "--lyrics", help="Document or LRC file, repeatable"),
    description: str | None = typer.Option(None, "--description"),
):
    """Add a song and its lyric versions to the library."""
    cfg = load_config()
    lib = LyricsLibrary(cfg.library_db_path)
    song_id = lib.add_song(title, staff=_parse_staff(staff), description=description)
    for i, path in enumerate(lyrics):
        lib.set_lyrics(song_id, _load_document(path), version_key=path.stem, is_default=i == 0)
    typer.echo(t("song_added", id=song_id))


@app.command()
def search(
    keyword: str,
    page: int = typer.Option(1, "--page", "-p"),
    page_size: int | None = typer.Option(None, "--page-size", "-n"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """Search titles, staff and lyrics in the library."""
    cfg = load_config()
    lib = LyricsLibrary(cfg.library_db_path)
    results = run_search(lib.corpus(), keyword)
    pg = paginate(results, page=page, page_size=page_size or cfg.page_size)

    if json_output:
        typer.echo(
            json.dumps(
                {
                    "results": [
                        {
                            "id": r.item.id,
                            "title": r.item.title,
                            "score": r.score,
                            "matchType": list(r.match_types),
                            "matchSnippet": r.match_snippet,
                        }
                        for r in pg.results
                    ],
                    "total": pg.total,
                    "page": pg.page,
                    "pageSize": pg.page_size,
                    "totalPages": pg.total_pages,
                },
                indent=2,
                ensure_ascii=False,
            )
        )
        return

    if not pg.results:
        typer.echo(t("no_results"))
        return
    typer.echo(t("search_summary", total=pg.total, page=pg.page, pages=pg.total_pages))
    for line in format_results(pg.results, start=(pg.page - 1) * pg.page_size + 1):
        typer.echo(line)


@app.command()
def play(
    doc_path: Path | None = typer.Argument(None, help="Document or LRC file"),
    song: str | None = typer.Option(None, "--song", help="Play a song from the library"),
    start: float = typer.Option(0.0, "--start", help="Start position in seconds"),
    refresh_hz: float | None = typer.Option(None, "--refresh-hz", help="Redraw frequency (Hz)"),
    no_alt_screen: bool = typer.Option(False, "--no-alt-screen", help="Do not use alternate screen buffer"),
):
    """Play synced lyrics against a local clock."""
    cfg: AppConfig = load_config()
    if refresh_hz is not None:
        cfg = replace(cfg, refresh_hz=refresh_hz)
    if no_alt_screen:
        cfg = replace(cfg, use_alt_screen=False)

    if song:
        try:
            doc = LyricsLibrary(cfg.library_db_path).get_document(song)
        except SongNotFound as e:
            typer.echo(t("song_not_found", id=song), err=True)
            raise typer.Exit(code=1) from e
        title = song
    elif doc_path is not None:
        doc = _load_document(doc_path)
        title = doc_path.stem
    else:
        raise typer.BadParameter("pass a document path or --song")

    raise typer.Exit(code=play_loop(cfg, doc, title=title, start_s=start))


@app.command()
def config(
    lang: str | None = typer.Option(None, "--lang", help="UI language: en|zh"),
):
    """Show or change settings."""
    if lang:
        if lang.upper() not in SUPPORTED_LANGS:
            raise typer.BadParameter("lang must be one of: en, zh")
        save_config_lang(lang)
        set_lang(lang)
        typer.echo(t("lang_saved", lang=lang.upper()))
        return
    cfg = load_config()
    for k, v in cfg.__dict__.items():
        typer.echo(f"{k}={v}")


@app.command()
def library(
    clear: bool = typer.Option(False, "--clear", help="Remove all songs and lyrics"),
):
    """Manage the song library."""
    cfg = load_config()
    lib = LyricsLibrary(cfg.library_db_path)
    if clear:
        lib.clear()
        typer.echo(t("library_cleared", path=str(cfg.library_db_path)))
    else:
        typer.echo(t("library_summary", count=len(lib.corpus()), path=str(cfg.library_db_path)))


def main() -> None:
    app()


if __name__ == "__main__":
    main()
