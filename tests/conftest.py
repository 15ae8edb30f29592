from __future__ import annotations

import pytest

from koiro_lyrics.i18n import set_lang


@pytest.fixture(autouse=True)
def _isolated_env(tmp_path, monkeypatch):
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))
    for var in ("KOIRO_LYRICS_LANG", "KOIRO_LYRICS_DB", "KOIRO_LYRICS_PAGE_SIZE", "KOIRO_LYRICS_LOG_LEVEL"):
        monkeypatch.delenv(var, raising=False)
    set_lang("en")
    yield
    set_lang("en")
