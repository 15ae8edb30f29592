from __future__ import annotations

import json
from functools import lru_cache
from importlib.resources import files

DEFAULT_LANG = "en"
_SUPPORTED = ("en", "zh")

_current = DEFAULT_LANG


def normalize_lang(lang: str | None) -> str:
    """'ZH' -> 'zh'; anything unsupported -> 'en'."""
    code = (lang or "").strip().lower()
    return code if code in _SUPPORTED else DEFAULT_LANG


@lru_cache(maxsize=None)
def _catalog(lang: str) -> dict[str, str]:
    try:
        path = files("koiro_lyrics.i18n") / f"{lang}.json"
        return dict(json.loads(path.read_text(encoding="utf-8")))
    except (OSError, ValueError):
        return {}


def set_lang(lang: str | None) -> None:
    global _current
    _current = normalize_lang(lang)


def t(key: str, **kwargs: str | int) -> str:
    # active catalog, then English, then the key itself
    s = _catalog(_current).get(key) or _catalog(DEFAULT_LANG).get(key, key)
    if not kwargs:
        return s
    try:
        return s.format(**kwargs)
    except KeyError:
        return s
