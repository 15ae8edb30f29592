from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)

SUPPORTED_LANGS = ("EN", "ZH")


def _config_dir() -> Path:
    xdg = os.getenv("XDG_CONFIG_HOME")
    if xdg:
        return Path(xdg) / "koiro-lyrics"
    return Path.home() / ".config" / "koiro-lyrics"


def _config_file() -> Path:
    return _config_dir() / "config.json"


@dataclass(frozen=True)
class AppConfig:
    # Storage
    data_dir: Path
    library_db_path: Path
    config_dir: Path

    # Locale
    lang: str

    # Playback
    refresh_hz: float
    use_alt_screen: bool

    # Search
    page_size: int


def load_config() -> AppConfig:
    # XDG base dir fallback
    xdg = os.getenv("XDG_DATA_HOME")
    data_dir = Path(xdg) if xdg else Path.home() / ".local" / "share"
    data_dir = data_dir / "koiro-lyrics"

    refresh_hz = float(os.getenv("KOIRO_LYRICS_REFRESH_HZ", "10.0"))
    use_alt_screen = os.getenv("KOIRO_LYRICS_ALT_SCREEN", "1") not in ("0", "false", "False")
    page_size = int(os.getenv("KOIRO_LYRICS_PAGE_SIZE", "20"))

    db_env = os.getenv("KOIRO_LYRICS_DB")
    config_dir = _config_dir()

    return AppConfig(
        data_dir=data_dir,
        library_db_path=Path(db_env) if db_env else data_dir / "library.sqlite3",
        config_dir=config_dir,
        lang=_load_lang(config_dir),
        refresh_hz=refresh_hz,
        use_alt_screen=use_alt_screen,
        page_size=page_size,
    )


def _load_lang(config_dir: Path) -> str:
    # Priority: config.json → KOIRO_LYRICS_LANG → "EN"
    cfg_path = config_dir / "config.json"
    if cfg_path.exists():
        try:
            data = json.loads(cfg_path.read_text(encoding="utf-8"))
            raw = (data.get("lang") or "en").upper()
            if raw in SUPPORTED_LANGS:
                return raw
        except (OSError, ValueError, AttributeError):
            logger.warning("Ignoring unreadable config file %s", cfg_path)
    env_lang = os.getenv("KOIRO_LYRICS_LANG")
    if env_lang and env_lang.upper() in SUPPORTED_LANGS:
        return env_lang.upper()
    return "EN"


def save_config_lang(lang: str) -> None:
    cfg_path = _config_file()
    cfg_path.parent.mkdir(parents=True, exist_ok=True)
    data: dict[str, str] = {}
    if cfg_path.exists():
        try:
            data = json.loads(cfg_path.read_text(encoding="utf-8"))
        except (OSError, ValueError):
            logger.warning("Overwriting unreadable config file %s", cfg_path)
    data["lang"] = lang.upper()
    cfg_path.write_text(json.dumps(data, indent=2, ensure_ascii=False), encoding="utf-8")
