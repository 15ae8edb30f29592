from __future__ import annotations

import logging
import os

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def _resolve_level(debug: bool) -> int:
    """--debug wins over INFO; KOIRO_LYRICS_LOG_LEVEL wins over both."""
    default = logging.DEBUG if debug else logging.INFO
    name = (os.getenv("KOIRO_LYRICS_LOG_LEVEL") or "").strip().upper()
    if not name:
        return default
    level = logging.getLevelName(name)
    return level if isinstance(level, int) else default


def setup_logging(debug: bool) -> None:
    level = _resolve_level(debug)
    logging.basicConfig(level=level, format=LOG_FORMAT)
    # basicConfig is a no-op once handlers exist; keep the package level in sync
    logging.getLogger("koiro_lyrics").setLevel(level)
