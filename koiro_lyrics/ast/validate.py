from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

from koiro_lyrics.i18n import t

from .model import Block, LineBlock


@dataclass(frozen=True, slots=True)
class ValidationResult:
    ok: bool
    errors: tuple[str, ...]


def validate_blocks(blocks: Iterable[Block]) -> ValidationResult:
    """
    Advisory timing check, safe to run on every edit.

    Positions in messages are 1-based over all blocks, paragraphs included.
    A flagged line still becomes the new reference start, so one bad line
    is reported once.
    """
    errors: list[str] = []
    last_start = -1

    for pos, block in enumerate(blocks, start=1):
        if not isinstance(block, LineBlock) or block.time is None:
            continue
        start = block.time.start_ms
        end = block.time.end_ms
        if start < 0:
            errors.append(t("validate_start_negative", pos=pos))
        if end is not None and end < start:
            errors.append(t("validate_end_before_start", pos=pos))
        if start <= last_start:
            errors.append(t("validate_start_not_increasing", pos=pos))
        last_start = start

    return ValidationResult(ok=not errors, errors=tuple(errors))
