from __future__ import annotations
import math
from datetime import datetime
from enum import Enum
from typing import List, Optional

from app import config
from app.state import ScoreResult


class CharMark(Enum):
    PENDING = "pending"
    CORRECT = "correct"
    INCORRECT = "incorrect"


def round_half_up(value: float) -> int:
    """Round non-negative values with .5 going up (2.5 -> 3), unlike round()."""
    return int(math.floor(value + 0.5))


def words_per_minute(char_count: int, elapsed_minutes: float,
                     floor: float = config.MIN_ELAPSED_MINUTES) -> int:
    """
    WPM = (chars / 5) / minutes.
    Durations below `floor` (or NaN) are clamped, so an instant finish
    reports a large but finite speed.
    """
    if math.isnan(elapsed_minutes) or elapsed_minutes < floor:
        elapsed_minutes = floor
    words = char_count / float(config.CHARS_PER_WORD)
    return round_half_up(words / elapsed_minutes)


def matching_positions(reference: str, submitted: str) -> int:
    return sum(1 for a, b in zip(reference, submitted) if a == b)


def accuracy_percent(reference: str, submitted: str) -> int:
    if not reference:
        raise ValueError("Reference text must not be empty")
    return round_half_up(100.0 * matching_positions(reference, submitted) / len(reference))


def today_label(now: Optional[datetime] = None) -> str:
    return (now or datetime.now()).strftime(config.DATE_FORMAT)


def score(reference: str, submitted: str, elapsed_minutes: float,
          date_label: Optional[str] = None) -> ScoreResult:
    if not reference:
        raise ValueError("Reference text must not be empty")
    if len(submitted) != len(reference):
        raise ValueError(
            f"Submitted length {len(submitted)} does not match reference length {len(reference)}"
        )
    return ScoreResult(
        wpm=words_per_minute(len(submitted), elapsed_minutes),
        accuracy=accuracy_percent(reference, submitted),
        date=date_label if date_label is not None else today_label(),
    )


def compare(reference: str, typed: str) -> List[CharMark]:
    """Per-character marks for display; one entry per reference character."""
    marks: List[CharMark] = []
    for i, ch in enumerate(reference):
        if i >= len(typed):
            marks.append(CharMark.PENDING)
        elif typed[i] == ch:
            marks.append(CharMark.CORRECT)
        else:
            marks.append(CharMark.INCORRECT)
    return marks
