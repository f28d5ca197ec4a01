# app/samples.py
from __future__ import annotations
import logging
import random
from pathlib import Path
from typing import List, Optional, Sequence

log = logging.getLogger(__name__)


# -------- Built-in corpus --------
TYPING_SENTENCES: List[str] = [
    "The quick brown fox jumps over the lazy dog.",
    "Success is not the key to happiness. Happiness is the key to success.",
    "Education is the most powerful weapon which you can use to change the world.",
    "A journey of a thousand miles begins with a single step.",
    "Consistency is what transforms average into excellence.",
    "Accounting is the language of business and finance.",
    "Artificial Intelligence is transforming the way we work and live.",
]


# -------- helpers --------
def _clean(sentences: Sequence[str]) -> List[str]:
    return [s.strip() for s in sentences if s and s.strip()]


def load_sentences_file(path: Path) -> List[str]:
    """One sentence per line; blank lines are ignored."""
    text = Path(path).read_text(encoding="utf-8")
    return _clean(text.replace("\r\n", "\n").split("\n"))


def load_corpus(path: Optional[Path] = None) -> List[str]:
    """Custom corpus from `path` if usable, otherwise the built-in sentences."""
    if path is None:
        return list(TYPING_SENTENCES)
    try:
        custom = load_sentences_file(path)
    except (OSError, UnicodeDecodeError) as e:
        log.warning("Failed to read sentences file %s: %s", path, e)
        return list(TYPING_SENTENCES)
    if not custom:
        log.warning("Sentences file %s has no usable lines, using built-ins", path)
        return list(TYPING_SENTENCES)
    return custom


class SampleProvider:
    def __init__(self, corpus: Optional[Sequence[str]] = None,
                 rng: Optional[random.Random] = None):
        sentences = _clean(TYPING_SENTENCES if corpus is None else corpus)
        if not sentences:
            raise ValueError("Sample corpus must contain at least one non-empty sentence")
        self._corpus = tuple(sentences)
        self._rng = rng or random.Random()

    @property
    def corpus(self) -> tuple:
        return self._corpus

    def next(self) -> str:
        return self._rng.choice(self._corpus)
