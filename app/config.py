# app/config.py
from __future__ import annotations
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from app.i18n import Language

log = logging.getLogger(__name__)

APP_NAME = "MentorBridge"
DATA_DIR = Path.home() / ".mentorbridge"
LOG_FILE = "mentorbridge.log"

# Typing test heuristics
CHARS_PER_WORD = 5
MIN_ELAPSED_MINUTES = 0.01  # floor for near-instant completions
HISTORY_LIMIT = 5
HISTORY_KEY = "mentorbridge_typing_history"
DATE_FORMAT = "%d/%m/%Y"

# AI defaults
DEFAULT_MODEL = "gemini-2.5-flash"
DEFAULT_TEMPERATURE = 0.7
FEEDBACK_TIMEOUT_MS = 20_000

STORAGE_BACKENDS = ("json", "sqlite", "memory")


@dataclass
class Settings:
    api_key: Optional[str] = None
    model: str = DEFAULT_MODEL
    language: Language = Language.EN
    storage: str = "json"
    data_dir: Path = DATA_DIR
    feedback_timeout_ms: int = FEEDBACK_TIMEOUT_MS
    temperature: float = DEFAULT_TEMPERATURE
    sentences_file: Optional[Path] = None

    @property
    def json_path(self) -> Path:
        return self.data_dir / "storage.json"

    @property
    def db_path(self) -> Path:
        return self.data_dir / "mentorbridge.db"


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError:
        log.warning("Ignoring %s=%r: not an integer", name, raw)
        return default
    if value <= 0:
        log.warning("Ignoring %s=%r: must be positive", name, raw)
        return default
    return value


def load_settings(env_file: Optional[str] = None) -> Settings:
    """Build Settings from the environment (and a .env file, if present)."""
    load_dotenv(env_file)

    lang_raw = (os.getenv("MENTORBRIDGE_LANG") or Language.EN.value).strip().lower()
    try:
        language = Language(lang_raw)
    except ValueError:
        log.warning("Unknown language %r, using English", lang_raw)
        language = Language.EN

    storage = (os.getenv("MENTORBRIDGE_STORAGE") or "json").strip().lower()
    if storage not in STORAGE_BACKENDS:
        log.warning("Unknown storage backend %r, using json", storage)
        storage = "json"

    data_dir = os.getenv("MENTORBRIDGE_DATA_DIR")
    sentences = os.getenv("MENTORBRIDGE_SENTENCES_FILE")

    return Settings(
        api_key=os.getenv("GEMINI_API_KEY") or os.getenv("API_KEY") or None,
        model=os.getenv("MENTORBRIDGE_MODEL") or DEFAULT_MODEL,
        language=language,
        storage=storage,
        data_dir=Path(data_dir).expanduser() if data_dir else DATA_DIR,
        feedback_timeout_ms=_int_env("MENTORBRIDGE_FEEDBACK_TIMEOUT_MS", FEEDBACK_TIMEOUT_MS),
        sentences_file=Path(sentences).expanduser() if sentences else None,
    )
