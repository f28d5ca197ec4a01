# services/history.py
from __future__ import annotations
import json
import logging
from typing import List, Sequence

from app import config
from app.config import Settings
from app.errors import StorageError
from app.state import ScoreResult
from utils.db_helper import SqliteStore
from utils.file_handler import JsonFileStore, KeyValueStore, MemoryStore

log = logging.getLogger(__name__)

HistoryLog = List[ScoreResult]


def append_result(history: Sequence[ScoreResult], result: ScoreResult,
                  limit: int = config.HISTORY_LIMIT) -> HistoryLog:
    """New log with `result` first, oldest entries dropped past `limit`."""
    return [result, *history][:limit]


class HistoryStore:
    def __init__(self, store: KeyValueStore, key: str = config.HISTORY_KEY,
                 limit: int = config.HISTORY_LIMIT):
        self.store = store
        self.key = key
        self.limit = limit

    def load(self) -> HistoryLog:
        """Stored history; anything unreadable counts as no history."""
        try:
            raw = self.store.get(self.key)
        except StorageError as e:
            log.warning("History unavailable: %s", e)
            return []
        if not raw:
            return []
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            log.warning("Discarding corrupt history: %s", e)
            return []
        if not isinstance(data, list):
            log.warning("Discarding corrupt history: expected a list, got %s", type(data).__name__)
            return []

        entries: HistoryLog = []
        for item in data:
            try:
                entries.append(ScoreResult.from_record(item))
            except ValueError as e:
                log.warning("Skipping history entry %r: %s", item, e)
        return entries[: self.limit]

    def append(self, history: Sequence[ScoreResult], result: ScoreResult) -> HistoryLog:
        return append_result(history, result, self.limit)

    def persist(self, history: Sequence[ScoreResult]) -> None:
        payload = json.dumps([r.to_record() for r in history[: self.limit]], ensure_ascii=False)
        try:
            self.store.set(self.key, payload)
        except StorageError as e:
            log.warning("Failed to persist history: %s", e)

    def clear(self) -> None:
        try:
            self.store.delete(self.key)
        except StorageError as e:
            log.warning("Failed to clear history: %s", e)


def open_store(settings: Settings) -> KeyValueStore:
    if settings.storage == "sqlite":
        return SqliteStore(settings.db_path)
    if settings.storage == "memory":
        return MemoryStore()
    return JsonFileStore(settings.json_path)
