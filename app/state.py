from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional


class SessionPhase(Enum):
    IDLE = "idle"
    IN_PROGRESS = "in_progress"
    FINISHED = "finished"


@dataclass(frozen=True)
class ScoreResult:
    wpm: int
    accuracy: int
    date: str

    def to_record(self) -> Dict[str, Any]:
        return {"wpm": self.wpm, "accuracy": self.accuracy, "date": self.date}

    @classmethod
    def from_record(cls, d: Dict[str, Any]) -> "ScoreResult":
        if not isinstance(d, dict):
            raise ValueError(f"History entry must be an object, got {type(d).__name__}")
        missing = {"wpm", "accuracy", "date"} - set(d.keys())
        if missing:
            raise ValueError(f"Missing history keys: {', '.join(sorted(missing))}")
        wpm, acc, date = d["wpm"], d["accuracy"], d["date"]
        # bool is an int subclass; reject it explicitly
        for name, value in (("wpm", wpm), ("accuracy", acc)):
            if isinstance(value, bool) or not isinstance(value, int):
                raise ValueError(f"{name} must be an integer")
        if wpm < 0:
            raise ValueError("wpm must be non-negative")
        if not 0 <= acc <= 100:
            raise ValueError("accuracy must be within 0..100")
        if not isinstance(date, str):
            raise ValueError("date must be a string")
        return cls(wpm=wpm, accuracy=acc, date=date)


@dataclass
class SessionState:
    reference_text: str
    current_input: str = ""
    started_at: Optional[float] = None
    finished: bool = False

    @property
    def phase(self) -> SessionPhase:
        if self.finished:
            return SessionPhase.FINISHED
        if self.started_at is None:
            return SessionPhase.IDLE
        return SessionPhase.IN_PROGRESS

    @property
    def is_running(self) -> bool:
        return self.phase is SessionPhase.IN_PROGRESS

    def start(self, ts: float) -> bool:
        """Record the first keystroke time. Returns False if already started."""
        if self.started_at is not None:
            return False
        self.started_at = ts
        return True

    @property
    def remaining(self) -> int:
        return max(0, len(self.reference_text) - len(self.current_input))
