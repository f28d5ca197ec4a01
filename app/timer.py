import time
from typing import Callable


class SessionTimer:
    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock

    def mark_start(self) -> float:
        return self._clock()

    def now(self) -> float:
        return self._clock()

    @staticmethod
    def elapsed_minutes_since(start: float, end: float) -> float:
        return max(0.0, end - start) / 60.0
