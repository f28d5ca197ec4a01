import os

import pytest

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

from PySide6.QtCore import QCoreApplication

from app.samples import SampleProvider
from app.timer import SessionTimer
from services.history import HistoryStore
from utils.file_handler import MemoryStore


@pytest.fixture(scope="session", autouse=True)
def qapp():
    app = QCoreApplication.instance() or QCoreApplication([])
    yield app


class FakeClock:
    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class ImmediatePool:
    """Runs workers synchronously on start(); signals fire before start() returns."""

    def __init__(self):
        self.started = []

    def start(self, runnable):
        self.started.append(runnable)
        runnable.run()


class DeferredPool:
    """Holds workers until the test runs them."""

    def __init__(self):
        self.pending = []

    def start(self, runnable):
        self.pending.append(runnable)

    def run_all(self):
        while self.pending:
            self.pending.pop(0).run()


class StubRequester:
    def __init__(self, reply="Nice work! Keep your wrists relaxed.", error=None):
        self.reply = reply
        self.error = error
        self.calls = []

    def request_feedback(self, summary_text, language):
        self.calls.append((summary_text, language))
        if self.error is not None:
            raise self.error
        return self.reply


class SequenceSamples(SampleProvider):
    """Deterministic provider cycling through the given sentences."""

    def __init__(self, *sentences):
        super().__init__(list(sentences))
        self._i = 0

    def next(self) -> str:
        s = self.corpus[self._i % len(self.corpus)]
        self._i += 1
        return s


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def kv():
    return MemoryStore()


@pytest.fixture
def history(kv):
    return HistoryStore(kv)


@pytest.fixture
def requester():
    return StubRequester()


@pytest.fixture
def make_session(clock, history, requester):
    from services.typing_engine import TypingSession

    def factory(*sentences, pool=None, requester=requester, history=history, **kwargs):
        session = TypingSession(
            SequenceSamples(*(sentences or ("cat dog",))),
            history,
            requester,
            timer=SessionTimer(clock),
            pool=pool if pool is not None else ImmediatePool(),
            **kwargs,
        )
        return session

    return factory
