# services/typing_engine.py
from __future__ import annotations
import logging
from typing import List, Optional

from PySide6.QtCore import QObject, QTimer, Signal, Slot

from app import config
from app.calculation import CharMark, compare, score
from app.i18n import Language, feedback_fallback
from app.prompts import typing_summary
from app.samples import SampleProvider
from app.state import ScoreResult, SessionPhase, SessionState
from app.timer import SessionTimer
from core.threads import FeedbackWorker, Workers
from services.history import HistoryStore

log = logging.getLogger(__name__)


class TypingSession(QObject):
    """
    Drives one typing test at a time: Idle -> InProgress -> Finished,
    and back to Idle on restart().

    Scores and history are final before the coaching request is issued;
    the request runs on a thread pool and its answer lands in `feedback`
    later. Answers for an older session are dropped.
    """

    started = Signal()
    inputChanged = Signal(str)
    finished = Signal(object)         # ScoreResult
    feedbackChanged = Signal(str)
    historyChanged = Signal(object)    # list of ScoreResult
    reset = Signal(str)               # new reference text

    def __init__(self, samples: SampleProvider, history: HistoryStore, requester,
                 timer: Optional[SessionTimer] = None, pool=None,
                 language: Language = Language.EN,
                 feedback_timeout_ms: int = config.FEEDBACK_TIMEOUT_MS,
                 parent=None):
        super().__init__(parent)
        self.samples = samples
        self.history_store = history
        self.requester = requester
        self.timer = timer or SessionTimer()
        self.pool = pool or Workers.pool
        self.language = Language(language)

        self._generation = 0
        self._result: Optional[ScoreResult] = None
        self._feedback = ""
        self._feedback_pending = False
        self._worker: Optional[FeedbackWorker] = None

        self._watchdog = QTimer(self)
        self._watchdog.setSingleShot(True)
        self._watchdog.setInterval(feedback_timeout_ms)
        self._watchdog.timeout.connect(self._on_feedback_timeout)

        self._history = history.load()
        self._state = SessionState(reference_text=self.samples.next())

    # ---------------- read-only views ----------------
    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def phase(self) -> SessionPhase:
        return self._state.phase

    @property
    def reference(self) -> str:
        return self._state.reference_text

    @property
    def current_input(self) -> str:
        return self._state.current_input

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def result(self) -> Optional[ScoreResult]:
        return self._result

    @property
    def feedback(self) -> str:
        return self._feedback

    @property
    def feedback_pending(self) -> bool:
        return self._feedback_pending

    @property
    def history(self) -> List[ScoreResult]:
        return list(self._history)

    def comparison(self) -> List[CharMark]:
        return compare(self._state.reference_text, self._state.current_input)

    # ---------------- input ----------------
    def update_input(self, value: str) -> None:
        st = self._state
        if st.finished:
            log.debug("Ignoring input after finish")
            return

        value = value[: len(st.reference_text)]
        if value and st.started_at is None:
            st.start(self.timer.mark_start())
            self.started.emit()

        st.current_input = value
        self.inputChanged.emit(value)

        if len(value) == len(st.reference_text):
            self._finish()

    def type_char(self, ch: str) -> None:
        if ch:
            self.update_input(self._state.current_input + ch)

    def backspace(self) -> None:
        if self._state.current_input:
            self.update_input(self._state.current_input[:-1])

    def restart(self) -> None:
        """Abandon whatever is running and draw a fresh sentence."""
        self._generation += 1
        self._watchdog.stop()
        self._worker = None
        self._result = None
        self._feedback = ""
        self._feedback_pending = False
        self._state = SessionState(reference_text=self.samples.next())
        self.reset.emit(self._state.reference_text)

    # ---------------- completion ----------------
    def _finish(self) -> None:
        st = self._state
        end = self.timer.now()
        elapsed = self.timer.elapsed_minutes_since(st.started_at, end)
        result = score(st.reference_text, st.current_input, elapsed)

        st.finished = True
        self._result = result
        log.info("Typing test finished: %d WPM, %d%% accuracy", result.wpm, result.accuracy)

        self._history = self.history_store.append(self._history, result)
        self.history_store.persist(self._history)

        self.finished.emit(result)
        self.historyChanged.emit(list(self._history))
        self._request_feedback(result)

    def _request_feedback(self, result: ScoreResult) -> None:
        self._feedback = ""
        self._feedback_pending = True
        summary = typing_summary(result.wpm, result.accuracy, self._state.reference_text)

        worker = FeedbackWorker(self.requester, summary, self.language, self._generation)
        worker.signals.ready.connect(self._on_feedback_ready)
        worker.signals.failed.connect(self._on_feedback_failed)
        self._worker = worker
        self._watchdog.start()
        self.pool.start(worker)

    def _is_current(self, generation: int) -> bool:
        if generation != self._generation or not self._feedback_pending:
            log.debug("Dropping stale feedback for generation %d", generation)
            return False
        return True

    def _set_feedback(self, text: str) -> None:
        self._watchdog.stop()
        self._worker = None
        self._feedback = text
        self._feedback_pending = False
        self.feedbackChanged.emit(text)

    @Slot(int, str)
    def _on_feedback_ready(self, generation: int, text: str) -> None:
        if self._is_current(generation):
            self._set_feedback(text)

    @Slot(int, str)
    def _on_feedback_failed(self, generation: int, message: str) -> None:
        if self._is_current(generation):
            self._set_feedback(feedback_fallback(self.language))

    @Slot()
    def _on_feedback_timeout(self) -> None:
        if self._feedback_pending:
            log.warning("Feedback request timed out")
            self._set_feedback(feedback_fallback(self.language))
