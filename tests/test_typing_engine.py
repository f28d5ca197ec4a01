import json
import threading
import time

from unittest.mock import MagicMock

from app import config
from app.calculation import CharMark
from app.errors import FeedbackError, StorageError
from app.i18n import Language, feedback_fallback
from app.state import ScoreResult, SessionPhase
from core.threads import Workers
from services.history import HistoryStore
from utils.file_handler import MemoryStore

from conftest import DeferredPool, StubRequester


def _type(session, text):
    for ch in text:
        session.type_char(ch)


def _wait_for_feedback(app, session, timeout=5.0):
    deadline = time.monotonic() + timeout
    while session.feedback_pending and time.monotonic() < deadline:
        app.processEvents()
        time.sleep(0.01)


class TestStateMachine:
    def test_starts_idle(self, make_session):
        session = make_session("abcde")
        assert session.phase is SessionPhase.IDLE
        assert session.reference == "abcde"
        assert session.current_input == ""
        assert session.state.started_at is None

    def test_first_char_starts_timer_once(self, make_session, clock):
        session = make_session("abcde")
        started = []
        session.started.connect(lambda: started.append(True))

        session.type_char("a")
        first = session.state.started_at
        assert session.phase is SessionPhase.IN_PROGRESS
        assert first == clock.now

        clock.advance(5)
        session.type_char("b")
        assert session.state.started_at == first
        assert started == [True]

    def test_deleting_to_empty_keeps_start(self, make_session, clock):
        session = make_session("abcde")
        session.type_char("a")
        first = session.state.started_at
        clock.advance(3)
        session.backspace()
        assert session.current_input == ""
        assert session.phase is SessionPhase.IN_PROGRESS
        session.type_char("a")
        assert session.state.started_at == first

    def test_not_finished_one_short(self, make_session):
        session = make_session("abcdefghij")
        _type(session, "abcdefghi")
        assert session.phase is SessionPhase.IN_PROGRESS
        assert session.result is None

    def test_finishes_on_exact_length(self, make_session):
        session = make_session("abcdefghij")
        finished = []
        session.finished.connect(lambda r: finished.append(r))
        _type(session, "abcdefghij")
        assert session.phase is SessionPhase.FINISHED
        assert finished == [session.result]

    def test_mistyped_submission_still_finishes(self, make_session):
        session = make_session("abcde")
        _type(session, "zzzzz")
        assert session.phase is SessionPhase.FINISHED
        assert session.result.accuracy == 0

    def test_input_after_finish_ignored(self, make_session):
        session = make_session("ab")
        _type(session, "ab")
        result = session.result
        session.type_char("c")
        session.update_input("")
        assert session.current_input == "ab"
        assert session.result is result

    def test_pasted_overflow_truncated(self, make_session):
        session = make_session("abcde")
        session.update_input("abcdefgh")
        assert session.current_input == "abcde"
        assert session.phase is SessionPhase.FINISHED

    def test_correction_before_finish_counts(self, make_session):
        session = make_session("abcde")
        _type(session, "abcX")
        session.backspace()
        _type(session, "de")
        assert session.result.accuracy == 100

    def test_comparison_is_projection(self, make_session):
        session = make_session("abcd")
        session.update_input("aX")
        assert session.comparison() == [
            CharMark.CORRECT, CharMark.INCORRECT, CharMark.PENDING, CharMark.PENDING
        ]
        session.update_input("ab")
        assert session.comparison()[1] is CharMark.CORRECT


class TestScoring:
    def test_cat_dog_in_one_minute(self, make_session, clock):
        session = make_session("cat dog")
        session.type_char("c")
        clock.advance(60)
        _type(session, "at dog")
        assert session.result.wpm == 1
        assert session.result.accuracy == 100

    def test_one_mismatch(self, make_session, clock):
        session = make_session("abcde")
        session.type_char("a")
        clock.advance(30)
        _type(session, "bcXe")
        assert session.result.accuracy == 80
        assert session.result.wpm == 2

    def test_instant_completion_is_finite(self, make_session):
        session = make_session("abcde")
        session.update_input("abcde")
        assert session.result.wpm == 100


class TestHistoryIntegration:
    def test_result_appended_and_persisted(self, make_session, kv):
        session = make_session("ab")
        changed = []
        session.historyChanged.connect(lambda h: changed.append(h))
        _type(session, "ab")
        assert session.history == [session.result]
        stored = json.loads(kv.get(config.HISTORY_KEY))
        assert stored == [session.result.to_record()]
        assert changed == [[session.result]]

    def test_loads_existing_history(self, make_session):
        old = [ScoreResult(10 + i, 50, "x") for i in range(5)]
        kv = MemoryStore({config.HISTORY_KEY: json.dumps([r.to_record() for r in old])})
        session = make_session("ab", history=HistoryStore(kv))
        assert session.history == old
        _type(session, "ab")
        assert len(session.history) == 5
        assert session.history[0] == session.result
        assert old[-1] not in session.history

    def test_storage_failure_does_not_block_scores(self, make_session):
        broken = MagicMock()
        broken.get.return_value = None
        broken.set.side_effect = StorageError("full")
        session = make_session("ab", history=HistoryStore(broken))
        _type(session, "ab")
        assert session.phase is SessionPhase.FINISHED
        assert session.result.accuracy == 100


class TestFeedback:
    def test_summary_embeds_stats_and_text(self, make_session, requester):
        session = make_session("cat dog")
        session.update_input("cat dog")
        summary, language = requester.calls[0]
        assert f"WPM: {session.result.wpm}" in summary
        assert f"Accuracy: {session.result.accuracy}%" in summary
        assert '"cat dog"' in summary
        assert language is Language.EN

    def test_feedback_filled_on_success(self, make_session, requester):
        session = make_session("ab")
        _type(session, "ab")
        assert session.feedback == requester.reply
        assert not session.feedback_pending

    def test_pending_until_resolved(self, make_session, requester):
        pool = DeferredPool()
        session = make_session("ab", pool=pool)
        _type(session, "ab")
        assert session.phase is SessionPhase.FINISHED
        assert session.result is not None
        assert session.feedback_pending
        assert session.feedback == ""
        pool.run_all()
        assert session.feedback == requester.reply
        assert not session.feedback_pending

    def test_failure_uses_fallback(self, make_session):
        failing = StubRequester(error=FeedbackError("boom"))
        session = make_session("abcde", requester=failing)
        _type(session, "abcXe")
        assert session.feedback == feedback_fallback(Language.EN)
        assert session.result.accuracy == 80

    def test_unexpected_exception_uses_fallback(self, make_session):
        failing = StubRequester(error=RuntimeError("socket closed"))
        session = make_session("ab", requester=failing)
        _type(session, "ab")
        assert session.feedback == feedback_fallback(Language.EN)

    def test_fallback_follows_language(self, make_session):
        failing = StubRequester(error=FeedbackError("boom"))
        session = make_session("ab", requester=failing, language=Language.TA)
        _type(session, "ab")
        assert session.feedback == feedback_fallback(Language.TA)
        assert failing.calls[0][1] is Language.TA

    def test_timeout_uses_fallback_and_late_reply_is_dropped(self, make_session):
        pool = DeferredPool()
        session = make_session("ab", pool=pool)
        _type(session, "ab")
        session._on_feedback_timeout()
        assert session.feedback == feedback_fallback(Language.EN)
        pool.run_all()
        assert session.feedback == feedback_fallback(Language.EN)

    def test_stale_reply_does_not_touch_new_session(self, make_session, requester):
        pool = DeferredPool()
        session = make_session("ab", "cd", pool=pool)
        _type(session, "ab")
        session.restart()
        _type(session, "c")
        pool.run_all()
        assert session.feedback == ""
        assert not session.feedback_pending

    def test_stale_reply_after_second_finish(self, make_session):
        pool = DeferredPool()
        session = make_session("ab", "cd", pool=pool)
        _type(session, "ab")
        stale = pool.pending.pop()
        session.restart()
        _type(session, "cd")
        stale.signals.ready.emit(stale.generation, "old advice")
        assert session.feedback == ""
        pool.run_all()
        assert session.feedback == StubRequester().reply

    def test_watchdog_fires_on_real_pool(self, make_session, qapp):
        gate = threading.Event()

        class SlowRequester(StubRequester):
            def request_feedback(self, summary_text, language):
                gate.wait(5)
                return super().request_feedback(summary_text, language)

        session = make_session("ab", pool=Workers.pool, requester=SlowRequester(),
                               feedback_timeout_ms=50)
        try:
            _type(session, "ab")
            _wait_for_feedback(qapp, session)
            assert not session.feedback_pending
            assert session.feedback == feedback_fallback(Language.EN)
        finally:
            gate.set()
            Workers.pool.waitForDone(5000)
        qapp.processEvents()
        assert session.feedback == feedback_fallback(Language.EN)

    def test_reply_delivered_from_real_pool(self, make_session, qapp, requester):
        session = make_session("ab", pool=Workers.pool)
        _type(session, "ab")
        _wait_for_feedback(qapp, session)
        assert session.feedback == requester.reply


class TestRestart:
    def test_restart_resets_transients_and_keeps_history(self, make_session):
        session = make_session("ab", "cd")
        reset = []
        session.reset.connect(lambda text: reset.append(text))
        _type(session, "ab")
        history = session.history
        gen = session.generation

        session.restart()
        assert session.phase is SessionPhase.IDLE
        assert session.reference == "cd"
        assert session.current_input == ""
        assert session.state.started_at is None
        assert session.result is None
        assert session.feedback == ""
        assert session.history == history
        assert session.generation == gen + 1
        assert reset == ["cd"]
