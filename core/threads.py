# core/threads.py
import logging

from PySide6.QtCore import QObject, QRunnable, QThreadPool, Signal

from app.i18n import Language

log = logging.getLogger(__name__)


class FeedbackWorkerSignals(QObject):
    ready = Signal(int, str)    # generation, feedback text
    failed = Signal(int, str)   # generation, error message


class FeedbackWorker(QRunnable):
    def __init__(self, requester, summary: str, language: Language, generation: int):
        super().__init__()
        self.requester = requester
        self.summary = summary
        self.language = language
        self.generation = generation
        self.signals = FeedbackWorkerSignals()

    def run(self):
        try:
            text = self.requester.request_feedback(self.summary, self.language)
        except Exception as e:
            log.warning("Feedback request failed: %s", e)
            self.signals.failed.emit(self.generation, str(e))
            return
        self.signals.ready.emit(self.generation, text)


class Workers:
    pool = QThreadPool.globalInstance()
