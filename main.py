# main.py
from __future__ import annotations
import argparse
import logging
import sys
import time
from typing import List, Optional

from PySide6.QtCore import QCoreApplication

from app import config
from app.calculation import CharMark
from app.config import Settings, load_settings
from app.i18n import Language, tr
from app.prompts import CoachMode
from app.samples import SampleProvider, load_corpus
from services.coach_chat import ChatConfig, CoachChat
from services.feedback import GeminiFeedbackRequester
from services.history import HistoryStore, open_store
from services.typing_engine import TypingSession

log = logging.getLogger("main")

_COLORS = {
    CharMark.CORRECT: "\033[32m",
    CharMark.INCORRECT: "\033[41;37m",
    CharMark.PENDING: "\033[90m",
}
_RESET = "\033[0m"
_BACKSPACE = ("\x7f", "\b")
_INTERRUPT = ("\x03", "\x04")


def setup_logging(settings: Settings) -> None:
    settings.data_dir.mkdir(parents=True, exist_ok=True)
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
        handlers=[
            logging.StreamHandler(sys.stderr),
            logging.FileHandler(settings.data_dir / config.LOG_FILE, encoding="utf-8"),
        ],
    )

    # Log any uncaught exceptions rather than silently dying
    def excepthook(exctype, value, tb):
        logging.exception("Unhandled exception", exc_info=(exctype, value, tb))
        sys.exit(1)

    sys.excepthook = excepthook


def build_session(settings: Settings, parent=None) -> TypingSession:
    samples = SampleProvider(load_corpus(settings.sentences_file))
    history = HistoryStore(open_store(settings))
    requester = GeminiFeedbackRequester(
        settings.api_key, model=settings.model, timeout_ms=settings.feedback_timeout_ms
    )
    return TypingSession(
        samples, history, requester,
        language=settings.language,
        feedback_timeout_ms=settings.feedback_timeout_ms,
        parent=parent,
    )


def render_line(reference: str, marks: List[CharMark]) -> str:
    return "".join(f"{_COLORS[m]}{ch}{_RESET}" for ch, m in zip(reference, marks))


def _read_key() -> str:
    return sys.stdin.read(1)


def _skip_escape() -> None:
    """Consume the rest of an ESC sequence (arrows, Home, Delete, ...)."""
    intro = _read_key()
    if intro == "O":
        _read_key()
    elif intro == "[":
        # CSI: parameter/intermediate bytes, then one final byte in @..~
        while True:
            ch = _read_key()
            if not ch or "@" <= ch <= "~":
                return


def _play_round(app: QCoreApplication, session: TypingSession) -> None:
    lang = session.language
    print(f"\n{tr(lang, 'typeHere')}\n")
    sys.stdout.write("\r" + render_line(session.reference, session.comparison()))
    sys.stdout.flush()

    while not session.state.finished:
        ch = _read_key()
        if not ch:
            raise EOFError
        if ch in _INTERRUPT:
            raise KeyboardInterrupt
        if ch in _BACKSPACE:
            session.backspace()
        elif ch == "\x1b":
            _skip_escape()
            continue
        elif ch < " " and ch != "\t":
            continue
        else:
            session.type_char(ch)
        sys.stdout.write("\r" + render_line(session.reference, session.comparison()))
        sys.stdout.flush()

    result = session.result
    print(f"\n\n{tr(lang, 'speed')}: {result.wpm} WPM   {tr(lang, 'accuracy')}: {result.accuracy}%")
    print(f"{tr(lang, 'mentorFeedback')} {tr(lang, 'loadingFeedback')}")
    while session.feedback_pending:
        app.processEvents()
        time.sleep(0.05)
    print(session.feedback)

    print(f"\n{tr(lang, 'recentHistory')}")
    for entry in session.history:
        print(f"  {entry.date}  {entry.wpm} WPM / {entry.accuracy}%")


def run_typing(app: QCoreApplication, session: TypingSession) -> int:
    if not sys.stdin.isatty():
        log.error("The typing trainer needs an interactive terminal")
        return 2
    import termios
    import tty

    fd = sys.stdin.fileno()
    saved = termios.tcgetattr(fd)
    try:
        while True:
            tty.setcbreak(fd)
            try:
                _play_round(app, session)
            finally:
                termios.tcsetattr(fd, termios.TCSADRAIN, saved)
            answer = input(f"\n{tr(session.language, 'tryAnother')}? [Y/n] ").strip().lower()
            if answer.startswith("n"):
                return 0
            session.restart()
    except (KeyboardInterrupt, EOFError):
        print()
        return 0
    finally:
        termios.tcsetattr(fd, termios.TCSADRAIN, saved)


def _greeting(lang: Language, mode: CoachMode) -> str:
    return tr(lang, "chatGreeting").format(topic=tr(lang, mode.value))


def run_chat(settings: Settings, mode: CoachMode, chat: Optional[CoachChat] = None) -> int:
    chat = chat or CoachChat(settings.api_key)
    lang = settings.language
    cfg = ChatConfig(mode=mode, language=lang, model=settings.model)
    print(f"{tr(lang, mode.value)} ({tr(lang, 'placeholder')} {tr(lang, 'chatClearHint')})")
    print(_greeting(lang, mode))
    try:
        while True:
            message = input("> ").strip()
            if not message:
                continue
            if message == "/clear":
                chat.reset()
                print(tr(lang, "chatCleared"))
                print(_greeting(lang, mode))
                continue
            print(chat.send(message, cfg))
    except (KeyboardInterrupt, EOFError):
        print()
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(prog="mentorbridge", description="Typing coach with AI feedback")
    parser.add_argument("--lang", choices=[lang.value for lang in Language], help="interface and feedback language")
    parser.add_argument("--chat", choices=[m.value for m in CoachMode if m is not CoachMode.TYPING],
                        help="open a mentor chat instead of the typing test")
    args = parser.parse_args(argv)

    settings = load_settings()
    if args.lang:
        settings.language = Language(args.lang)
    setup_logging(settings)

    if args.chat:
        return run_chat(settings, CoachMode(args.chat))

    app = QCoreApplication.instance() or QCoreApplication(sys.argv[:1])
    app.setApplicationName(config.APP_NAME)
    session = build_session(settings)
    return run_typing(app, session)


if __name__ == "__main__":
    sys.exit(main())
