# services/coach_chat.py
from __future__ import annotations
import logging
from dataclasses import dataclass
from typing import Callable, Optional

from google.genai import types

from app import config
from app.i18n import Language, tr
from app.prompts import CoachMode, system_instruction
from services.feedback import make_client

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class ChatConfig:
    mode: CoachMode
    language: Language = Language.EN
    model: str = config.DEFAULT_MODEL
    temperature: float = config.DEFAULT_TEMPERATURE


class CoachChat:
    """
    Multi-turn mentor chat. The remote chat is bound to one ChatConfig;
    sending with a different config starts a new chat instead of
    reconfiguring the old one.
    """

    def __init__(self, api_key: Optional[str],
                 client_factory: Optional[Callable[[str], object]] = None):
        self.api_key = api_key
        self._client_factory = client_factory or make_client
        self._client = None
        self._chat = None
        self._config: Optional[ChatConfig] = None

    @property
    def config(self) -> Optional[ChatConfig]:
        return self._config

    def _open(self, cfg: ChatConfig):
        if self._client is None:
            self._client = self._client_factory(self.api_key)
        log.info("Starting %s chat (%s)", cfg.mode.value, cfg.language.value)
        return self._client.chats.create(
            model=cfg.model,
            config=types.GenerateContentConfig(
                system_instruction=system_instruction(cfg.mode, cfg.language),
                temperature=cfg.temperature,
            ),
        )

    def send(self, message: str, cfg: ChatConfig) -> str:
        if not self.api_key:
            return tr(cfg.language, "missingKey")
        try:
            if self._chat is None or cfg != self._config:
                self._chat = self._open(cfg)
                self._config = cfg
            response = self._chat.send_message(message)
        except Exception as e:
            log.error("Chat request failed: %s", e)
            return tr(cfg.language, "chatError")
        return (getattr(response, "text", None) or "").strip() or tr(cfg.language, "chatEmpty")

    def reset(self) -> None:
        self._chat = None
        self._config = None
