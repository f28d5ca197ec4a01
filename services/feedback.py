# services/feedback.py
from __future__ import annotations
import logging
from typing import Optional, Protocol

from google import genai
from google.genai import types

from app import config
from app.errors import FeedbackError
from app.i18n import Language
from app.prompts import CoachMode, system_instruction

log = logging.getLogger(__name__)


class FeedbackRequester(Protocol):
    def request_feedback(self, summary_text: str, language: Language = Language.EN) -> str: ...


def make_client(api_key: str, timeout_ms: int = config.FEEDBACK_TIMEOUT_MS) -> genai.Client:
    return genai.Client(api_key=api_key, http_options=types.HttpOptions(timeout=timeout_ms))


class GeminiFeedbackRequester:
    """Stateless one-shot call; every request carries the typing-coach instruction."""

    def __init__(self, api_key: Optional[str], model: str = config.DEFAULT_MODEL,
                 timeout_ms: int = config.FEEDBACK_TIMEOUT_MS, client=None):
        self.api_key = api_key
        self.model = model
        self.timeout_ms = timeout_ms
        self._client = client

    @property
    def client(self):
        if self._client is None:
            if not self.api_key:
                raise FeedbackError("API key is missing")
            self._client = make_client(self.api_key, self.timeout_ms)
        return self._client

    def request_feedback(self, summary_text: str, language: Language = Language.EN) -> str:
        log.debug("Requesting typing feedback in %s", Language(language).value)
        try:
            response = self.client.models.generate_content(
                model=self.model,
                contents=summary_text,
                config=types.GenerateContentConfig(
                    system_instruction=system_instruction(CoachMode.TYPING, language),
                ),
            )
        except FeedbackError:
            raise
        except Exception as e:
            raise FeedbackError(f"Feedback request failed: {e}") from e

        text = (getattr(response, "text", None) or "").strip()
        if not text:
            raise FeedbackError("Empty feedback response")
        return text
