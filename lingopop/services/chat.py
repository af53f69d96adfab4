"""Tutor chat scoped to a single dictionary entry."""

import logging

from lingopop.config import settings
from lingopop.errors import GatewayError
from lingopop.languages import language_name
from lingopop.schemas import ChatMessage, DictionaryEntry
from lingopop.services.gemini import GeminiGateway

logger = logging.getLogger(__name__)


def build_system_instruction(context_term: str, target_lang: str) -> str:
    """Build the system instruction that fixes the tutor persona to one term."""
    return (
        "You are a helpful language tutor assistant. The user is currently looking at the "
        f'word "{context_term}" in {language_name(target_lang)}. Only answer questions about '
        "this word and how it is used. Answer briefly and helpfully. Keep the tone friendly "
        "and encouraging."
    )


class ChatSession:
    """Append-only tutor conversation bound to one entry."""

    def __init__(
        self,
        gateway: GeminiGateway,
        entry: DictionaryEntry,
        target_lang: str | None = None,
        model: str | None = None,
    ) -> None:
        self.gateway = gateway
        self.target_lang = target_lang or settings.target_lang
        self.model = model or settings.text_model
        self._entry = entry
        self._transcript: list[ChatMessage] = []

    @property
    def context_term(self) -> str:
        return self._entry.term

    @property
    def entry_id(self) -> str:
        return self._entry.id

    @property
    def transcript(self) -> tuple[ChatMessage, ...]:
        return tuple(self._transcript)

    def bind(self, entry: DictionaryEntry) -> None:
        """Attach the session to ``entry``; a different entry starts a fresh transcript."""
        if entry.id != self._entry.id:
            logger.debug("Chat rebound from '%s' to '%s'", self._entry.term, entry.term)
            self._transcript.clear()
        self._entry = entry

    async def ask(self, text: str) -> ChatMessage | None:
        """
        Send a user message and append the tutor's reply.

        The user message is appended before the request. On failure no reply
        is appended and None is returned.
        """
        if not text.strip():
            return None

        history = list(self._transcript)
        self._transcript.append(ChatMessage(role="user", text=text))

        try:
            reply = await self.gateway.chat(
                build_system_instruction(self.context_term, self.target_lang),
                history,
                text,
                self.model,
            )
        except GatewayError as e:
            logger.error("Chat about '%s' failed: %s", self.context_term, e)
            return None

        message = ChatMessage(role="assistant", text=reply)
        self._transcript.append(message)
        return message
