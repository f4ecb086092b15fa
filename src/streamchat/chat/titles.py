"""Conversation titling from the first user message."""

import logging

from ..llm import ChatMessage, LLMProvider
from ..prompts import get_title_prompt
from ..store import DEFAULT_TITLE, MessageStore

logger = logging.getLogger(__name__)

TITLE_MAX_TOKENS = 20


class TitleGenerator:
    """Asks the model for a short title and stores it on the conversation."""

    def __init__(
        self,
        llm: LLMProvider,
        store: MessageStore,
        model: str | None = None,
        max_tokens: int = TITLE_MAX_TOKENS,
    ):
        self._llm = llm
        self._store = store
        self._model = model
        self._max_tokens = max_tokens

    async def generate(self, conversation_id: str, first_message: str) -> str | None:
        """Title a conversation.

        Failures are logged and leave the current title in place.

        Returns:
            The stored title, or None if titling failed
        """
        try:
            response = await self._llm.chat_completion(
                [
                    ChatMessage(role="system", content=get_title_prompt()),
                    ChatMessage(role="user", content=first_message),
                ],
                model=self._model,
                max_tokens=self._max_tokens,
            )
            title = clean_title(response.content)
            await self._store.update_conversation_title(conversation_id, title)
        except Exception:
            logger.exception("Failed to generate title for conversation %s", conversation_id)
            return None

        logger.info("Titled conversation %s: %s", conversation_id, title)
        return title


def clean_title(raw: str) -> str:
    """Trim a model reply into a title, falling back to the default."""
    title = raw.strip().strip("\"'").strip()
    return title or DEFAULT_TITLE
