"""Consumption of a model token stream into a stored assistant message.

Hides the design decisions about:
- Accumulating deltas into the full reply text
- When partial text is persisted (delegated to FlushPolicy)
- How a turn ends: one terminal write, with the full reply on success or
  a fixed apology on failure
- What happens when the store rejects a write
"""

import asyncio
import logging
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from ..llm import ChatMessage, LLMProvider
from ..store import MessageStore, StoreError, StoreWriteError
from .policy import FlushPolicy

logger = logging.getLogger(__name__)

FALLBACK_MESSAGE = "I'm sorry, I encountered an error while generating a response."

TERMINAL_WRITE_ATTEMPTS = 3
TERMINAL_RETRY_DELAY = 0.2  # seconds, doubled after each failed attempt


class OutcomeStatus(str, Enum):
    """How a turn ended."""

    COMPLETED = "completed"
    FAILED = "failed"


class StreamOutcome(BaseModel):
    """Terminal result of one assistant turn."""

    model_config = ConfigDict(frozen=True)

    message_id: str
    status: OutcomeStatus
    content: str = Field(description="Content of the terminal write")
    chunk_count: int = Field(default=0, description="Non-empty deltas received")
    flush_count: int = Field(default=0, description="Intermediate writes persisted")
    error: str | None = Field(default=None, description="Model failure, if any")

    @property
    def succeeded(self) -> bool:
        return self.status is OutcomeStatus.COMPLETED


class StreamConsumer:
    """Drives one model stream into one assistant message.

    The consumer is the only writer of its message for the duration of a
    run. Stored content only ever grows until the terminal write, after
    which nothing else is written.

    Usage:
        consumer = StreamConsumer(llm, store)
        outcome = await consumer.run(placeholder_id, history)
    """

    def __init__(
        self,
        llm: LLMProvider,
        store: MessageStore,
        policy: FlushPolicy | None = None,
        fallback_message: str = FALLBACK_MESSAGE,
        model: str | None = None,
        terminal_write_attempts: int = TERMINAL_WRITE_ATTEMPTS,
        retry_delay: float = TERMINAL_RETRY_DELAY,
    ):
        self._llm = llm
        self._store = store
        self._policy = policy or FlushPolicy()
        self._fallback_message = fallback_message
        self._model = model
        self._terminal_write_attempts = max(1, terminal_write_attempts)
        self._retry_delay = retry_delay

    async def run(self, message_id: str, history: list[ChatMessage]) -> StreamOutcome:
        """Stream a reply into the placeholder message.

        Model failures never escape: they end the turn with the fallback
        text. Only a terminal write that cannot be persisted raises.

        Args:
            message_id: Placeholder assistant message (empty, streaming)
            history: Prior conversation, oldest first

        Returns:
            Outcome of the turn

        Raises:
            StoreWriteError: If the terminal write fails on every attempt
        """
        full_content = ""
        chunk_count = 0
        flush_count = 0

        try:
            stream = await self._llm.chat_completion_stream(history, model=self._model)
            try:
                async for delta in stream:
                    if not delta:
                        continue
                    full_content += delta
                    chunk_count += 1
                    if self._policy.should_flush(chunk_count, len(full_content)):
                        if await self._flush(message_id, full_content):
                            flush_count += 1
            finally:
                await stream.aclose()
        except Exception as e:
            logger.exception(
                "Error generating response for message %s after %d chunks",
                message_id, chunk_count
            )
            await self._write_terminal(message_id, self._fallback_message)
            return StreamOutcome(
                message_id=message_id,
                status=OutcomeStatus.FAILED,
                content=self._fallback_message,
                chunk_count=chunk_count,
                flush_count=flush_count,
                error=str(e) or type(e).__name__,
            )

        await self._write_terminal(message_id, full_content)
        logger.info(
            "Completed message %s: %d chunks, %d characters, %d flushes",
            message_id, chunk_count, len(full_content), flush_count
        )
        if stream.usage:
            logger.debug("Usage for message %s: %s", message_id, stream.usage)
        return StreamOutcome(
            message_id=message_id,
            status=OutcomeStatus.COMPLETED,
            content=full_content,
            chunk_count=chunk_count,
            flush_count=flush_count,
        )

    async def _flush(self, message_id: str, content: str) -> bool:
        """Persist partial content; a failed flush is skipped.

        Content is cumulative, so the next flush or the terminal write
        carries everything a skipped flush would have.
        """
        try:
            await self._store.patch(message_id, content=content, is_streaming=True)
        except StoreError as e:
            logger.warning("Skipped flush of message %s at %d characters: %s", message_id, len(content), e)
            return False
        logger.debug("Flushed message %s at %d characters", message_id, len(content))
        return True

    async def _write_terminal(self, message_id: str, content: str) -> None:
        """Write the final state of the message, retrying on store errors."""
        delay = self._retry_delay
        for attempt in range(1, self._terminal_write_attempts + 1):
            try:
                await self._store.patch(message_id, content=content, is_streaming=False)
                return
            except StoreError as e:
                if attempt == self._terminal_write_attempts:
                    raise StoreWriteError(
                        f"Terminal write of message {message_id} failed after {attempt} attempts: {e}"
                    ) from e
                logger.warning(
                    "Terminal write of message %s failed (attempt %d/%d): %s",
                    message_id, attempt, self._terminal_write_attempts, e
                )
                await asyncio.sleep(delay)
                delay *= 2
