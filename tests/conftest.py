"""Pytest configuration and shared fixtures."""
import asyncio
import os
from collections.abc import Sequence
from typing import Any

import pytest

from streamchat.llm import ChatMessage, LLMProvider, LLMResponse, StreamingResponse
from streamchat.store import MessageStore, Role, StoreWriteError, create_message_store
from streamchat.store.in_memory import InMemoryMessageStore
from streamchat.store.sqlite import SQLiteMessageStore


class ScriptedProvider(LLMProvider):
    """Model source that replays fixed deltas, optionally failing midway.

    ``fail_after`` is the number of deltas yielded before ``error`` is
    raised; ``None`` never fails.
    """

    def __init__(
        self,
        deltas: Sequence[str | None] = (),
        fail_after: int | None = None,
        error: Exception | None = None,
        reply: str = "Scripted Title",
        completion_error: Exception | None = None,
    ):
        self.deltas = list(deltas)
        self.fail_after = fail_after
        self.error = error or ConnectionError("model connection dropped")
        self.reply = reply
        self.completion_error = completion_error
        self.stream_requests: list[list[ChatMessage]] = []
        self.completion_requests: list[dict[str, Any]] = []
        self.closed = False

    @property
    def model(self) -> str:
        return "scripted"

    async def chat_completion(self, messages, model=None, temperature=0.7, max_tokens=None, **kwargs):
        self.completion_requests.append({"messages": list(messages), "max_tokens": max_tokens})
        if self.completion_error is not None:
            raise self.completion_error
        return LLMResponse(content=self.reply, model=model or self.model)

    async def chat_completion_stream(self, messages, model=None, temperature=0.7, max_tokens=None, **kwargs):
        self.stream_requests.append(list(messages))

        async def _deltas():
            for index, delta in enumerate(self.deltas):
                if index == self.fail_after:
                    raise self.error
                await asyncio.sleep(0)
                yield delta
            if self.fail_after is not None and self.fail_after >= len(self.deltas):
                raise self.error

        return StreamingResponse(_deltas())

    async def close(self) -> None:
        self.closed = True


class RecordingStore(InMemoryMessageStore):
    """In-memory store that records successful patches and can reject some.

    ``fail_flushes`` rejects that many streaming patches; ``fail_terminal``
    rejects that many terminal (``is_streaming=False``) patches.
    """

    def __init__(self, fail_flushes: int = 0, fail_terminal: int = 0):
        super().__init__()
        self.patches: list[dict[str, Any]] = []
        self.fail_flushes = fail_flushes
        self.fail_terminal = fail_terminal

    async def patch(self, message_id: str, **fields: Any):
        if fields.get("is_streaming") is True and self.fail_flushes > 0:
            self.fail_flushes -= 1
            raise StoreWriteError("flush rejected")
        if fields.get("is_streaming") is False and self.fail_terminal > 0:
            self.fail_terminal -= 1
            raise StoreWriteError("terminal write rejected")
        updated = await super().patch(message_id, **fields)
        self.patches.append(dict(fields))
        return updated


async def make_placeholder(store: MessageStore, prompt: str = "Hello") -> tuple[str, str]:
    """Create a conversation with a user message and an empty streaming reply."""
    conversation = await store.create_conversation()
    await store.insert(conversation.id, Role.USER, prompt)
    message_id = await store.insert(conversation.id, Role.ASSISTANT, "", is_streaming=True)
    return conversation.id, message_id


async def reject_message_updates(store: SQLiteMessageStore, when: str) -> None:
    """Make message updates matching a SQL condition fail inside SQLite."""
    await store._connection.execute(
        f"CREATE TRIGGER reject_update BEFORE UPDATE ON messages WHEN {when} "
        "BEGIN SELECT RAISE(ABORT, 'disk I/O error'); END"
    )
    await store._connection.commit()


@pytest.fixture
def memory_store():
    """Return a fresh in-memory store (connect is a no-op)."""
    return InMemoryMessageStore()


@pytest.fixture
def recording_store():
    """Return an in-memory store that records patches."""
    return RecordingStore()


@pytest.fixture(params=["memory", "sqlite"])
def store(request, tmp_path) -> MessageStore:
    """Return an unconnected store for each backend; use ``async with``."""
    if request.param == "sqlite":
        return create_message_store("sqlite", path=tmp_path / "chat.db")
    return create_message_store("memory")


@pytest.fixture(scope="session")
def api_keys():
    """Return API keys from environment."""
    return {
        "openai": os.getenv("OPENAI_API_KEY"),
        "anthropic": os.getenv("ANTHROPIC_API_KEY"),
    }
