"""Conversation orchestration.

Ties the store, the model and the background task runner into the
send-then-stream lifecycle of a chat turn:

1. The user message and an empty streaming placeholder are inserted
2. Generation is submitted to the task runner
3. The stream consumer grows the placeholder until its terminal write

Senders get the placeholder id back immediately and follow progress
through the store's conversation feed.
"""

import logging

from ..llm import ChatMessage, LLMProvider
from ..store import (
    DEFAULT_TITLE,
    Conversation,
    ConversationNotFoundError,
    Message,
    MessageStore,
    Role,
)
from ..streaming import FlushPolicy, StreamConsumer, StreamOutcome
from .tasks import TaskRunner
from .titles import TitleGenerator

logger = logging.getLogger(__name__)


class ConversationOrchestrator:
    """Entry point for everything a chat client does.

    Usage:
        orchestrator = ConversationOrchestrator(store, llm, TaskRunner())
        conversation = await orchestrator.create_conversation()
        reply_id = await orchestrator.send_message(conversation.id, "Hello")
    """

    def __init__(
        self,
        store: MessageStore,
        llm: LLMProvider,
        tasks: TaskRunner,
        policy: FlushPolicy | None = None,
        model: str | None = None,
        title_generator: TitleGenerator | None = None,
        system_prompt: str | None = None,
    ):
        self._store = store
        self._llm = llm
        self._tasks = tasks
        self._policy = policy or FlushPolicy()
        self._model = model
        self._titles = title_generator
        self._system_prompt = system_prompt

    @property
    def store(self) -> MessageStore:
        return self._store

    @property
    def llm(self) -> LLMProvider:
        return self._llm

    async def create_conversation(self, title: str = DEFAULT_TITLE) -> Conversation:
        conversation = await self._store.create_conversation(title)
        logger.info("Created conversation %s", conversation.id)
        return conversation

    async def list_conversations(self) -> list[Conversation]:
        """List conversations, newest first."""
        return await self._store.list_conversations()

    async def get_messages(self, conversation_id: str) -> list[Message]:
        await self._require_conversation(conversation_id)
        return await self._store.list_by_conversation(conversation_id, "asc")

    async def delete_conversation(self, conversation_id: str) -> None:
        """Delete a conversation together with its messages."""
        await self._store.delete_conversation(conversation_id)
        logger.info("Deleted conversation %s", conversation_id)

    async def send_message(self, conversation_id: str, content: str) -> str:
        """Record a user message and start generating the reply.

        Args:
            conversation_id: Target conversation
            content: User message text

        Returns:
            Id of the assistant placeholder message

        Raises:
            ValueError: If content is blank
            ConversationNotFoundError: If the conversation does not exist
        """
        if not content or not content.strip():
            raise ValueError("Message content cannot be empty")
        await self._require_conversation(conversation_id)

        is_first = not await self._store.list_by_conversation(conversation_id)
        await self._store.insert(conversation_id, Role.USER, content)

        if is_first and self._titles is not None:
            self._tasks.submit(
                self._titles.generate(conversation_id, content),
                name=f"title-{conversation_id}",
            )

        assistant_id = await self._store.insert(
            conversation_id, Role.ASSISTANT, "", is_streaming=True
        )
        self._tasks.submit(
            self.generate_response(conversation_id, assistant_id),
            name=f"reply-{assistant_id}",
        )
        logger.debug("Submitted reply %s in conversation %s", assistant_id, conversation_id)
        return assistant_id

    async def generate_response(
        self,
        conversation_id: str,
        assistant_message_id: str
    ) -> StreamOutcome:
        """Stream the model reply into an existing placeholder."""
        history = await self.build_history(conversation_id)
        consumer = StreamConsumer(
            self._llm,
            self._store,
            policy=self._policy,
            model=self._model,
        )
        return await consumer.run(assistant_message_id, history)

    async def build_history(self, conversation_id: str) -> list[ChatMessage]:
        """Model input for the next turn.

        Finished messages in insertion order, optionally preceded by the
        system prompt. Messages still streaming, including the placeholder
        being filled, are left out.
        """
        messages = await self._store.list_by_conversation(conversation_id, "asc")
        history = []
        if self._system_prompt:
            history.append(ChatMessage(role="system", content=self._system_prompt))
        history.extend(
            ChatMessage(role=message.role.value, content=message.content)
            for message in messages
            if not message.is_streaming
        )
        return history

    async def _require_conversation(self, conversation_id: str) -> Conversation:
        conversation = await self._store.get_conversation(conversation_id)
        if conversation is None:
            raise ConversationNotFoundError(conversation_id)
        return conversation
