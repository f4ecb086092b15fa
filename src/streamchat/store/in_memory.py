"""In-memory message store backend.

Simple dict-based storage for session-only chats.
Data is lost when the application exits.
"""

from typing import Any

from .base import (
    ConversationNotFoundError,
    MessageNotFoundError,
    MessageStore,
    SortOrder,
    validate_patch,
)
from .models import DEFAULT_TITLE, Conversation, Message, Role, utc_now


class InMemoryMessageStore(MessageStore):
    """In-memory message store (session-only).

    Records are immutable models; a patch swaps in a new record, which
    makes each write atomic for readers. Suitable for single-session use
    or testing.
    """

    def __init__(self) -> None:
        super().__init__()
        self._conversations: dict[str, Conversation] = {}
        self._messages: dict[str, Message] = {}
        self._order: dict[str, list[str]] = {}

    async def connect(self) -> None:
        """Initialize store (no-op for in-memory)."""
        pass

    async def disconnect(self) -> None:
        """Close store (no-op for in-memory)."""
        pass

    async def create_conversation(self, title: str = DEFAULT_TITLE) -> Conversation:
        conversation = Conversation(title=title)
        self._conversations[conversation.id] = conversation
        self._order[conversation.id] = []
        self._changed(conversation.id, conversations=True)
        return conversation

    async def get_conversation(self, conversation_id: str) -> Conversation | None:
        return self._conversations.get(conversation_id)

    async def list_conversations(self) -> list[Conversation]:
        return list(reversed(self._conversations.values()))

    async def update_conversation_title(self, conversation_id: str, title: str) -> None:
        conversation = self._require_conversation(conversation_id)
        self._conversations[conversation_id] = conversation.model_copy(
            update={"title": title, "updated_at": utc_now()}
        )
        self._changed(conversation_id, conversations=True)

    async def delete_conversation(self, conversation_id: str) -> None:
        self._require_conversation(conversation_id)
        for message_id in self._order.pop(conversation_id):
            del self._messages[message_id]
        del self._conversations[conversation_id]
        self._changed(conversation_id, conversations=True)

    async def get(self, message_id: str) -> Message | None:
        return self._messages.get(message_id)

    async def insert(
        self,
        conversation_id: str,
        role: Role,
        content: str = "",
        is_streaming: bool = False
    ) -> str:
        self._require_conversation(conversation_id)
        message = Message(
            conversation_id=conversation_id,
            role=role,
            content=content,
            is_streaming=is_streaming,
        )
        self._messages[message.id] = message
        self._order[conversation_id].append(message.id)
        self._changed(conversation_id)
        return message.id

    async def patch(self, message_id: str, **fields: Any) -> Message:
        validate_patch(fields)
        current = self._messages.get(message_id)
        if current is None:
            raise MessageNotFoundError(message_id)
        updated = Message.model_validate({**current.model_dump(), **fields})
        self._messages[message_id] = updated
        self._changed(updated.conversation_id)
        return updated

    async def list_by_conversation(
        self,
        conversation_id: str,
        order: SortOrder = "asc"
    ) -> list[Message]:
        ids = self._order.get(conversation_id, [])
        messages = [self._messages[message_id] for message_id in ids]
        return messages if order == "asc" else list(reversed(messages))

    def _require_conversation(self, conversation_id: str) -> Conversation:
        conversation = self._conversations.get(conversation_id)
        if conversation is None:
            raise ConversationNotFoundError(conversation_id)
        return conversation

    @property
    def backend_type(self) -> str:
        return "memory"
