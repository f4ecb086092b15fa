"""Abstract base class for message store backends.

This module defines the interface for conversation and message storage.
The abstraction hides:
- Storage format (dicts, SQLite tables)
- Persistence mechanism (in-memory, file)
- Connection management

Every successful write notifies subscribers of the affected
conversation through ``notifier``.
"""

from abc import ABC, abstractmethod
from typing import Any, Literal

from .events import CONVERSATIONS_KEY, ChangeNotifier
from .models import DEFAULT_TITLE, PATCHABLE_FIELDS, Conversation, Message, Role

SortOrder = Literal["asc", "desc"]


class StoreError(Exception):
    """Base class for message store errors."""


class ConversationNotFoundError(StoreError):
    """Raised when a conversation id does not exist."""

    def __init__(self, conversation_id: str):
        self.conversation_id = conversation_id
        super().__init__(f"Conversation not found: {conversation_id}")


class MessageNotFoundError(StoreError):
    """Raised when a message id does not exist."""

    def __init__(self, message_id: str):
        self.message_id = message_id
        super().__init__(f"Message not found: {message_id}")


class StoreWriteError(StoreError):
    """Raised when a write could not be persisted."""


def validate_patch(fields: dict[str, Any]) -> dict[str, Any]:
    """Check that a patch only touches mutable message fields.

    Raises:
        ValueError: If a field is unknown or immutable, or the patch is empty
    """
    if not fields:
        raise ValueError("Patch must change at least one field")
    unknown = set(fields) - PATCHABLE_FIELDS
    if unknown:
        raise ValueError(f"Cannot patch message fields: {', '.join(sorted(unknown))}")
    return fields


class MessageStore(ABC):
    """Abstract message store backend.

    Provides a unified interface for storing conversations and their
    messages across different storage backends.

    Supports async context manager protocol:
        async with store:
            message_id = await store.insert(conversation_id, Role.USER, "hi")
    """

    def __init__(self) -> None:
        self._notifier = ChangeNotifier()

    @property
    def notifier(self) -> ChangeNotifier:
        """Change notifier used by subscribers."""
        return self._notifier

    def _changed(self, conversation_id: str, conversations: bool = False) -> None:
        self._notifier.notify(conversation_id)
        if conversations:
            self._notifier.notify(CONVERSATIONS_KEY)

    @abstractmethod
    async def connect(self) -> None:
        """Initialize the store backend."""

    @abstractmethod
    async def disconnect(self) -> None:
        """Close the store backend gracefully."""

    # Conversations

    @abstractmethod
    async def create_conversation(self, title: str = DEFAULT_TITLE) -> Conversation:
        """Create a conversation."""

    @abstractmethod
    async def get_conversation(self, conversation_id: str) -> Conversation | None:
        """Get a conversation, or None if absent."""

    @abstractmethod
    async def list_conversations(self) -> list[Conversation]:
        """List conversations, newest first."""

    @abstractmethod
    async def update_conversation_title(self, conversation_id: str, title: str) -> None:
        """Change a conversation's title.

        Raises:
            ConversationNotFoundError: If the conversation does not exist
        """

    @abstractmethod
    async def delete_conversation(self, conversation_id: str) -> None:
        """Delete a conversation and all of its messages.

        Raises:
            ConversationNotFoundError: If the conversation does not exist
        """

    # Messages

    @abstractmethod
    async def get(self, message_id: str) -> Message | None:
        """Get a message, or None if absent."""

    @abstractmethod
    async def insert(
        self,
        conversation_id: str,
        role: Role,
        content: str = "",
        is_streaming: bool = False
    ) -> str:
        """Insert a message.

        Returns:
            Id of the new message

        Raises:
            ConversationNotFoundError: If the conversation does not exist
        """

    @abstractmethod
    async def patch(self, message_id: str, **fields: Any) -> Message:
        """Atomically update ``content`` and/or ``is_streaming``.

        Returns:
            The updated message

        Raises:
            MessageNotFoundError: If the message does not exist
            ValueError: If the patch touches other fields
        """

    @abstractmethod
    async def list_by_conversation(
        self,
        conversation_id: str,
        order: SortOrder = "asc"
    ) -> list[Message]:
        """List a conversation's messages in insertion order."""

    @property
    @abstractmethod
    def backend_type(self) -> str:
        """Get the backend type identifier."""

    async def __aenter__(self) -> "MessageStore":
        await self.connect()
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.disconnect()
