"""Data models for the message store.

These models define conversations and messages independent of the
storage backend used. Instances are immutable: a patch produces a new
record, so readers never observe a partially applied update.
"""

from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field
from uuid_extensions import uuid7

DEFAULT_TITLE = "New Chat"


def new_id() -> str:
    """Generate a time-ordered identifier."""
    return str(uuid7())


def utc_now() -> datetime:
    """Current time as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


class Role(str, Enum):
    """Author of a message."""

    USER = "user"
    ASSISTANT = "assistant"


class Conversation(BaseModel):
    """A conversation thread."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=new_id)
    title: str = Field(default=DEFAULT_TITLE, description="Display title")
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)


class Message(BaseModel):
    """A single message in a conversation.

    Assistant messages start empty with ``is_streaming=True`` and grow
    until their terminal write sets ``is_streaming=False``.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=new_id)
    conversation_id: str = Field(description="Owning conversation")
    role: Role = Field(description="Author of the message")
    content: str = Field(default="", description="Text seen so far")
    is_streaming: bool = Field(default=False, description="Whether generation is still running")
    created_at: datetime = Field(default_factory=utc_now)


# Fields a patch may change; identity, ownership and role never change
PATCHABLE_FIELDS = frozenset({"content", "is_streaming"})
