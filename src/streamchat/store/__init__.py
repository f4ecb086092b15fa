"""Message store module for streamchat.

Provides durable conversation and message storage plus live
subscriptions to store changes.
"""

from .base import (
    ConversationNotFoundError,
    MessageNotFoundError,
    MessageStore,
    StoreError,
    StoreWriteError,
)
from .events import ChangeNotifier
from .factory import create_message_store
from .feed import ConversationFeed, ConversationListFeed, LiveQuery
from .models import DEFAULT_TITLE, Conversation, Message, Role

__all__ = [
    "DEFAULT_TITLE",
    "ChangeNotifier",
    "Conversation",
    "ConversationFeed",
    "ConversationListFeed",
    "ConversationNotFoundError",
    "LiveQuery",
    "Message",
    "MessageNotFoundError",
    "MessageStore",
    "Role",
    "StoreError",
    "StoreWriteError",
    "create_message_store",
]
