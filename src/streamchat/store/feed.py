"""Live read models over the message store.

A feed yields a fresh snapshot when it starts and again after every
change notification for its key. Snapshots are whole query results, never
deltas, so a subscriber that skips intermediate states still ends on the
latest one. Identical consecutive snapshots are not yielded twice.
"""

from collections.abc import AsyncIterator, Awaitable, Callable
from typing import Generic, TypeVar

from .base import MessageStore
from .events import CONVERSATIONS_KEY
from .models import Conversation, Message

T = TypeVar("T")


class LiveQuery(Generic[T]):
    """Re-evaluates a store query whenever its key is notified."""

    def __init__(
        self,
        store: MessageStore,
        key: str,
        query: Callable[[], Awaitable[T]],
    ):
        self._store = store
        self._key = key
        self._query = query

    async def snapshot(self) -> T:
        """Evaluate the query once."""
        return await self._query()

    async def watch(self) -> AsyncIterator[T]:
        """Yield the query result now and after every change.

        The listener is registered before the first read, so a write that
        lands between the read and the wait is not missed.
        """
        notifier = self._store.notifier
        changes = notifier.listen(self._key)
        try:
            last: T | None = None
            first = True
            while True:
                current = await self._query()
                if first or current != last:
                    yield current
                    last = current
                    first = False
                await changes.get()
        finally:
            notifier.unlisten(self._key, changes)

    def __aiter__(self) -> AsyncIterator[T]:
        return self.watch()


class ConversationFeed(LiveQuery[list[Message]]):
    """Live ordered message list of one conversation."""

    def __init__(self, store: MessageStore, conversation_id: str):
        super().__init__(
            store,
            conversation_id,
            lambda: store.list_by_conversation(conversation_id, "asc"),
        )
        self.conversation_id = conversation_id


class ConversationListFeed(LiveQuery[list[Conversation]]):
    """Live conversation list, newest first."""

    def __init__(self, store: MessageStore):
        super().__init__(store, CONVERSATIONS_KEY, store.list_conversations)
