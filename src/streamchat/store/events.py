"""Change notification for store subscribers.

Hides how readers learn that the store changed. Each listener gets a
queue of size one: a burst of writes collapses into a single pending
wake-up, and the listener re-reads the latest state when it runs.
"""

import asyncio
from collections import defaultdict

# Key notified whenever the conversation list itself changes
CONVERSATIONS_KEY = "__conversations__"


class ChangeNotifier:
    """In-process publish/subscribe keyed by conversation id."""

    def __init__(self) -> None:
        self._listeners: dict[str, set[asyncio.Queue[None]]] = defaultdict(set)

    def listen(self, key: str) -> asyncio.Queue[None]:
        """Register a listener for a key.

        Returns:
            Queue that receives an item after every change
        """
        queue: asyncio.Queue[None] = asyncio.Queue(maxsize=1)
        self._listeners[key].add(queue)
        return queue

    def unlisten(self, key: str, queue: asyncio.Queue[None]) -> None:
        """Remove a listener registered with ``listen``."""
        listeners = self._listeners.get(key)
        if listeners is None:
            return
        listeners.discard(queue)
        if not listeners:
            del self._listeners[key]

    def notify(self, key: str) -> None:
        """Wake every listener of a key."""
        for queue in self._listeners.get(key, ()):
            if queue.empty():
                queue.put_nowait(None)

    def listener_count(self, key: str) -> int:
        return len(self._listeners.get(key, ()))
