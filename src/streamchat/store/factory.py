"""Factory for creating message store backends."""

from typing import Any

from .base import MessageStore


def create_message_store(
    backend: str = "memory",
    **kwargs: Any
) -> MessageStore:
    """Create a message store backend.

    Args:
        backend: Backend type ("memory" or "sqlite")
        **kwargs: Backend-specific configuration
            For sqlite:
                - path: str | Path (default: './streamchat.db')

    Returns:
        MessageStore instance

    Raises:
        ValueError: If backend type is not supported
    """
    if backend == "memory":
        from .in_memory import InMemoryMessageStore
        return InMemoryMessageStore(**kwargs)

    elif backend == "sqlite":
        from .sqlite import SQLiteMessageStore
        return SQLiteMessageStore(**kwargs)

    raise ValueError(
        f"Unsupported store backend: {backend}. "
        f"Supported backends: memory, sqlite"
    )
