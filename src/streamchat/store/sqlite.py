"""SQLite message store backend.

Provides persistent conversation storage using a SQLite database.
Uses aiosqlite for async access with WAL mode for concurrent readers.
"""

import logging
from datetime import datetime
from pathlib import Path
from typing import Any

import aiosqlite

from .base import (
    ConversationNotFoundError,
    MessageNotFoundError,
    MessageStore,
    SortOrder,
    StoreError,
    StoreWriteError,
    validate_patch,
)
from .models import DEFAULT_TITLE, Conversation, Message, Role, utc_now

logger = logging.getLogger(__name__)

_SCHEMA = """
CREATE TABLE IF NOT EXISTS conversations (
    id          TEXT PRIMARY KEY,
    title       TEXT NOT NULL,
    created_at  TEXT NOT NULL,
    updated_at  TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS messages (
    seq             INTEGER PRIMARY KEY AUTOINCREMENT,
    id              TEXT NOT NULL UNIQUE,
    conversation_id TEXT NOT NULL REFERENCES conversations(id) ON DELETE CASCADE,
    role            TEXT NOT NULL,
    content         TEXT NOT NULL DEFAULT '',
    is_streaming    INTEGER NOT NULL DEFAULT 0,
    created_at      TEXT NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_messages_conversation ON messages(conversation_id, seq);
"""

_MESSAGE_COLUMNS = "id, conversation_id, role, content, is_streaming, created_at"


def _row_to_message(row: tuple) -> Message:
    message_id, conversation_id, role, content, is_streaming, created_at = row
    return Message(
        id=message_id,
        conversation_id=conversation_id,
        role=Role(role),
        content=content,
        is_streaming=bool(is_streaming),
        created_at=datetime.fromisoformat(created_at),
    )


def _row_to_conversation(row: tuple) -> Conversation:
    conversation_id, title, created_at, updated_at = row
    return Conversation(
        id=conversation_id,
        title=title,
        created_at=datetime.fromisoformat(created_at),
        updated_at=datetime.fromisoformat(updated_at),
    )


class SQLiteMessageStore(MessageStore):
    """SQLite-backed message store.

    Stores conversations and messages in a SQLite database file.
    Message order is the autoincrement sequence, so listing is stable
    insertion order. Each write is committed on its own.
    """

    def __init__(self, path: str | Path = "./streamchat.db"):
        super().__init__()
        self._db_path = Path(path)
        self._connection: aiosqlite.Connection | None = None

    async def connect(self) -> None:
        """Open the database and create the schema."""
        if self._connection is not None:
            return
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._connection = await aiosqlite.connect(self._db_path)
        await self._connection.execute("PRAGMA journal_mode=WAL")
        await self._connection.execute("PRAGMA foreign_keys = ON")
        await self._connection.executescript(_SCHEMA)
        await self._connection.commit()
        logger.debug("Opened message store at %s", self._db_path)

    async def disconnect(self) -> None:
        """Close database connection."""
        if self._connection:
            await self._connection.close()
            self._connection = None

    @property
    def _db(self) -> aiosqlite.Connection:
        if self._connection is None:
            raise StoreError("SQLite message store is not connected")
        return self._connection

    async def _write(self, sql: str, params: tuple = ()) -> aiosqlite.Cursor:
        """Execute and commit one statement.

        Raises:
            StoreWriteError: If the driver rejects the write; the open
                transaction is rolled back first
        """
        db = self._db
        try:
            cursor = await db.execute(sql, params)
            await db.commit()
        except aiosqlite.Error as e:
            await self._rollback(db)
            raise StoreWriteError(f"SQLite write failed: {e}") from e
        return cursor

    async def _rollback(self, db: aiosqlite.Connection) -> None:
        try:
            await db.rollback()
        except aiosqlite.Error as e:
            logger.warning("Rollback after failed write failed: %s", e)

    async def _fetch(self, sql: str, params: tuple = ()) -> list:
        """Run a query and return all rows."""
        try:
            async with self._db.execute(sql, params) as cursor:
                return list(await cursor.fetchall())
        except aiosqlite.Error as e:
            raise StoreError(f"SQLite read failed: {e}") from e

    async def create_conversation(self, title: str = DEFAULT_TITLE) -> Conversation:
        conversation = Conversation(title=title)
        await self._write(
            "INSERT INTO conversations (id, title, created_at, updated_at) VALUES (?, ?, ?, ?)",
            (
                conversation.id,
                conversation.title,
                conversation.created_at.isoformat(),
                conversation.updated_at.isoformat(),
            )
        )
        self._changed(conversation.id, conversations=True)
        return conversation

    async def get_conversation(self, conversation_id: str) -> Conversation | None:
        rows = await self._fetch(
            "SELECT id, title, created_at, updated_at FROM conversations WHERE id = ?",
            (conversation_id,)
        )
        return _row_to_conversation(rows[0]) if rows else None

    async def list_conversations(self) -> list[Conversation]:
        rows = await self._fetch(
            "SELECT id, title, created_at, updated_at FROM conversations ORDER BY rowid DESC"
        )
        return [_row_to_conversation(row) for row in rows]

    async def update_conversation_title(self, conversation_id: str, title: str) -> None:
        cursor = await self._write(
            "UPDATE conversations SET title = ?, updated_at = ? WHERE id = ?",
            (title, utc_now().isoformat(), conversation_id)
        )
        if cursor.rowcount == 0:
            raise ConversationNotFoundError(conversation_id)
        self._changed(conversation_id, conversations=True)

    async def delete_conversation(self, conversation_id: str) -> None:
        cursor = await self._write(
            "DELETE FROM conversations WHERE id = ?",
            (conversation_id,)
        )
        if cursor.rowcount == 0:
            raise ConversationNotFoundError(conversation_id)
        self._changed(conversation_id, conversations=True)

    async def get(self, message_id: str) -> Message | None:
        rows = await self._fetch(
            f"SELECT {_MESSAGE_COLUMNS} FROM messages WHERE id = ?",
            (message_id,)
        )
        return _row_to_message(rows[0]) if rows else None

    async def insert(
        self,
        conversation_id: str,
        role: Role,
        content: str = "",
        is_streaming: bool = False
    ) -> str:
        if await self.get_conversation(conversation_id) is None:
            raise ConversationNotFoundError(conversation_id)

        message = Message(
            conversation_id=conversation_id,
            role=role,
            content=content,
            is_streaming=is_streaming,
        )
        await self._write(
            f"INSERT INTO messages ({_MESSAGE_COLUMNS}) VALUES (?, ?, ?, ?, ?, ?)",
            (
                message.id,
                message.conversation_id,
                message.role.value,
                message.content,
                int(message.is_streaming),
                message.created_at.isoformat(),
            )
        )
        self._changed(conversation_id)
        return message.id

    async def patch(self, message_id: str, **fields: Any) -> Message:
        validate_patch(fields)
        assignments = ", ".join(f"{name} = ?" for name in fields)
        values = [int(v) if name == "is_streaming" else v for name, v in fields.items()]

        cursor = await self._write(
            f"UPDATE messages SET {assignments} WHERE id = ?",
            (*values, message_id)
        )
        if cursor.rowcount == 0:
            raise MessageNotFoundError(message_id)

        updated = await self.get(message_id)
        if updated is None:
            raise MessageNotFoundError(message_id)
        self._changed(updated.conversation_id)
        return updated

    async def list_by_conversation(
        self,
        conversation_id: str,
        order: SortOrder = "asc"
    ) -> list[Message]:
        direction = "ASC" if order == "asc" else "DESC"
        rows = await self._fetch(
            f"""
            SELECT {_MESSAGE_COLUMNS}
            FROM messages
            WHERE conversation_id = ?
            ORDER BY seq {direction}
            """,
            (conversation_id,)
        )
        return [_row_to_message(row) for row in rows]

    @property
    def backend_type(self) -> str:
        return "sqlite"

    @property
    def db_path(self) -> Path:
        return self._db_path
