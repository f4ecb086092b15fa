"""Unit tests for live store feeds."""
import asyncio

import pytest

from streamchat.store import ConversationFeed, ConversationListFeed, LiveQuery, Role
from streamchat.store.in_memory import InMemoryMessageStore


async def next_snapshot(snapshots, timeout: float = 1.0):
    return await asyncio.wait_for(anext(snapshots), timeout)


class TestConversationFeed:
    """Tests for ConversationFeed."""

    @pytest.mark.asyncio
    async def test_yields_initial_snapshot(self, memory_store):
        conversation = await memory_store.create_conversation()
        await memory_store.insert(conversation.id, Role.USER, "hi")

        snapshots = ConversationFeed(memory_store, conversation.id).watch()
        try:
            messages = await next_snapshot(snapshots)
        finally:
            await snapshots.aclose()

        assert [m.content for m in messages] == ["hi"]

    @pytest.mark.asyncio
    async def test_yields_after_each_change(self, memory_store):
        conversation = await memory_store.create_conversation()
        snapshots = ConversationFeed(memory_store, conversation.id).watch()
        try:
            assert await next_snapshot(snapshots) == []

            message_id = await memory_store.insert(
                conversation.id, Role.ASSISTANT, "", is_streaming=True
            )
            (placeholder,) = await next_snapshot(snapshots)
            assert placeholder.is_streaming

            await memory_store.patch(message_id, content="Done", is_streaming=False)
            (finished,) = await next_snapshot(snapshots)
            assert finished.content == "Done"
            assert finished.is_streaming is False
        finally:
            await snapshots.aclose()

    @pytest.mark.asyncio
    async def test_burst_of_writes_yields_latest_state(self, memory_store):
        """Test that a slow reader skips straight to the newest content."""
        conversation = await memory_store.create_conversation()
        message_id = await memory_store.insert(conversation.id, Role.ASSISTANT, "", is_streaming=True)
        snapshots = ConversationFeed(memory_store, conversation.id).watch()
        try:
            await next_snapshot(snapshots)
            for text in ("a", "ab", "abc"):
                await memory_store.patch(message_id, content=text)

            (message,) = await next_snapshot(snapshots)
            assert message.content == "abc"
        finally:
            await snapshots.aclose()

    @pytest.mark.asyncio
    async def test_unchanged_snapshot_is_not_repeated(self, memory_store):
        """Test that a notification without a visible change yields nothing."""
        conversation = await memory_store.create_conversation()
        snapshots = ConversationFeed(memory_store, conversation.id).watch()
        try:
            await next_snapshot(snapshots)
            pending = asyncio.ensure_future(anext(snapshots))
            await asyncio.sleep(0)

            await memory_store.update_conversation_title(conversation.id, "Renamed")
            for _ in range(3):
                await asyncio.sleep(0)
            assert not pending.done()

            await memory_store.insert(conversation.id, Role.USER, "hi")
            messages = await asyncio.wait_for(pending, 1.0)
            assert [m.content for m in messages] == ["hi"]
        finally:
            await snapshots.aclose()

    @pytest.mark.asyncio
    async def test_closing_unregisters_listener(self, memory_store):
        conversation = await memory_store.create_conversation()
        snapshots = ConversationFeed(memory_store, conversation.id).watch()
        await next_snapshot(snapshots)
        assert memory_store.notifier.listener_count(conversation.id) == 1

        await snapshots.aclose()
        assert memory_store.notifier.listener_count(conversation.id) == 0

    @pytest.mark.asyncio
    async def test_async_iteration(self, memory_store):
        """Test that a feed can be consumed with async for."""
        conversation = await memory_store.create_conversation()
        seen = []

        async def reader():
            async for messages in ConversationFeed(memory_store, conversation.id):
                seen.append(len(messages))
                if len(messages) == 2:
                    return

        task = asyncio.create_task(reader())
        await asyncio.sleep(0)
        await memory_store.insert(conversation.id, Role.USER, "one")
        await asyncio.sleep(0)
        await memory_store.insert(conversation.id, Role.USER, "two")
        await asyncio.wait_for(task, 1.0)

        assert seen[0] == 0
        assert seen[-1] == 2


class TestConversationListFeed:
    """Tests for ConversationListFeed."""

    @pytest.mark.asyncio
    async def test_tracks_conversation_list(self):
        store = InMemoryMessageStore()
        snapshots = ConversationListFeed(store).watch()
        try:
            assert await next_snapshot(snapshots) == []

            conversation = await store.create_conversation()
            (listed,) = await next_snapshot(snapshots)
            assert listed.id == conversation.id

            await store.update_conversation_title(conversation.id, "Renamed")
            (renamed,) = await next_snapshot(snapshots)
            assert renamed.title == "Renamed"

            await store.delete_conversation(conversation.id)
            assert await next_snapshot(snapshots) == []
        finally:
            await snapshots.aclose()


class TestLiveQuery:
    """Tests for LiveQuery."""

    @pytest.mark.asyncio
    async def test_snapshot_runs_query_once(self, memory_store):
        calls = []

        async def query():
            calls.append(1)
            return len(calls)

        live = LiveQuery(memory_store, "key", query)
        assert await live.snapshot() == 1
        assert calls == [1]
