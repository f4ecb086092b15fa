"""Unit tests for the stream consumer."""
import asyncio

import pytest
from conftest import RecordingStore, ScriptedProvider, make_placeholder, reject_message_updates
from hypothesis import given, settings
from hypothesis import strategies as st

from streamchat.llm import ChatMessage
from streamchat.store import StoreWriteError
from streamchat.store.sqlite import SQLiteMessageStore
from streamchat.streaming import (
    FALLBACK_MESSAGE,
    FlushPolicy,
    OutcomeStatus,
    StreamConsumer,
    StreamOutcome,
)

HISTORY = [ChatMessage(role="user", content="Hello")]


async def consume(deltas, store=None, **provider_options):
    """Run one turn against a fresh recording store."""
    store = store or RecordingStore()
    _, message_id = await make_placeholder(store)
    llm = ScriptedProvider(deltas, **provider_options)
    consumer = StreamConsumer(llm, store, retry_delay=0)
    outcome = await consumer.run(message_id, HISTORY)
    return outcome, store, message_id, llm


class TestStreamConsumer:
    """Tests for StreamConsumer.run."""

    @pytest.mark.asyncio
    async def test_single_delta_writes_once(self):
        """Test that a short reply produces only the terminal write."""
        outcome, store, message_id, _ = await consume(["Hi"])

        assert store.patches == [{"content": "Hi", "is_streaming": False}]
        assert outcome.status == OutcomeStatus.COMPLETED
        assert outcome.succeeded
        assert outcome.content == "Hi"
        assert outcome.chunk_count == 1
        assert outcome.flush_count == 0

        message = await store.get(message_id)
        assert message.content == "Hi"
        assert message.is_streaming is False

    @pytest.mark.asyncio
    async def test_failure_mid_stream_writes_fallback(self):
        """Test that a dropped stream replaces partial text with the apology."""
        outcome, store, message_id, _ = await consume(["partial", " answe"], fail_after=2)

        assert outcome.status == OutcomeStatus.FAILED
        assert outcome.content == FALLBACK_MESSAGE
        assert outcome.chunk_count == 2
        assert outcome.error == "model connection dropped"
        assert store.patches[-1] == {"content": FALLBACK_MESSAGE, "is_streaming": False}

        message = await store.get(message_id)
        assert message.content == FALLBACK_MESSAGE
        assert message.is_streaming is False

    @pytest.mark.asyncio
    async def test_failure_opening_stream_writes_fallback(self):
        """Test that a request error is handled like a stream error."""
        class RefusingProvider(ScriptedProvider):
            async def chat_completion_stream(self, messages, model=None, **kwargs):
                raise TimeoutError()

        store = RecordingStore()
        _, message_id = await make_placeholder(store)
        outcome = await StreamConsumer(RefusingProvider(), store).run(message_id, HISTORY)

        assert outcome.status == OutcomeStatus.FAILED
        assert outcome.error == "TimeoutError"
        assert store.patches == [{"content": FALLBACK_MESSAGE, "is_streaming": False}]

    @pytest.mark.asyncio
    async def test_custom_fallback_message(self):
        """Test that the apology text is configurable."""
        store = RecordingStore()
        _, message_id = await make_placeholder(store)
        llm = ScriptedProvider(["x"], fail_after=0)
        consumer = StreamConsumer(llm, store, fallback_message="Oops")

        outcome = await consumer.run(message_id, HISTORY)

        assert outcome.content == "Oops"
        assert (await store.get(message_id)).content == "Oops"

    @pytest.mark.asyncio
    async def test_empty_and_missing_deltas_are_ignored(self):
        """Test that empty or None deltas contribute nothing."""
        outcome, store, _, _ = await consume(["", None, "a", "", "b"])

        assert outcome.content == "ab"
        assert outcome.chunk_count == 2

    @pytest.mark.asyncio
    async def test_empty_stream_finishes_with_empty_content(self):
        """Test that a stream with no text still reaches its terminal state."""
        outcome, store, message_id, _ = await consume([])

        assert outcome.succeeded
        assert store.patches == [{"content": "", "is_streaming": False}]
        assert (await store.get(message_id)).is_streaming is False

    @pytest.mark.asyncio
    async def test_flushes_follow_policy(self):
        """Test flushes on every third delta and at length multiples."""
        deltas = ["a", "b", "c", "d", "e", "f", "g"]
        outcome, store, _, _ = await consume(deltas)

        assert store.patches == [
            {"content": "abc", "is_streaming": True},
            {"content": "abcdef", "is_streaming": True},
            {"content": "abcdefg", "is_streaming": False},
        ]
        assert outcome.flush_count == 2

    @pytest.mark.asyncio
    async def test_history_is_sent_to_model(self):
        """Test that the model sees the full prior conversation."""
        _, _, _, llm = await consume(["ok"])
        assert llm.stream_requests == [HISTORY]

    @pytest.mark.asyncio
    async def test_custom_policy(self):
        """Test that the consumer uses the injected policy."""
        store = RecordingStore()
        _, message_id = await make_placeholder(store)
        policy = FlushPolicy(chunk_interval=1, length_interval=1000)
        consumer = StreamConsumer(ScriptedProvider(["a", "b"]), store, policy=policy)

        outcome = await consumer.run(message_id, HISTORY)

        assert outcome.flush_count == 2
        assert [p["content"] for p in store.patches] == ["a", "ab", "ab"]


class TestStoreFailures:
    """Tests for store write failures during a turn."""

    @pytest.mark.asyncio
    async def test_failed_flush_is_skipped(self):
        """Test that a rejected flush does not end the turn."""
        store = RecordingStore(fail_flushes=1)
        outcome, store, message_id, _ = await consume(["a", "b", "c", "d", "e", "f"], store=store)

        assert outcome.succeeded
        assert outcome.flush_count == 1
        assert store.patches == [
            {"content": "abcdef", "is_streaming": True},
            {"content": "abcdef", "is_streaming": False},
        ]

    @pytest.mark.asyncio
    async def test_terminal_write_is_retried(self):
        """Test that the terminal write survives transient failures."""
        store = RecordingStore(fail_terminal=2)
        outcome, store, message_id, _ = await consume(["done"], store=store)

        assert outcome.succeeded
        message = await store.get(message_id)
        assert message.content == "done"
        assert message.is_streaming is False

    @pytest.mark.asyncio
    async def test_terminal_write_gives_up(self):
        """Test that a terminal write failing every attempt raises."""
        store = RecordingStore(fail_terminal=3)
        with pytest.raises(StoreWriteError):
            await consume(["done"], store=store)

    @pytest.mark.asyncio
    async def test_unknown_message_raises(self):
        """Test that streaming into a missing message cannot complete."""
        store = RecordingStore()
        consumer = StreamConsumer(ScriptedProvider(["x"]), store, retry_delay=0)
        with pytest.raises(StoreWriteError):
            await consumer.run("missing", HISTORY)


class TestBackendWrites:
    """Tests for turns written through the real store backends."""

    @pytest.mark.asyncio
    async def test_turn_completes_on_every_backend(self, store):
        async with store:
            _, message_id = await make_placeholder(store)
            consumer = StreamConsumer(ScriptedProvider(list("abcdefg")), store, retry_delay=0)
            outcome = await consumer.run(message_id, HISTORY)
            message = await store.get(message_id)

        assert outcome.succeeded
        assert outcome.flush_count == 2
        assert message.content == "abcdefg"
        assert message.is_streaming is False

    @pytest.mark.asyncio
    async def test_sqlite_flush_error_is_skipped(self, tmp_path):
        """Test that a driver error on a flush does not end the turn."""
        async with SQLiteMessageStore(tmp_path / "chat.db") as store:
            _, message_id = await make_placeholder(store)
            await reject_message_updates(store, "NEW.is_streaming = 1 AND length(NEW.content) = 3")
            consumer = StreamConsumer(ScriptedProvider(["a", "b", "c", "d"]), store, retry_delay=0)

            outcome = await consumer.run(message_id, HISTORY)
            message = await store.get(message_id)

        assert outcome.status == OutcomeStatus.COMPLETED
        assert outcome.content == "abcd"
        assert outcome.flush_count == 0
        assert outcome.error is None
        assert message.content == "abcd"
        assert message.is_streaming is False

    @pytest.mark.asyncio
    async def test_sqlite_terminal_error_raises_after_retries(self, tmp_path):
        """Test that a terminal write the driver keeps rejecting raises."""
        async with SQLiteMessageStore(tmp_path / "chat.db") as store:
            _, message_id = await make_placeholder(store)
            await reject_message_updates(store, "NEW.is_streaming = 0")
            consumer = StreamConsumer(ScriptedProvider(["a", "b", "c", "d"]), store, retry_delay=0)

            with pytest.raises(StoreWriteError, match="after 3 attempts"):
                await consumer.run(message_id, HISTORY)
            message = await store.get(message_id)

        assert message.content == "abc"
        assert message.is_streaming is True


class TestStreamingProperties:
    """Property tests for persisted content during a turn."""

    @settings(max_examples=50, deadline=None)
    @given(st.lists(st.text(max_size=6), max_size=40))
    def test_persisted_contents_form_prefix_chain(self, deltas):
        """Property test: every stored content extends the previous one."""
        outcome, store, _, _ = asyncio.run(consume(deltas))

        contents = [p["content"] for p in store.patches]
        for earlier, later in zip(contents, contents[1:]):
            assert later.startswith(earlier)
        assert contents[-1] == "".join(deltas)
        assert [p["is_streaming"] for p in store.patches][-1] is False
        assert all(p["is_streaming"] for p in store.patches[:-1])
        assert isinstance(outcome, StreamOutcome)

    @settings(max_examples=50, deadline=None)
    @given(st.lists(st.text(min_size=1, max_size=6), max_size=40))
    def test_flush_cadence_bound(self, deltas):
        """Property test: at most two accepted deltas between flushes."""
        _, store, _, _ = asyncio.run(consume(deltas))

        lengths = []
        total = 0
        for delta in deltas:
            total += len(delta)
            lengths.append(total)

        last_chunk = 0
        for patch in store.patches[:-1]:
            size = len(patch["content"])
            chunk = lengths.index(size) + 1
            assert chunk % 3 == 0 or size % 15 == 0
            assert chunk - last_chunk <= 3
            last_chunk = chunk
        assert len(deltas) - last_chunk <= 2
