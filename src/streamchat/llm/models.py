from collections.abc import AsyncIterator
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field


class StreamingResponse:
    """Wrapper for a streamed completion: an async iterator of text deltas.

    Token usage becomes available once the stream is exhausted, when the
    provider reports it.

    Usage:
        stream = await provider.chat_completion_stream(messages)
        async for delta in stream:
            print(delta, end="")
        print(stream.usage)  # {"prompt_tokens": 100, "completion_tokens": 50, ...}
    """

    def __init__(self, async_iter: AsyncIterator[str]):
        self._iter = async_iter
        self._usage: dict[str, Any] | None = None

    @property
    def usage(self) -> dict[str, Any] | None:
        """Get token usage info (available after iteration completes)."""
        return self._usage

    def set_usage(self, usage: dict[str, Any]) -> None:
        """Set token usage info (called by provider at end of stream)."""
        self._usage = usage

    async def aclose(self) -> None:
        """Close the underlying iterator if it is a generator."""
        close = getattr(self._iter, "aclose", None)
        if close is not None:
            await close()

    def __aiter__(self) -> "StreamingResponse":
        return self

    async def __anext__(self) -> str:
        return await self._iter.__anext__()


class ChatMessage(BaseModel):
    """A role-tagged message sent to a model."""

    model_config = ConfigDict(frozen=True)

    role: Literal["system", "user", "assistant"] = Field(description="Role of the message sender")
    content: str = Field(description="Content of the message")


class LLMResponse(BaseModel):
    """Non-streaming response from an LLM provider."""

    model_config = ConfigDict(frozen=True)

    content: str = Field(description="Generated text content")
    model: str = Field(description="Model that generated the response")
    usage: dict[str, int] | None = Field(
        default=None,
        description="Token usage information"
    )
