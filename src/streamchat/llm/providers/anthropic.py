"""Anthropic Claude chat provider.

Uses the official Anthropic Python SDK for async chat completions.
Reference: https://github.com/anthropics/anthropic-sdk-python
"""

from collections.abc import AsyncIterator
from typing import Any

from anthropic import AsyncAnthropic

from ..base import LLMProvider
from ..models import ChatMessage, LLMResponse, StreamingResponse

# Anthropic requires max_tokens on every request
DEFAULT_MAX_TOKENS = 4096


def _split_system(messages: list[ChatMessage]) -> tuple[str | None, list[dict[str, str]]]:
    """Separate system prompts from the turn list.

    Anthropic takes the system prompt as a request parameter rather than
    a message; several system messages are joined.
    """
    system_parts = []
    turns = []
    for msg in messages:
        if msg.role == "system":
            system_parts.append(msg.content)
        else:
            turns.append({"role": msg.role, "content": msg.content})
    system = "\n\n".join(system_parts) if system_parts else None
    return system, turns


class AnthropicProvider(LLMProvider):
    """Anthropic Claude LLM provider implementation.

    Hidden design decisions:
    - Anthropic API client initialization
    - System message handling
    - Stream event filtering (only text deltas are yielded)
    """

    def __init__(
        self,
        api_key: str,
        model: str = "claude-sonnet-4-20250514",
        base_url: str | None = None,
        **client_kwargs: Any
    ):
        self._model = model
        self._client = AsyncAnthropic(
            api_key=api_key,
            base_url=base_url,
            **client_kwargs
        )

    @property
    def model(self) -> str:
        return self._model

    def _request(
        self,
        messages: list[ChatMessage],
        model: str | None,
        temperature: float,
        max_tokens: int | None,
        **kwargs: Any
    ) -> dict[str, Any]:
        system, turns = _split_system(messages)
        request_params: dict[str, Any] = {
            "model": model or self._model,
            "messages": turns,
            "temperature": temperature,
            "max_tokens": max_tokens or DEFAULT_MAX_TOKENS,
            **kwargs
        }
        if system:
            request_params["system"] = system
        return request_params

    async def chat_completion(
        self,
        messages: list[ChatMessage],
        model: str | None = None,
        temperature: float = 0.7,
        max_tokens: int | None = None,
        **kwargs: Any
    ) -> LLMResponse:
        request_params = self._request(messages, model, temperature, max_tokens, **kwargs)
        response = await self._client.messages.create(**request_params)

        usage = None
        if response.usage:
            usage = {
                "prompt_tokens": response.usage.input_tokens,
                "completion_tokens": response.usage.output_tokens,
                "total_tokens": response.usage.input_tokens + response.usage.output_tokens
            }

        content = "".join(
            block.text for block in response.content if getattr(block, "type", None) == "text"
        )
        return LLMResponse(content=content, model=response.model, usage=usage)

    async def chat_completion_stream(
        self,
        messages: list[ChatMessage],
        model: str | None = None,
        temperature: float = 0.7,
        max_tokens: int | None = None,
        **kwargs: Any
    ) -> StreamingResponse:
        request_params = self._request(messages, model, temperature, max_tokens, **kwargs)
        response = StreamingResponse(self._deltas(request_params, lambda usage: response.set_usage(usage)))
        return response

    async def _deltas(self, request_params: dict[str, Any], on_usage: Any) -> AsyncIterator[str]:
        input_tokens = 0
        output_tokens = 0

        async with self._client.messages.stream(**request_params) as stream:
            async for event in stream:
                event_type = getattr(event, "type", None)
                if event_type == "message_start":
                    input_tokens = event.message.usage.input_tokens
                elif event_type == "message_delta":
                    output_tokens = getattr(event.usage, "output_tokens", output_tokens)
                elif event_type == "content_block_delta":
                    text = getattr(event.delta, "text", None)
                    if text:
                        yield text

        on_usage({
            "prompt_tokens": input_tokens,
            "completion_tokens": output_tokens,
            "total_tokens": input_tokens + output_tokens,
        })

    async def close(self) -> None:
        await self._client.close()
