from .base import LLMProvider
from .factory import create_llm_provider
from .models import ChatMessage, LLMResponse, StreamingResponse
from .providers import AnthropicProvider, OpenAIProvider

__all__ = [
    "LLMProvider",
    "create_llm_provider",
    "ChatMessage",
    "LLMResponse",
    "StreamingResponse",
    "AnthropicProvider",
    "OpenAIProvider",
]
