"""LLM adapters used to summarize diary entries."""

from .adapter import LLMAdapter, LLMError, LLMRateLimitError, LLMResponse, LLMTimeoutError, Message
from .openai_adapter import OpenAIAdapter

__all__ = [
    "LLMAdapter",
    "LLMError",
    "LLMRateLimitError",
    "LLMResponse",
    "LLMTimeoutError",
    "Message",
    "OpenAIAdapter",
]
