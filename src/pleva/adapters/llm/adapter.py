"""Base types for the text-generation adapters behind diary summaries.

The summary service only needs ``chat()``; ``generate()`` is the single-prompt
shortcut used for quick checks.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal, Protocol

__all__ = [
    "LLMAdapter",
    "LLMError",
    "LLMRateLimitError",
    "LLMResponse",
    "LLMTimeoutError",
    "Message",
]


class LLMError(Exception):
    """Base exception for summary model calls."""


class LLMTimeoutError(LLMError):
    """The model endpoint did not answer in time."""


class LLMRateLimitError(LLMError):
    """The model endpoint rejected the call with HTTP 429."""


@dataclass
class Message:
    role: Literal["system", "user", "assistant"]
    content: str


@dataclass
class LLMResponse:
    """Text returned by the model plus bookkeeping from the API.

    Attributes
    ----------
    content : str
        Generated text
    finish_reason : str
        Why generation stopped ("stop", "length", ...)
    usage : dict[str, int]
        Token counts as reported by the endpoint
    """

    content: str
    finish_reason: str = "stop"
    usage: dict[str, int] = field(default_factory=dict)
    model: str = ""
    raw_response: dict[str, Any] = field(default_factory=dict)


class LLMAdapter(Protocol):
    """Anything that can turn chat messages into an ``LLMResponse``.

    Implementations raise ``LLMTimeoutError``, ``LLMRateLimitError`` or
    ``LLMError`` instead of transport-specific exceptions.
    """

    def generate(
        self,
        prompt: str,
        *,
        model: str | None = None,
        temperature: float = 0.7,
        max_tokens: int = 500,
        timeout: float = 30.0,
    ) -> LLMResponse:
        ...

    def chat(
        self,
        messages: list[Message],
        *,
        model: str | None = None,
        temperature: float = 0.7,
        max_tokens: int = 500,
        timeout: float = 30.0,
    ) -> LLMResponse:
        ...
