"""OpenAI / Azure OpenAI chat completions adapter."""

from __future__ import annotations

from typing import Any

import httpx

from .adapter import LLMError, LLMRateLimitError, LLMResponse, LLMTimeoutError, Message

__all__ = ["AZURE_API_VERSION", "OpenAIAdapter"]

AZURE_API_VERSION = "2024-02-15-preview"


class OpenAIAdapter:
    """OpenAI chat completions adapter.

    With a ``deployment`` the adapter targets an Azure OpenAI resource
    (``{endpoint}/openai/deployments/{deployment}/chat/completions``);
    otherwise ``endpoint`` is the full chat completions URL.
    """

    def __init__(
        self,
        api_key: str,
        *,
        endpoint: str = "https://api.openai.com/v1/chat/completions",
        deployment: str = "",
        default_model: str = "gpt-4o-mini",
        api_version: str = AZURE_API_VERSION,
    ) -> None:
        self.api_key = api_key
        self.endpoint = endpoint.rstrip("/")
        self.deployment = deployment
        self.default_model = default_model
        self.api_version = api_version

    @property
    def use_azure(self) -> bool:
        return bool(self.deployment)

    @property
    def url(self) -> str:
        if self.use_azure:
            return (
                f"{self.endpoint}/openai/deployments/{self.deployment}/chat/completions"
                f"?api-version={self.api_version}"
            )
        return self.endpoint

    def _make_headers(self) -> dict[str, str]:
        """Create request headers."""
        return {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }

    @staticmethod
    def _error_message(response: httpx.Response) -> str:
        """Best-effort error text; the body may be plain text or any JSON shape."""
        try:
            body = response.json()
        except ValueError:
            return response.text
        error = body.get("error") if isinstance(body, dict) else None
        if isinstance(error, dict) and isinstance(error.get("message"), str):
            return error["message"]
        if isinstance(error, str):
            return error
        return response.text

    def _parse_response(self, response_data: dict[str, Any]) -> LLMResponse:
        """Parse API response to LLMResponse."""
        choices = response_data.get("choices")
        if not isinstance(choices, list) or not choices:
            raise LLMError("No choices in response")

        choice = choices[0]
        message = choice.get("message") if isinstance(choice, dict) else None
        content = message.get("content") if isinstance(message, dict) else None
        if not isinstance(content, str):
            raise LLMError("Response message has no text content")

        usage = response_data.get("usage")
        if not isinstance(usage, dict):
            usage = {}

        return LLMResponse(
            content=content,
            finish_reason=choice.get("finish_reason", "stop"),
            usage={
                "prompt_tokens": usage.get("prompt_tokens", 0),
                "completion_tokens": usage.get("completion_tokens", 0),
                "total_tokens": usage.get("total_tokens", 0),
            },
            model=response_data.get("model", ""),
            raw_response=response_data,
        )

    def generate(
        self,
        prompt: str,
        *,
        model: str | None = None,
        temperature: float = 0.7,
        max_tokens: int = 500,
        timeout: float = 30.0,
    ) -> LLMResponse:
        """Generate text completion from prompt."""
        return self.chat(
            [Message(role="user", content=prompt)],
            model=model,
            temperature=temperature,
            max_tokens=max_tokens,
            timeout=timeout,
        )

    def chat(
        self,
        messages: list[Message],
        *,
        model: str | None = None,
        temperature: float = 0.7,
        max_tokens: int = 500,
        timeout: float = 30.0,
    ) -> LLMResponse:
        """Multi-turn chat conversation."""
        payload: dict[str, Any] = {
            "messages": [{"role": msg.role, "content": msg.content} for msg in messages],
            "temperature": temperature,
            "max_tokens": max_tokens,
        }
        # Azure selects the model through the deployment name.
        if not self.use_azure:
            payload["model"] = model or self.default_model

        try:
            with httpx.Client(timeout=timeout) as client:
                response = client.post(self.url, headers=self._make_headers(), json=payload)

            if response.status_code == 429:
                raise LLMRateLimitError("OpenAI rate limit exceeded")

            if response.status_code >= 400:
                raise LLMError(f"OpenAI API error ({response.status_code}): {self._error_message(response)}")

            try:
                response_data = response.json()
            except ValueError as e:
                raise LLMError(f"OpenAI returned a non-JSON body: {e}") from e
            if not isinstance(response_data, dict):
                raise LLMError("OpenAI returned an unexpected response shape")
            return self._parse_response(response_data)

        except httpx.TimeoutException as e:
            raise LLMTimeoutError(f"OpenAI request timed out after {timeout}s") from e
        except httpx.HTTPError as e:
            raise LLMError(f"OpenAI HTTP error: {e}") from e
