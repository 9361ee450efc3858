"""Unit tests for LLM adapters."""

from unittest.mock import Mock, patch

import httpx
import pytest

from pleva.adapters.llm import LLMError, LLMRateLimitError, LLMTimeoutError, Message, OpenAIAdapter


def _ok_response(content="Test response"):
    mock_response = Mock()
    mock_response.status_code = 200
    mock_response.json.return_value = {
        "choices": [{"message": {"content": content}, "finish_reason": "stop"}],
        "usage": {"prompt_tokens": 10, "completion_tokens": 20, "total_tokens": 30},
        "model": "gpt-4o-mini",
    }
    return mock_response


class TestOpenAIAdapter:
    """Tests for OpenAI / Azure OpenAI adapter."""

    def test_init(self):
        adapter = OpenAIAdapter(api_key="test-key", default_model="test-model")

        assert adapter.api_key == "test-key"
        assert adapter.default_model == "test-model"
        assert adapter.use_azure is False
        assert adapter.url == "https://api.openai.com/v1/chat/completions"

    def test_azure_url(self):
        adapter = OpenAIAdapter(api_key="k", endpoint="https://res.openai.azure.com/", deployment="gpt4")

        assert adapter.use_azure is True
        assert adapter.url == (
            "https://res.openai.azure.com/openai/deployments/gpt4/chat/completions?api-version=2024-02-15-preview"
        )

    def test_generate_success(self):
        """Test successful text generation."""
        adapter = OpenAIAdapter(api_key="test-key")

        with patch("httpx.Client") as mock_client:
            mock_client.return_value.__enter__.return_value.post.return_value = _ok_response()

            result = adapter.generate("Test prompt")

            assert result.content == "Test response"
            assert result.finish_reason == "stop"
            assert result.usage["total_tokens"] == 30

    def test_chat_payload(self):
        adapter = OpenAIAdapter(api_key="test-key")
        messages = [
            Message(role="system", content="You are helpful"),
            Message(role="user", content="Hello"),
        ]

        with patch("httpx.Client") as mock_client:
            post = mock_client.return_value.__enter__.return_value.post
            post.return_value = _ok_response("Hi there!")

            result = adapter.chat(messages, temperature=0.2, max_tokens=50)

            assert result.content == "Hi there!"
            kwargs = post.call_args.kwargs
            assert kwargs["headers"]["Authorization"] == "Bearer test-key"
            assert kwargs["json"]["model"] == "gpt-4o-mini"
            assert kwargs["json"]["max_tokens"] == 50
            assert kwargs["json"]["messages"][0] == {"role": "system", "content": "You are helpful"}

    def test_azure_payload_has_no_model(self):
        adapter = OpenAIAdapter(api_key="k", endpoint="https://res.openai.azure.com", deployment="gpt4")

        with patch("httpx.Client") as mock_client:
            post = mock_client.return_value.__enter__.return_value.post
            post.return_value = _ok_response()

            adapter.generate("Test prompt")

            assert "model" not in post.call_args.kwargs["json"]

    def test_generate_timeout(self):
        adapter = OpenAIAdapter(api_key="test-key")

        with patch("httpx.Client") as mock_client:
            mock_client.return_value.__enter__.return_value.post.side_effect = httpx.TimeoutException("Timeout")

            with pytest.raises(LLMTimeoutError):
                adapter.generate("Test prompt", timeout=1.0)

    def test_generate_rate_limit(self):
        adapter = OpenAIAdapter(api_key="test-key")
        mock_response = Mock()
        mock_response.status_code = 429

        with patch("httpx.Client") as mock_client:
            mock_client.return_value.__enter__.return_value.post.return_value = mock_response

            with pytest.raises(LLMRateLimitError):
                adapter.generate("Test prompt")

    def test_api_error_message(self):
        adapter = OpenAIAdapter(api_key="bad-key")
        mock_response = Mock()
        mock_response.status_code = 401
        mock_response.text = "Unauthorized"
        mock_response.json.return_value = {"error": {"message": "Invalid API key"}}

        with patch("httpx.Client") as mock_client:
            mock_client.return_value.__enter__.return_value.post.return_value = mock_response

            with pytest.raises(LLMError, match="401.*Invalid API key"):
                adapter.generate("Test prompt")

    def test_connection_error(self):
        adapter = OpenAIAdapter(api_key="test-key")

        with patch("httpx.Client") as mock_client:
            mock_client.return_value.__enter__.return_value.post.side_effect = httpx.ConnectError("refused")

            with pytest.raises(LLMError, match="HTTP error"):
                adapter.generate("Test prompt")

    def test_empty_choices(self):
        adapter = OpenAIAdapter(api_key="test-key")
        mock_response = Mock()
        mock_response.status_code = 200
        mock_response.json.return_value = {"choices": []}

        with patch("httpx.Client") as mock_client:
            mock_client.return_value.__enter__.return_value.post.return_value = mock_response

            with pytest.raises(LLMError, match="No choices"):
                adapter.generate("Test prompt")

    def test_non_json_success_body(self):
        adapter = OpenAIAdapter(api_key="test-key")
        mock_response = Mock()
        mock_response.status_code = 200
        mock_response.json.side_effect = ValueError("Expecting value")

        with patch("httpx.Client") as mock_client:
            mock_client.return_value.__enter__.return_value.post.return_value = mock_response

            with pytest.raises(LLMError, match="non-JSON"):
                adapter.generate("Test prompt")

    def test_unexpected_success_shape(self):
        adapter = OpenAIAdapter(api_key="test-key")
        mock_response = Mock()
        mock_response.status_code = 200
        mock_response.json.return_value = ["not", "an", "object"]

        with patch("httpx.Client") as mock_client:
            mock_client.return_value.__enter__.return_value.post.return_value = mock_response

            with pytest.raises(LLMError, match="unexpected response shape"):
                adapter.generate("Test prompt")

    def test_string_error_field(self):
        adapter = OpenAIAdapter(api_key="test-key")
        mock_response = Mock()
        mock_response.status_code = 500
        mock_response.text = '{"error": "overloaded"}'
        mock_response.json.return_value = {"error": "overloaded"}

        with patch("httpx.Client") as mock_client:
            mock_client.return_value.__enter__.return_value.post.return_value = mock_response

            with pytest.raises(LLMError, match=r"500\): overloaded$"):
                adapter.generate("Test prompt")

    def test_plain_text_error_body(self):
        adapter = OpenAIAdapter(api_key="test-key")
        mock_response = Mock()
        mock_response.status_code = 502
        mock_response.text = "Bad Gateway"
        mock_response.json.side_effect = ValueError("Expecting value")

        with patch("httpx.Client") as mock_client:
            mock_client.return_value.__enter__.return_value.post.return_value = mock_response

            with pytest.raises(LLMError, match="502.*Bad Gateway"):
                adapter.generate("Test prompt")

    def test_choice_without_message(self):
        adapter = OpenAIAdapter(api_key="test-key")
        mock_response = Mock()
        mock_response.status_code = 200
        mock_response.json.return_value = {"choices": ["oops"]}

        with patch("httpx.Client") as mock_client:
            mock_client.return_value.__enter__.return_value.post.return_value = mock_response

            with pytest.raises(LLMError, match="no text content"):
                adapter.generate("Test prompt")
