"""
Unit tests for the OpenAI provider.

The AsyncOpenAI client is replaced by a MagicMock whose
``chat.completions.create`` is an AsyncMock, so no network calls are made.
SDK exceptions are built from real httpx request/response objects.

Python Learning Notes:
    - AsyncMock returns an awaitable; side_effect makes it raise instead
    - call_args.kwargs shows the keyword arguments of the last call
"""

from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest
from openai import APIConnectionError, APIStatusError, APITimeoutError

from metagen.errors import BackendError, BackendTimeoutError, ParseError
from metagen.models import AltTagConfig
from metagen.providers.base import ProviderConfig
from metagen.providers.openai_provider import OpenAIProvider

OPENAI_URL = "https://api.openai.com/v1/chat/completions"


def make_provider(response=None, side_effect=None, **overrides):
    values = {"provider": "openai", "api_key": "sk-test", "model": "gpt-4o"}
    values.update(overrides)
    client = MagicMock()
    client.chat.completions.create = AsyncMock(return_value=response, side_effect=side_effect)
    return OpenAIProvider(ProviderConfig(**values), client=client), client


class TestCompletions:
    """Tests for request building and response parsing."""

    @pytest.mark.asyncio
    async def test_request_parameters(self, openai_response):
        provider, client = make_provider(openai_response("Title"), max_tokens=80, temperature=0.5)

        await provider.generate_text("Prompt")

        kwargs = client.chat.completions.create.call_args.kwargs
        assert kwargs["model"] == "gpt-4o"
        assert kwargs["max_tokens"] == 80
        assert kwargs["temperature"] == 0.5
        assert kwargs["messages"] == [{"role": "user", "content": "Prompt"}]
        assert "response_format" not in kwargs

    @pytest.mark.asyncio
    async def test_json_mode(self, openai_response):
        provider, client = make_provider(openai_response('{"a": 1}'))

        await provider.generate_text("Prompt", json_mode=True)

        kwargs = client.chat.completions.create.call_args.kwargs
        assert kwargs["response_format"] == {"type": "json_object"}

    @pytest.mark.asyncio
    async def test_usage_is_reported(self, openai_response):
        provider, _ = make_provider(openai_response("  Title  ", total_tokens=120))

        response = await provider.generate_text("Prompt")

        assert response.text == "Title"
        assert response.tokens_used == 120
        assert response.prompt_tokens == 100
        assert response.completion_tokens == 20

    @pytest.mark.asyncio
    async def test_alt_tag_end_to_end(self, openai_response):
        provider, _ = make_provider(openai_response("A photo of a lighthouse at dusk."))

        result = await provider.generate_alt_tag(
            "https://cdn.example.com/lighthouse.jpg", AltTagConfig()
        )

        assert result.success is True
        assert result.text == "A lighthouse at dusk"
        assert result.metadata.provider == "OpenAI"

    @pytest.mark.asyncio
    async def test_empty_content_raises(self, openai_response):
        provider, _ = make_provider(openai_response(""))

        with pytest.raises(BackendError) as exc_info:
            await provider.generate_text("Prompt")

        assert exc_info.value.message == "No content returned from OpenAI API"

    @pytest.mark.asyncio
    async def test_missing_choices_raises_parse_error(self):
        provider, _ = make_provider(MagicMock(choices=[]))

        with pytest.raises(ParseError):
            await provider.generate_text("Prompt")


class TestErrorMapping:
    """Tests for translating SDK exceptions into metagen errors."""

    @pytest.mark.asyncio
    async def test_status_error(self):
        request = httpx.Request("POST", OPENAI_URL)
        error = APIStatusError(
            "Rate limit reached",
            response=httpx.Response(429, request=request),
            body={"error": {"message": "Rate limit reached"}},
        )
        provider, _ = make_provider(side_effect=error)

        with pytest.raises(BackendError) as exc_info:
            await provider.generate_text("Prompt")

        assert exc_info.value.status_code == 429
        assert exc_info.value.message == (
            'OpenAI API error: 429 - {"error": {"message": "Rate limit reached"}}'
        )

    @pytest.mark.asyncio
    async def test_timeout_error(self):
        error = APITimeoutError(request=httpx.Request("POST", OPENAI_URL))
        provider, _ = make_provider(side_effect=error)

        with pytest.raises(BackendTimeoutError):
            await provider.generate_text("Prompt")

    @pytest.mark.asyncio
    async def test_connection_error(self):
        error = APIConnectionError(request=httpx.Request("POST", OPENAI_URL))
        provider, _ = make_provider(side_effect=error)

        with pytest.raises(BackendError) as exc_info:
            await provider.generate_text("Prompt")

        assert not isinstance(exc_info.value, BackendTimeoutError)
        assert "connection error" in exc_info.value.message

    @pytest.mark.asyncio
    async def test_alt_tag_failure_is_tagged(self):
        request = httpx.Request("POST", OPENAI_URL)
        error = APIStatusError(
            "Server error", response=httpx.Response(500, request=request), body=None
        )
        provider, _ = make_provider(side_effect=error)

        result = await provider.generate_alt_tag(
            "https://cdn.example.com/a.jpg", AltTagConfig()
        )

        assert result.success is False
        assert result.error == "OpenAI API error: 500 - {}"


class TestValidateConfig:
    """Tests for OpenAI-specific configuration rules."""

    def test_valid_key(self):
        provider, _ = make_provider()
        assert provider.validate_config(provider.config) is True

    def test_key_without_prefix_is_rejected(self):
        provider, _ = make_provider(api_key="not-an-openai-key")
        assert provider.validate_config(provider.config) is False

    def test_non_vision_model_warns_but_passes(self):
        provider, _ = make_provider(model="gpt-3.5-turbo")

        with patch("metagen.providers.openai_provider.logger") as mock_logger:
            assert provider.validate_config(provider.config) is True

        mock_logger.warning.assert_called_once()
        assert "may not support vision" in mock_logger.warning.call_args[0][0]


class TestClientLifecycle:
    """Tests for who opens and closes the AsyncOpenAI client."""

    @pytest.mark.asyncio
    async def test_owned_client_is_closed_after_call(self, openai_response):
        provider = OpenAIProvider(ProviderConfig("openai", "sk-test", "gpt-4o", timeout=12))

        with patch("metagen.providers.openai_provider.AsyncOpenAI") as mock_client_class:
            client = mock_client_class.return_value
            client.__aenter__.return_value = client
            client.chat.completions.create = AsyncMock(return_value=openai_response("Title"))

            response = await provider.generate_text("Write a title")

        assert response.text == "Title"
        mock_client_class.assert_called_once_with(api_key="sk-test", timeout=12, max_retries=0)
        client.__aexit__.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_owned_client_is_closed_after_error(self):
        provider = OpenAIProvider(ProviderConfig("openai", "sk-test", "gpt-4o"))
        request = httpx.Request("POST", OPENAI_URL)

        with patch("metagen.providers.openai_provider.AsyncOpenAI") as mock_client_class:
            client = mock_client_class.return_value
            client.__aenter__.return_value = client
            client.chat.completions.create = AsyncMock(
                side_effect=APIConnectionError(request=request)
            )

            with pytest.raises(BackendError):
                await provider.generate_text("Write a title")

        client.__aexit__.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_injected_client_stays_open(self, openai_response):
        provider, client = make_provider(openai_response("Title"))

        await provider.generate_text("Write a title")
        await provider.generate_text("Write another title")

        assert client.chat.completions.create.await_count == 2
        client.close.assert_not_called()
        client.__aexit__.assert_not_called()
