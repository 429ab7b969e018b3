"""
Custom endpoint provider for OpenAI-compatible servers.

Many self-hosted and third-party inference servers (vLLM, LiteLLM, Ollama's
OpenAI shim, Azure-style gateways) speak the OpenAI chat completions wire
format. This provider POSTs that format as JSON to the configured endpoint with
``httpx`` and a bearer token, so any such server can back metagen.

The endpoint URL is used verbatim, e.g.
``https://llm.internal.example/v1/chat/completions``.

Python Learning Notes:
    - httpx.AsyncClient is used as an async context manager so the connection
      pool is closed after each call
    - A custom transport (httpx.MockTransport) can replace the network in tests
    - response.is_error is True for 4xx and 5xx status codes
"""

import json
from typing import Any, List, Mapping, Optional
from urllib.parse import urlparse

import httpx

from ..errors import BackendError, BackendTimeoutError, ParseError
from ..utils import get_logger
from .base import AIProvider, CompletionResponse, Message, ProviderConfig
from .pricing import CUSTOM_PRICING

logger = get_logger(__name__)


class CustomEndpointProvider(AIProvider):
    """
    OpenAI-compatible backend reached over plain HTTP.

    Attributes:
        name (str): "Custom Endpoint", reported in result metadata.
        pricing (PricingTable): Zero-cost table; self-hosted models have no
            published price.
    """

    name = "Custom Endpoint"
    pricing = CUSTOM_PRICING

    def __init__(
        self,
        config: ProviderConfig,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        super().__init__(config)
        self._transport = transport

    async def _complete(
        self, messages: List[Message], json_mode: bool = False
    ) -> CompletionResponse:
        payload: dict = {
            "model": self.config.model,
            "messages": messages,
            "max_tokens": self.config.max_tokens,
            "temperature": self.config.temperature,
        }
        if json_mode:
            payload["response_format"] = {"type": "json_object"}

        headers = {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self.config.api_key}",
        }

        logger.debug(f"POST {self.config.custom_endpoint} (model {self.config.model})")

        async with httpx.AsyncClient(
            timeout=self.config.timeout, transport=self._transport
        ) as client:
            try:
                response = await client.post(
                    self.config.custom_endpoint, json=payload, headers=headers
                )
            except httpx.TimeoutException as e:
                raise BackendTimeoutError(
                    f"Custom endpoint request timed out after {self.config.timeout}s",
                    provider=self.name,
                    cause=e,
                ) from e
            except httpx.HTTPError as e:
                raise BackendError(
                    f"Custom endpoint request failed: {e}", provider=self.name, cause=e
                ) from e

        if response.is_error:
            raise BackendError(
                f"Custom endpoint error: {response.status_code} "
                f"{response.reason_phrase} - {self._error_detail(response)}",
                provider=self.name,
                status_code=response.status_code,
            )

        try:
            data = response.json()
        except ValueError as e:
            raise ParseError(
                "Custom endpoint returned a non-JSON response",
                provider=self.name,
                cause=e,
            ) from e

        return self._parse_payload(data)

    @staticmethod
    def _error_detail(response: httpx.Response) -> str:
        try:
            return json.dumps(response.json())
        except ValueError:
            return response.text

    def _parse_payload(self, data: Any) -> CompletionResponse:
        try:
            content = data["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError) as e:
            raise ParseError(
                "Malformed response from custom endpoint: missing choices",
                provider=self.name,
                cause=e,
            ) from e

        if not isinstance(content, str) or not content.strip():
            raise BackendError(
                "No content returned from custom endpoint", provider=self.name
            )

        usage = data.get("usage") if isinstance(data, Mapping) else None
        usage = usage if isinstance(usage, Mapping) else {}

        return CompletionResponse(
            text=content.strip(),
            model=data.get("model") or self.config.model,
            tokens_used=usage.get("total_tokens") or 0,
            prompt_tokens=usage.get("prompt_tokens"),
            completion_tokens=usage.get("completion_tokens"),
        )

    def validate_config(self, config: ProviderConfig) -> bool:
        """Base rules plus an http(s) endpoint URL."""
        if not super().validate_config(config):
            return False

        parsed = urlparse(config.custom_endpoint or "")
        return parsed.scheme in ("http", "https") and bool(parsed.netloc)
