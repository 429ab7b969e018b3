"""
OpenAI provider for vision and text generation.

This module implements the AIProvider contract on top of the official ``openai``
SDK. Alt text uses a GPT-4o class vision model through chat completions with an
``image_url`` content part; SEO and icon generation use the same endpoint with
plain text messages (optionally in JSON response mode).

The SDK's own retry loop is disabled (``max_retries=0``): a failed call is
reported once and callers decide whether to try again.

Error Mapping:
    - APITimeoutError -> BackendTimeoutError
    - APIStatusError (non-2xx) -> BackendError "OpenAI API error: <status> - <body>"
    - APIConnectionError -> BackendError
    - Empty content -> BackendError "No content returned from OpenAI API"
    - Missing choices/message fields -> ParseError

Python Learning Notes:
    - AsyncOpenAI exposes the same API as OpenAI but every call is awaitable
    - Exception order matters: APITimeoutError subclasses APIConnectionError
    - getattr(obj, "name", default) reads optional attributes safely
"""

import json
from typing import Any, List, Optional

from openai import APIConnectionError, APIStatusError, APITimeoutError, AsyncOpenAI

from ..errors import BackendError, BackendTimeoutError, ParseError
from ..utils import get_logger
from .base import AIProvider, CompletionResponse, Message, ProviderConfig
from .pricing import OPENAI_PRICING

logger = get_logger(__name__)

VISION_MODELS = ("gpt-4o", "gpt-4o-mini", "gpt-4-turbo", "gpt-4-vision-preview")


class OpenAIProvider(AIProvider):
    """
    OpenAI chat completions backend.

    Attributes:
        name (str): "OpenAI", reported in result metadata.
        pricing (PricingTable): OpenAI per-model prices.

    Example:
        provider = OpenAIProvider(ProviderConfig("openai", "sk-...", "gpt-4o"))
        result = await provider.generate_alt_tag(url, AltTagConfig())
    """

    name = "OpenAI"
    pricing = OPENAI_PRICING

    def __init__(self, config: ProviderConfig, client: Optional[AsyncOpenAI] = None):
        """
        Initialize the provider.

        Args:
            config (ProviderConfig): Backend configuration.
            client (Optional[AsyncOpenAI]): Pre-built client, mainly for tests.
                The caller owns it and it is never closed here. When omitted
                each call opens its own client and closes it afterwards.
        """
        super().__init__(config)
        self._client = client

    def _new_client(self) -> AsyncOpenAI:
        return AsyncOpenAI(
            api_key=self.config.api_key,
            timeout=self.config.timeout,
            max_retries=0,
        )

    async def _complete(
        self, messages: List[Message], json_mode: bool = False
    ) -> CompletionResponse:
        request: dict = {
            "model": self.config.model,
            "messages": messages,
            "max_tokens": self.config.max_tokens,
            "temperature": self.config.temperature,
        }
        if json_mode:
            request["response_format"] = {"type": "json_object"}

        logger.debug(f"Calling OpenAI chat completions with model {self.config.model}")

        try:
            if self._client is not None:
                response = await self._client.chat.completions.create(**request)
            else:
                # Owned clients live for a single call
                async with self._new_client() as client:
                    response = await client.chat.completions.create(**request)
        except APITimeoutError as e:
            raise BackendTimeoutError(
                f"OpenAI API request timed out after {self.config.timeout}s",
                provider=self.name,
                cause=e,
            ) from e
        except APIStatusError as e:
            body = json.dumps(e.body if e.body is not None else {}, default=str)
            raise BackendError(
                f"OpenAI API error: {e.status_code} - {body}",
                provider=self.name,
                cause=e,
                status_code=e.status_code,
            ) from e
        except APIConnectionError as e:
            raise BackendError(
                f"OpenAI API connection error: {e}", provider=self.name, cause=e
            ) from e

        return self._parse_response(response)

    def _parse_response(self, response: Any) -> CompletionResponse:
        try:
            content = response.choices[0].message.content
        except (AttributeError, IndexError, TypeError) as e:
            raise ParseError(
                "Malformed response from OpenAI API: missing choices",
                provider=self.name,
                cause=e,
            ) from e

        if not content or not content.strip():
            raise BackendError("No content returned from OpenAI API", provider=self.name)

        usage = getattr(response, "usage", None)

        return CompletionResponse(
            text=content.strip(),
            model=getattr(response, "model", None) or self.config.model,
            tokens_used=getattr(usage, "total_tokens", 0) or 0,
            prompt_tokens=getattr(usage, "prompt_tokens", None),
            completion_tokens=getattr(usage, "completion_tokens", None),
        )

    def validate_config(self, config: ProviderConfig) -> bool:
        """
        Validate OpenAI-specific configuration.

        On top of the base rules the key must look like an OpenAI key (``sk-``
        prefix). Models outside the known vision list are allowed but logged,
        since they may reject image input.
        """
        if not super().validate_config(config):
            return False

        if not config.api_key.startswith("sk-"):
            return False

        if not any(model in config.model for model in VISION_MODELS):
            logger.warning(
                f"Model {config.model} may not support vision. "
                f"Recommended: {', '.join(VISION_MODELS)}"
            )

        return True
