"""
Abstract base class for AI providers.

This module defines the contract every AI backend implements and the shared
behavior they inherit. Concrete providers only implement ``_complete``: one chat
completion round trip that returns a CompletionResponse or raises a
MetagenError. Everything above that (prompt assembly, alt text cleanup, length
enforcement, cost calculation, timeout handling and result tagging) lives here
so every backend behaves identically.

Key Components:
    - ProviderConfig: Immutable per-call backend configuration
    - CompletionResponse: Text plus token usage from one completion
    - AIProvider: Abstract base class with template methods

Design Patterns:
    - Abstract Base Class (ABC): Enforces implementation of ``_complete``
    - Template Method: ``generate_alt_tag`` and ``generate_text`` define the
      algorithm and delegate the network call to subclasses

This module serves as the foundation for:
    - OpenAIProvider (openai_provider.py)
    - CustomEndpointProvider (custom.py)
    - Future provider implementations registered via the provider registry

Python Learning Notes:
    - ABC (Abstract Base Class): Forces subclasses to implement abstract methods
    - @abstractmethod: Decorator marking methods that must be overridden
    - asyncio.wait_for(): Cancels an awaitable that runs longer than a timeout
    - time.monotonic(): Clock for durations that never jumps backwards
"""

import asyncio
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Union
from urllib.parse import urlparse

from ..errors import BackendError, BackendTimeoutError, ConfigurationError, MetagenError
from ..models import AltTagConfig, GenerationMetadata, GenerationResult, OperationKind
from ..processors.prompts import build_alt_tag_prompt
from ..utils import get_logger
from ..utils.text import clean_alt_text, truncate_at_word
from .pricing import CUSTOM_PRICING, PricingTable

logger = get_logger(__name__)

# Typical alt text call: image tokens + prompt + short answer
ALT_TAG_ESTIMATED_TOKENS = 1000

Message = Dict[str, Any]


@dataclass(frozen=True)
class ProviderConfig:
    """
    Configuration handed to a provider for one call.

    Attributes:
        provider (str): Provider id ("openai", "anthropic", "custom", ...).
        api_key (str): Credential sent to the backend.
        model (str): Model identifier sent to the backend.
        custom_endpoint (Optional[str]): Endpoint URL, required for "custom".
        temperature (float): Sampling temperature, passed to the backend as is.
        max_tokens (int): Completion token limit.
        timeout (float): Seconds allowed for one backend call.
    """

    provider: str
    api_key: str
    model: str
    custom_endpoint: Optional[str] = None
    temperature: float = 0.3
    max_tokens: int = 150
    timeout: float = 30


@dataclass
class CompletionResponse:
    """Text and token usage returned by one chat completion."""

    text: str
    model: str
    tokens_used: int = 0
    prompt_tokens: Optional[int] = None
    completion_tokens: Optional[int] = None


def elapsed_ms(start: float) -> int:
    """Milliseconds since a time.monotonic() reading."""
    return int((time.monotonic() - start) * 1000)


class AIProvider(ABC):
    """
    Abstract base class for all AI providers.

    Subclasses must implement:
        - _complete(): one chat completion round trip

    Subclasses may override:
        - validate_config(): add backend-specific checks
        - pricing: the PricingTable used for cost calculation

    Construction never validates; orchestrators call validate_config() as a
    separate step so invalid settings produce a readable error instead of an
    exception.

    Attributes:
        name (str): Human-readable provider name reported in result metadata.
        config (ProviderConfig): Configuration for calls made by this instance.
    """

    name = "Base"
    pricing: PricingTable = CUSTOM_PRICING

    def __init__(self, config: ProviderConfig):
        self.config = config

    @abstractmethod
    async def _complete(
        self, messages: List[Message], json_mode: bool = False
    ) -> CompletionResponse:
        """
        Send one chat completion request.

        Raises:
            BackendError: Non-2xx response, transport failure or empty content.
            ParseError: Response payload is missing expected fields.
        """
        pass

    async def _call(
        self, messages: List[Message], json_mode: bool = False
    ) -> CompletionResponse:
        # The HTTP client has its own timeout; this bounds the whole exchange
        try:
            return await asyncio.wait_for(
                self._complete(messages, json_mode=json_mode),
                timeout=self.config.timeout,
            )
        except asyncio.TimeoutError as e:
            raise BackendTimeoutError(
                f"{self.name} request timed out after {self.config.timeout}s",
                provider=self.name,
                cause=e,
            ) from e

    async def generate_alt_tag(
        self, image_url: str, config: AltTagConfig
    ) -> GenerationResult:
        """
        Generate alt text for an image.

        The image is sent as a single multimodal user message together with the
        assembled prompt. The reply is cleaned (quotes, redundant lead-ins,
        trailing periods) and cut to ``config.max_length`` at a word boundary.

        This method never raises for backend problems: invalid URLs, backend
        errors and malformed responses become a failed result that still
        carries the elapsed duration.

        Args:
            image_url (str): http(s) URL or ``data:image`` URI of the image.
            config (AltTagConfig): Primer, length limit and optional context.

        Returns:
            GenerationResult: Alt text with usage metadata, or a failure.
        """
        start = time.monotonic()

        try:
            if not self.validate_image_url(image_url):
                raise ConfigurationError(
                    f"Invalid image URL: {image_url}", provider=self.name
                )

            prompt = build_alt_tag_prompt(config)
            messages = [
                {
                    "role": "user",
                    "content": [
                        {"type": "text", "text": prompt},
                        {
                            "type": "image_url",
                            "image_url": {"url": image_url, "detail": "auto"},
                        },
                    ],
                }
            ]
            response = await self._call(messages)

            alt_text = truncate_at_word(clean_alt_text(response.text), config.max_length)
            if not alt_text:
                raise BackendError(f"No content returned from {self.name}", provider=self.name)

            return GenerationResult(
                text=alt_text,
                success=True,
                metadata=GenerationMetadata(
                    provider=self.name,
                    model=self.config.model,
                    tokens_used=response.tokens_used,
                    cost=self.calculate_cost(response.tokens_used),
                    duration_ms=elapsed_ms(start),
                    character_count=len(alt_text),
                ),
            )

        except MetagenError as e:
            logger.warning(f"{self.name} alt text generation failed: {e.message}")
            return GenerationResult.failure(
                e.message,
                metadata=GenerationMetadata(
                    provider=self.name,
                    model=self.config.model,
                    duration_ms=elapsed_ms(start),
                ),
            )

    async def generate_text(
        self, prompt: str, system: Optional[str] = None, json_mode: bool = False
    ) -> CompletionResponse:
        """
        Run a text-only completion.

        Args:
            prompt (str): User message content.
            system (Optional[str]): Optional system message sent first.
            json_mode (bool): Ask the backend for a JSON object response.

        Returns:
            CompletionResponse: Raw reply text and token usage.

        Raises:
            BackendError: The backend failed or timed out.
            ParseError: The backend reply was malformed.
        """
        messages: List[Message] = []
        if system:
            messages.append({"role": "system", "content": system})
        messages.append({"role": "user", "content": prompt})

        return await self._call(messages, json_mode=json_mode)

    def validate_config(self, config: ProviderConfig) -> bool:
        """
        Check that a configuration can be used with this provider.

        Base rules: the API key and model must be non-blank, and the "custom"
        provider needs an endpoint.
        """
        if not config.api_key or not config.api_key.strip():
            return False

        if not config.model or not config.model.strip():
            return False

        if config.provider == "custom" and not config.custom_endpoint:
            return False

        return True

    @staticmethod
    def validate_image_url(url: str) -> bool:
        """Accept http(s) URLs with a host and base64 ``data:image`` URIs."""
        if not isinstance(url, str):
            return False

        if url.startswith("data:image"):
            return True

        try:
            parsed = urlparse(url)
        except ValueError:
            return False

        return parsed.scheme in ("http", "https") and bool(parsed.netloc)

    def calculate_cost(self, tokens: int) -> float:
        """Estimated dollar cost of ``tokens`` total tokens on the configured model."""
        return self.pricing.estimate_cost(tokens, self.config.model)

    def estimate_cost(self, operation: Union[str, OperationKind]) -> float:
        """
        Estimate the cost of an operation before running it.

        Only alt text generation has an estimate (about 1000 tokens); every
        other operation returns 0.
        """
        if operation == OperationKind.ALT_TAG:
            return self.calculate_cost(ALT_TAG_ESTIMATED_TOKENS)
        return 0.0
