"""
Shared test fixtures and configuration for metagen tests.

This module provides reusable fixtures and fakes for testing metagen without
reaching a real AI backend. It centralizes the settings records, provider stubs
and audit stores that most test modules need.

Key Fixtures:
    - settings_data / settings: A fully enabled AI settings record
    - settings_loader: Async loader returning that record
    - stub_factory: Provider factory building StubProvider instances
    - audit_store: In-memory audit store
    - events / event_sink: Collected generation stage events
    - openai_response: Factory for fake OpenAI chat completion responses

Python Learning Notes:
    - conftest.py is automatically discovered by pytest
    - Fixtures defined here are available to all tests without import
    - autouse=True fixtures run for every test without being requested
    - SimpleNamespace builds throwaway objects with attribute access
"""

from types import SimpleNamespace
from typing import Any, Dict, List, Optional

import pytest

from metagen.database.audit_log import InMemoryAuditStore
from metagen.providers.base import AIProvider, CompletionResponse, ProviderConfig
from metagen.providers.pricing import OPENAI_PRICING
from metagen.settings import AiSettings, static_settings_loader


class StubProvider(AIProvider):
    """
    Provider whose backend call returns a canned reply or raises an error.

    Everything above ``_complete`` (prompt assembly, cleanup, truncation, cost)
    is the real AIProvider code, so tests exercise the shared behavior.
    """

    name = "Stub"
    pricing = OPENAI_PRICING

    def __init__(
        self,
        config: ProviderConfig,
        reply: str = "",
        error: Optional[Exception] = None,
        tokens: int = 100,
    ):
        super().__init__(config)
        self.reply = reply
        self.error = error
        self.tokens = tokens
        self.calls: List[Dict[str, Any]] = []

    async def _complete(self, messages, json_mode=False):
        self.calls.append({"messages": messages, "json_mode": json_mode})
        if self.error is not None:
            raise self.error
        return CompletionResponse(
            text=self.reply, model=self.config.model, tokens_used=self.tokens
        )


class StubProviderFactory:
    """
    Callable provider factory that remembers every config and provider.

    Attributes:
        reply (str): Text every built provider answers with.
        error (Optional[Exception]): Raised by every backend call when set.
        configs (List[ProviderConfig]): Configs the factory was called with.
        providers (List[StubProvider]): Providers built so far.
    """

    def __init__(self, reply: str = "Golden retriever puppy playing on grass"):
        self.reply = reply
        self.error: Optional[Exception] = None
        self.tokens = 100
        self.configs: List[ProviderConfig] = []
        self.providers: List[StubProvider] = []

    def __call__(self, config: ProviderConfig) -> StubProvider:
        self.configs.append(config)
        provider = StubProvider(config, self.reply, self.error, self.tokens)
        self.providers.append(provider)
        return provider

    @property
    def calls(self) -> List[Dict[str, Any]]:
        return [call for provider in self.providers for call in provider.calls]


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    """
    Remove metagen environment variables so tests never see real credentials.

    Python Learning Notes:
        - monkeypatch.delenv(raising=False) ignores variables that are unset
        - The original environment is restored after each test
    """
    for name in ("METAGEN_API_KEY", "OPENAI_API_KEY", "METAGEN_SETTINGS", "METAGEN_AUDIT_LOG"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def settings_data() -> Dict[str, Any]:
    """
    Settings record as the CMS stores it: camelCase keys, features enabled.

    Returns:
        Dict[str, Any]: Raw settings mapping; tests may modify their copy.
    """
    return {
        "provider": "openai",
        "apiKey": "sk-test-key",
        "model": "gpt-4o",
        "temperature": 0.3,
        "maxTokens": 150,
        "timeout": 30,
        "altTag": {"enabled": True, "maxLength": 125},
        "seoMeta": {
            "enabled": True,
            "brandName": "Acme",
            "titleMaxLength": 60,
            "descriptionMinLength": 20,
            "descriptionMaxLength": 160,
        },
        "iconEnhancement": {"enabled": True},
    }


@pytest.fixture
def settings(settings_data) -> AiSettings:
    return AiSettings.model_validate(settings_data)


@pytest.fixture
def settings_loader(settings):
    return static_settings_loader(settings)


@pytest.fixture
def stub_factory() -> StubProviderFactory:
    return StubProviderFactory()


@pytest.fixture
def audit_store() -> InMemoryAuditStore:
    return InMemoryAuditStore()


@pytest.fixture
def events() -> List[Any]:
    return []


@pytest.fixture
def event_sink(events):
    """Sink that appends every GenerationEvent to the ``events`` fixture."""
    return events.append


@pytest.fixture
def openai_response():
    """
    Build fake OpenAI chat completion responses.

    Usage:
        def test_parse(openai_response):
            response = openai_response("Hello", total_tokens=42)

    Python Learning Notes:
        - Returning a function from a fixture lets each test pick its values
    """

    def build(
        content: Optional[str] = "Sunset over the harbor",
        total_tokens: int = 120,
        model: str = "gpt-4o",
    ) -> SimpleNamespace:
        return SimpleNamespace(
            choices=[SimpleNamespace(message=SimpleNamespace(content=content))],
            usage=SimpleNamespace(
                total_tokens=total_tokens,
                prompt_tokens=total_tokens - 20,
                completion_tokens=20,
            ),
            model=model,
        )

    return build
