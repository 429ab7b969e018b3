"""
Unit tests for the provider registry and pricing tables.
"""

import pytest

from metagen.errors import ConfigurationError
from metagen.providers import (
    CUSTOM_PRICING,
    OPENAI_PRICING,
    CustomEndpointProvider,
    ModelPricing,
    OpenAIProvider,
    PricingTable,
    ProviderConfig,
    create_provider,
    get_available_providers,
    register_provider,
    unregister_provider,
)
from tests.conftest import StubProvider


class TestCreateProvider:
    """Tests for building providers from configuration."""

    def test_openai(self):
        provider = create_provider(ProviderConfig("openai", "sk-test", "gpt-4o"))
        assert isinstance(provider, OpenAIProvider)

    def test_custom(self):
        provider = create_provider(
            ProviderConfig("custom", "key", "llava", custom_endpoint="https://llm.example.com")
        )
        assert isinstance(provider, CustomEndpointProvider)

    def test_anthropic_is_not_implemented(self):
        with pytest.raises(ConfigurationError) as exc_info:
            create_provider(ProviderConfig("anthropic", "key", "claude-3-5-sonnet"))

        assert exc_info.value.message == "Anthropic provider not yet implemented"

    def test_unknown_provider(self):
        with pytest.raises(ConfigurationError) as exc_info:
            create_provider(ProviderConfig("mystery", "key", "model"))

        assert exc_info.value.message == "Unknown provider: mystery"

    def test_registered_provider_is_used(self):
        register_provider("stub", StubProvider, label="Stub Backend")
        try:
            provider = create_provider(ProviderConfig("stub", "key", "model"))
            assert isinstance(provider, StubProvider)
        finally:
            unregister_provider("stub")

        with pytest.raises(ConfigurationError):
            create_provider(ProviderConfig("stub", "key", "model"))


class TestAvailableProviders:
    """Tests for the provider selection list."""

    def test_builtin_providers(self):
        providers = {item["value"]: item for item in get_available_providers()}

        assert providers["openai"] == {
            "value": "openai",
            "label": "OpenAI (GPT-4o Vision)",
            "status": "available",
        }
        assert providers["anthropic"]["status"] == "coming-soon"
        assert providers["custom"]["label"] == "Custom Endpoint"


class TestPricing:
    """Tests for substring price lookup and cost estimation."""

    def test_longest_match_wins(self):
        assert OPENAI_PRICING.lookup("gpt-4o-mini-2024-07-18") == ModelPricing(0.15, 0.6)
        assert OPENAI_PRICING.lookup("gpt-4o-2024-08-06") == ModelPricing(2.5, 10.0)

    def test_unknown_model_uses_default(self):
        assert OPENAI_PRICING.lookup("some-future-model") == ModelPricing(2.5, 10.0)

    def test_table_without_default(self):
        table = PricingTable(prices={"a": ModelPricing(1.0, 1.0)})
        assert table.lookup("b") == ModelPricing(0.0, 0.0)

    def test_estimate_cost_split(self):
        table = PricingTable(prices={"m": ModelPricing(1.0, 2.0)}, default_key="m")

        # 0.7 * 1M * $1 + 0.3 * 1M * $2
        assert table.estimate_cost(1_000_000, "m") == pytest.approx(1.3)

    def test_negative_tokens_cost_nothing(self):
        assert OPENAI_PRICING.estimate_cost(-10, "gpt-4o") == 0.0

    def test_custom_endpoints_are_free(self):
        assert CUSTOM_PRICING.estimate_cost(50_000, "llava-13b") == 0.0

    @pytest.mark.parametrize("model", ["gpt-4o", "gpt-4o-mini", "gpt-4-turbo", "unknown"])
    def test_cost_never_decreases_with_tokens(self, model):
        token_counts = [-5, 0, 1, 150, 1_000, 25_000, 1_000_000]

        costs = [OPENAI_PRICING.estimate_cost(tokens, model) for tokens in token_counts]

        assert costs == sorted(costs)
