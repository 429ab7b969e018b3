"""
AI provider registry.

Orchestrators never construct backends directly: they hand a ProviderConfig to
``create_provider`` which looks up the provider id in the registry. New
backends are added with ``register_provider`` without touching any orchestrator.

Built-in providers:
    - openai: OpenAI chat completions (GPT-4o vision) via the openai SDK
    - custom: Any OpenAI-compatible endpoint via httpx
    - anthropic: Registered so it appears in selection lists; not implemented

Usage Example:
    from metagen.providers import ProviderConfig, create_provider

    provider = create_provider(ProviderConfig("openai", api_key, "gpt-4o"))
    if provider.validate_config(provider.config):
        result = await provider.generate_alt_tag(url, alt_config)

Python Learning Notes:
    - A module-level dict acts as a simple plugin registry
    - Callable[[ProviderConfig], AIProvider] types any class or factory function
    - Raising from a factory lets "coming soon" entries share one code path
"""

from dataclasses import dataclass
from typing import Callable, Dict, List, Optional

from ..errors import ConfigurationError
from .base import AIProvider, CompletionResponse, ProviderConfig
from .custom import CustomEndpointProvider
from .openai_provider import OpenAIProvider
from .pricing import CUSTOM_PRICING, OPENAI_PRICING, ModelPricing, PricingTable

ProviderFactory = Callable[[ProviderConfig], AIProvider]

STATUS_AVAILABLE = "available"
STATUS_COMING_SOON = "coming-soon"


@dataclass(frozen=True)
class ProviderRegistration:
    """A registry entry; ``factory`` is None for providers not yet implemented."""

    label: str
    factory: Optional[ProviderFactory] = None
    unavailable_message: Optional[str] = None

    @property
    def status(self) -> str:
        return STATUS_AVAILABLE if self.factory else STATUS_COMING_SOON


_REGISTRY: Dict[str, ProviderRegistration] = {}


def register_provider(
    provider_id: str,
    factory: Optional[ProviderFactory],
    label: Optional[str] = None,
    unavailable_message: Optional[str] = None,
) -> None:
    """
    Add or replace a provider in the registry.

    Args:
        provider_id (str): Id stored in the settings record's ``provider`` field.
        factory (Optional[ProviderFactory]): Builds a provider from a config.
            None registers a placeholder that reports "coming soon".
        label (Optional[str]): Display label; defaults to the id.
        unavailable_message (Optional[str]): Error raised for placeholders.
    """
    _REGISTRY[provider_id] = ProviderRegistration(
        label=label or provider_id,
        factory=factory,
        unavailable_message=unavailable_message,
    )


def unregister_provider(provider_id: str) -> None:
    _REGISTRY.pop(provider_id, None)


def create_provider(config: ProviderConfig) -> AIProvider:
    """
    Build the provider named by ``config.provider``.

    Construction does not validate the configuration; call
    ``provider.validate_config`` before invoking it.

    Raises:
        ConfigurationError: The id is unknown, or registered but not
            implemented yet.
    """
    registration = _REGISTRY.get(config.provider)

    if registration is None:
        raise ConfigurationError(
            f"Unknown provider: {config.provider}", provider=config.provider
        )

    if registration.factory is None:
        raise ConfigurationError(
            registration.unavailable_message
            or f"{registration.label} provider not yet implemented",
            provider=config.provider,
        )

    return registration.factory(config)


def get_available_providers() -> List[Dict[str, str]]:
    """List registered providers as ``{value, label, status}`` dicts."""
    return [
        {"value": provider_id, "label": registration.label, "status": registration.status}
        for provider_id, registration in _REGISTRY.items()
    ]


register_provider("openai", OpenAIProvider, label="OpenAI (GPT-4o Vision)")
register_provider(
    "anthropic",
    None,
    label="Anthropic (Claude 3.5 Sonnet)",
    unavailable_message="Anthropic provider not yet implemented",
)
register_provider("custom", CustomEndpointProvider, label="Custom Endpoint")

__all__ = [
    "AIProvider",
    "CompletionResponse",
    "ProviderConfig",
    "ProviderFactory",
    "OpenAIProvider",
    "CustomEndpointProvider",
    "ModelPricing",
    "PricingTable",
    "OPENAI_PRICING",
    "CUSTOM_PRICING",
    "create_provider",
    "register_provider",
    "unregister_provider",
    "get_available_providers",
]
