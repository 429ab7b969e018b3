"""
Cost estimation for AI backend calls.

Backends report a single total token count for most calls, so cost is estimated
by assuming a fixed split between prompt and completion tokens: 70% of the
tokens are billed at the input rate and 30% at the output rate. Prices are
expressed in US dollars per million tokens.

Model names are matched by substring against the price table. The longest
matching key wins so that "gpt-4o-mini-2024-07-18" is billed as gpt-4o-mini
rather than gpt-4o. Unknown models fall back to the table's default entry.

Python Learning Notes:
    - Frozen dataclasses are immutable value objects
    - max() with a key function picks the best candidate from a sequence
"""

from dataclasses import dataclass, field
from typing import Dict

INPUT_TOKEN_SHARE = 0.7
OUTPUT_TOKEN_SHARE = 0.3
TOKENS_PER_MILLION = 1_000_000


@dataclass(frozen=True)
class ModelPricing:
    """Price of one million input and output tokens, in US dollars."""

    input_per_million: float
    output_per_million: float


@dataclass(frozen=True)
class PricingTable:
    """
    Static per-model price table with substring matching.

    Attributes:
        prices (Dict[str, ModelPricing]): Prices keyed by model name fragment.
        default_key (str): Entry used when no key matches the model name.
    """

    prices: Dict[str, ModelPricing] = field(default_factory=dict)
    default_key: str = ""

    def lookup(self, model: str) -> ModelPricing:
        """Return the pricing for a model, preferring the longest matching key."""
        matches = [key for key in self.prices if key and key in (model or "")]
        if matches:
            return self.prices[max(matches, key=len)]

        if self.default_key in self.prices:
            return self.prices[self.default_key]

        return ModelPricing(0.0, 0.0)

    def estimate_cost(self, total_tokens: int, model: str) -> float:
        """
        Estimate the dollar cost of a call from its total token count.

        Args:
            total_tokens (int): Prompt plus completion tokens. Negative values
                count as zero.
            model (str): Model identifier as sent to the backend.

        Returns:
            float: ``(0.7 * T * input + 0.3 * T * output) / 1_000_000``.
        """
        tokens = max(0, total_tokens or 0)
        pricing = self.lookup(model)

        input_cost = tokens * INPUT_TOKEN_SHARE * pricing.input_per_million
        output_cost = tokens * OUTPUT_TOKEN_SHARE * pricing.output_per_million

        return (input_cost + output_cost) / TOKENS_PER_MILLION


OPENAI_PRICING = PricingTable(
    prices={
        "gpt-4o": ModelPricing(2.5, 10.0),
        "gpt-4o-mini": ModelPricing(0.15, 0.6),
        "gpt-4-turbo": ModelPricing(10.0, 30.0),
        "gpt-4-vision-preview": ModelPricing(10.0, 30.0),
    },
    default_key="gpt-4o",
)

# Self-hosted endpoints have no published price
CUSTOM_PRICING = PricingTable(
    prices={"default": ModelPricing(0.0, 0.0)},
    default_key="default",
)
