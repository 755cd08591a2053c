"""Token cost accounting for OpenAI completion usage.

Responsibilities:
- Hold an immutable, versioned per-model pricing table.
- Resolve model pricing with exact, prefix, and default fallbacks.
- Accumulate run-level usage and recompute cost summaries on demand.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping

from ..models.datatypes import Usage


@dataclass(frozen=True, slots=True)
class ModelPricing:
    """USD price per 1000 tokens for one model."""

    input: float
    output: float


@dataclass(frozen=True, slots=True)
class PricingTable:
    """Versioned, read-only model pricing lookup table.

    Attributes:
        version: Label of the price list the rates were taken from.
        rates: Model identifier to pricing mapping.
        default: Conservative pricing used for unknown models.
    """

    version: str
    rates: Mapping[str, ModelPricing]
    default: ModelPricing


DEFAULT_PRICING_TABLE = PricingTable(
    version="2024-06",
    rates=MappingProxyType(
        {
            "gpt-4-turbo": ModelPricing(0.01, 0.03),
            "gpt-4-turbo-preview": ModelPricing(0.01, 0.03),
            "gpt-4-1106-preview": ModelPricing(0.01, 0.03),
            "gpt-4-0125-preview": ModelPricing(0.01, 0.03),
            "gpt-4": ModelPricing(0.03, 0.06),
            "gpt-4-0613": ModelPricing(0.03, 0.06),
            "gpt-4-32k": ModelPricing(0.06, 0.12),
            "gpt-4-32k-0613": ModelPricing(0.06, 0.12),
            "gpt-4o": ModelPricing(0.005, 0.015),
            "gpt-4o-2024-05-13": ModelPricing(0.005, 0.015),
            "gpt-4o-mini": ModelPricing(0.00015, 0.0006),
            "gpt-4o-mini-2024-07-18": ModelPricing(0.00015, 0.0006),
            "gpt-3.5-turbo": ModelPricing(0.0005, 0.0015),
            "gpt-3.5-turbo-0125": ModelPricing(0.0005, 0.0015),
            "gpt-3.5-turbo-1106": ModelPricing(0.001, 0.002),
            "gpt-3.5-turbo-instruct": ModelPricing(0.0015, 0.002),
            "gpt-3.5-turbo-16k": ModelPricing(0.003, 0.004),
        }
    ),
    default=ModelPricing(0.03, 0.06),
)


def pricing_for(model: str, table: PricingTable = DEFAULT_PRICING_TABLE) -> ModelPricing:
    """Resolve pricing for a model identifier.

    Resolution order:
    1. Exact table entry.
    2. Longest table key that prefixes the model id (case-insensitive), so
       `gpt-4o-mini-2025-01-01` resolves to `gpt-4o-mini` rather than `gpt-4`.
    3. Table default rate.
    """

    exact = table.rates.get(model)
    if exact is not None:
        return exact

    model_lower = str(model).lower()
    best_key: str | None = None
    for key in table.rates:
        if model_lower.startswith(key.lower()) and (
            best_key is None or len(key) > len(best_key)
        ):
            best_key = key
    if best_key is not None:
        return table.rates[best_key]

    return table.default


def calculate_cost(
    usage: Usage, model: str, table: PricingTable = DEFAULT_PRICING_TABLE
) -> float:
    """Return USD cost of token usage for a model."""

    pricing = pricing_for(model, table)
    input_cost = (usage.prompt_tokens / 1000) * pricing.input
    output_cost = (usage.completion_tokens / 1000) * pricing.output
    return input_cost + output_cost


def format_cost(cost: float) -> str:
    """Format a USD cost, keeping four decimals for sub-cent amounts."""

    if cost < 0.01:
        return f"${cost:.4f}"
    return f"${cost:.2f}"


@dataclass(frozen=True, slots=True)
class CostSummary:
    """Snapshot of run-level usage, pricing, and cost breakdown."""

    model: str
    pricing: ModelPricing
    usage: Usage
    cost: float
    formatted_cost: str
    input_cost: float
    output_cost: float


@dataclass(slots=True)
class CostTracker:
    """Accumulate token usage for one run and derive its cost."""

    model: str
    pricing_table: PricingTable = DEFAULT_PRICING_TABLE
    _usage: Usage = field(default_factory=Usage)

    def add_usage(self, usage: Usage | Mapping[str, object] | None) -> None:
        """Add usage from one API call; missing counters count as zero."""

        if not isinstance(usage, Usage):
            usage = Usage.from_mapping(usage if isinstance(usage, Mapping) else None)
        self._usage = self._usage + usage

    def total_usage(self) -> Usage:
        """Return accumulated usage."""

        return self._usage

    def total_cost(self) -> float:
        """Return accumulated cost, recomputed from total usage."""

        return calculate_cost(self._usage, self.model, self.pricing_table)

    def formatted_cost(self) -> str:
        """Return accumulated cost formatted for display."""

        return format_cost(self.total_cost())

    def summary(self) -> CostSummary:
        """Return a cost summary snapshot for reporting."""

        pricing = pricing_for(self.model, self.pricing_table)
        cost = self.total_cost()
        return CostSummary(
            model=self.model,
            pricing=pricing,
            usage=self._usage,
            cost=cost,
            formatted_cost=format_cost(cost),
            input_cost=(self._usage.prompt_tokens / 1000) * pricing.input,
            output_cost=(self._usage.completion_tokens / 1000) * pricing.output,
        )
