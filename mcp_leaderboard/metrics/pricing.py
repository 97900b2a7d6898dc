"""
Token pricing for cost estimation.

Prices are expressed in USD per 1000 tokens. The resolver is constructed
with an explicit table so callers and tests can supply their own rates.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PricingEntry:
    """
    Per-model token rates.

    Attributes:
        input_rate: Cost per 1000 input tokens
        output_rate: Cost per 1000 output tokens
    """

    input_rate: float
    output_rate: float

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "PricingEntry":
        """Create an entry from ``{"input": ..., "output": ...}``."""
        return cls(input_rate=float(data["input"]), output_rate=float(data["output"]))


DEFAULT_TOKEN_PRICING: Mapping[str, PricingEntry] = MappingProxyType({
    "claude-sonnet-4": PricingEntry(0.015, 0.075),
    "claude-sonnet-4-20250514": PricingEntry(0.015, 0.075),
    "deepseek-v3.1-non-think": PricingEntry(0.002, 0.01),
    "gpt-4o": PricingEntry(0.0025, 0.01),
    "gpt-4o-mini": PricingEntry(0.00015, 0.0006),
    "o1-preview": PricingEntry(0.015, 0.06),
    "o1-mini": PricingEntry(0.003, 0.012),
})


class PricingResolver:
    """
    Resolves model identifiers to token pricing and computes costs.

    Example:
        ```python
        resolver = PricingResolver()
        resolver.cost("gpt-4o", 1000, 500)  # 0.0075
        resolver.cost("unknown-model", 1000, 500)  # None
        ```
    """

    def __init__(self, table: Mapping[str, PricingEntry] | None = None) -> None:
        """
        Initialize the resolver.

        Args:
            table: Model id -> pricing entry (defaults to DEFAULT_TOKEN_PRICING)
        """
        source = DEFAULT_TOKEN_PRICING if table is None else table
        self._table: Mapping[str, PricingEntry] = MappingProxyType(dict(source))

    @classmethod
    def with_overrides(
        cls,
        overrides: Mapping[str, Mapping[str, Any]],
        base: Mapping[str, PricingEntry] | None = None,
    ) -> "PricingResolver":
        """
        Create a resolver from a base table extended with raw rate overrides.

        Args:
            overrides: Model id -> ``{"input": rate, "output": rate}``
            base: Table to extend (defaults to DEFAULT_TOKEN_PRICING)

        Raises:
            KeyError: If an override lacks a rate
            ValueError: If a rate is not numeric
        """
        table = dict(DEFAULT_TOKEN_PRICING if base is None else base)
        for model_id, rates in overrides.items():
            table[model_id] = PricingEntry.from_dict(rates)
        return cls(table)

    @property
    def table(self) -> Mapping[str, PricingEntry]:
        """Read-only view of the pricing table."""
        return self._table

    def lookup(self, model_id: str) -> PricingEntry | None:
        """Get the pricing entry for a model, or None if unknown."""
        return self._table.get(model_id)

    def cost(self, model_id: str, input_tokens: float, output_tokens: float) -> float | None:
        """
        Compute the cost of a token volume.

        Args:
            model_id: Model identifier
            input_tokens: Number of input tokens
            output_tokens: Number of output tokens

        Returns:
            Cost in USD (unrounded), or None if the model has no pricing
        """
        entry = self.lookup(model_id)
        if entry is None:
            logger.warning(f"No pricing info for model: {model_id!r}")
            return None

        input_cost = (input_tokens / 1000) * entry.input_rate
        output_cost = (output_tokens / 1000) * entry.output_rate
        return input_cost + output_cost
