"""Metrics computation and pricing."""

from .aggregator import AggregatedMetrics, RunSetAggregator
from .pricing import DEFAULT_TOKEN_PRICING, PricingEntry, PricingResolver

__all__ = [
    "AggregatedMetrics",
    "RunSetAggregator",
    "DEFAULT_TOKEN_PRICING",
    "PricingEntry",
    "PricingResolver",
]
