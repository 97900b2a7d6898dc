"""Tests for token pricing."""

import pytest

from mcp_leaderboard.metrics.pricing import (
    DEFAULT_TOKEN_PRICING,
    PricingEntry,
    PricingResolver,
)


def test_known_model_cost():
    resolver = PricingResolver()
    assert resolver.cost("gpt-4o", 1000, 500) == pytest.approx(0.0075)


def test_unknown_model_returns_none(caplog):
    resolver = PricingResolver()
    with caplog.at_level("WARNING"):
        assert resolver.cost("not-a-model", 1000, 500) is None
    assert "not-a-model" in caplog.text


def test_empty_model_name_returns_none():
    assert PricingResolver().cost("", 0, 0) is None


def test_cost_is_linear_in_tokens():
    resolver = PricingResolver()
    base = resolver.cost("claude-sonnet-4", 1200, 300)
    assert resolver.cost("claude-sonnet-4", 2400, 600) == pytest.approx(2 * base)
    assert resolver.cost("claude-sonnet-4", 1200, 0) + resolver.cost(
        "claude-sonnet-4", 0, 300
    ) == pytest.approx(base)


def test_injected_table_replaces_defaults():
    resolver = PricingResolver({"local-model": PricingEntry(1.0, 2.0)})
    assert resolver.cost("local-model", 2000, 1000) == pytest.approx(4.0)
    assert resolver.cost("gpt-4o", 1000, 1000) is None


def test_with_overrides_extends_defaults():
    resolver = PricingResolver.with_overrides({
        "gpt-4o": {"input": 1, "output": 1},
        "new": {"input": 0.5, "output": 0.5},
    })
    assert resolver.lookup("gpt-4o") == PricingEntry(1.0, 1.0)
    assert resolver.lookup("new") == PricingEntry(0.5, 0.5)
    assert resolver.lookup("o1-mini") == DEFAULT_TOKEN_PRICING["o1-mini"]


def test_with_overrides_rejects_missing_rate():
    with pytest.raises(KeyError):
        PricingResolver.with_overrides({"broken": {"input": 1}})


def test_table_is_read_only():
    resolver = PricingResolver()
    with pytest.raises(TypeError):
        resolver.table["gpt-4o"] = PricingEntry(0, 0)
