"""
Unit tests for pricing calculations and the capability catalog.
"""

from decimal import Decimal

import pytest

from flightdeck.core.pricing import CAPABILITY_CATALOG, calculate_cost
from flightdeck.core.token_counter import TokenUsage


class TestTokenUsage:
    """Test TokenUsage validation."""

    def test_total_tokens(self):
        """Test total is input + output."""
        assert TokenUsage(input_tokens=100, output_tokens=50).total_tokens == 150

    def test_negative_counts_rejected(self):
        """Test negative counts raise ValueError."""
        with pytest.raises(ValueError, match="input_tokens cannot be negative"):
            TokenUsage(input_tokens=-1, output_tokens=0)
        with pytest.raises(ValueError, match="output_tokens cannot be negative"):
            TokenUsage(input_tokens=0, output_tokens=-1)


class TestCatalog:
    """Test the fixed capability catalog."""

    def test_catalog_entries(self):
        """Test the five known capabilities are present with their providers."""
        providers = {d.name: d.provider for d in CAPABILITY_CATALOG.entries.values()}
        assert providers == {
            "claude-sonnet": "anthropic",
            "claude-haiku": "anthropic",
            "gemini-pro": "google",
            "gemini-flash": "google",
            "gpt-4o-mini": "openai",
        }

    def test_unknown_capability(self):
        """Test unknown names raise ValueError."""
        with pytest.raises(ValueError, match="Unsupported capability: gpt-5"):
            CAPABILITY_CATALOG.get("gpt-5")
        assert "gpt-5" not in CAPABILITY_CATALOG
        assert "claude-haiku" in CAPABILITY_CATALOG

    def test_cheapest_first(self):
        """Test ordering by combined rate."""
        names = [d.name for d in CAPABILITY_CATALOG.cheapest_first()]
        assert names == ["gemini-flash", "gpt-4o-mini", "claude-haiku", "gemini-pro", "claude-sonnet"]


class TestCostCalculation:
    """Test cost estimation."""

    def test_sonnet_cost(self):
        """Test 1M input + 1M output tokens costs the sum of both rates."""
        usage = TokenUsage(input_tokens=1_000_000, output_tokens=1_000_000)
        assert calculate_cost("claude-sonnet", usage) == Decimal("18.000000")

    def test_cost_rounds_up_to_micro_dollar(self):
        """Test fractional micro-dollars round up."""
        # 1 input token of gemini-flash is 0.000000075
        usage = TokenUsage(input_tokens=1, output_tokens=0)
        assert calculate_cost("gemini-flash", usage) == Decimal("0.000001")

    def test_zero_usage_is_free(self):
        """Test zero tokens cost nothing."""
        assert calculate_cost("gpt-4o-mini", TokenUsage(0, 0)) == Decimal("0")

    def test_cost_is_decimal(self):
        """Test costs stay Decimal."""
        cost = calculate_cost("claude-haiku", TokenUsage(input_tokens=1000, output_tokens=500))
        assert isinstance(cost, Decimal)
        # 1000 * 0.25/1M + 500 * 1.25/1M
        assert cost == Decimal("0.000875")
