"""
Pricing calculations and the capability catalog.

Each capability is one provider+model pairing with a fixed rate card.
"""

from dataclasses import dataclass
from decimal import ROUND_UP, Decimal
from typing import Dict, List

from .token_counter import TokenUsage

PER_MILLION = Decimal("1000000")
COST_QUANTUM = Decimal("0.000001")


@dataclass(frozen=True)
class CapabilityDescriptor:
    """Identifies one provider+model pairing and its per-million-token rates."""
    name: str
    provider: str
    model: str
    input_cost_per_million: Decimal
    output_cost_per_million: Decimal

    def estimate_cost(self, usage: TokenUsage) -> Decimal:
        """Cost of a call, rounded UP to the micro-dollar."""
        input_cost = (Decimal(usage.input_tokens) / PER_MILLION) * self.input_cost_per_million
        output_cost = (Decimal(usage.output_tokens) / PER_MILLION) * self.output_cost_per_million
        return (input_cost + output_cost).quantize(COST_QUANTUM, rounding=ROUND_UP)


@dataclass(frozen=True)
class CapabilityCatalog:
    """Fixed catalog of known capabilities, keyed by name."""
    entries: Dict[str, CapabilityDescriptor]

    def get(self, name: str) -> CapabilityDescriptor:
        """Get a descriptor by name.

        Raises:
            ValueError: If the capability is not in the catalog
        """
        if name not in self.entries:
            raise ValueError(f"Unsupported capability: {name}")
        return self.entries[name]

    def __contains__(self, name: object) -> bool:
        return name in self.entries

    def names(self) -> List[str]:
        return list(self.entries)

    def cheapest_first(self) -> List[CapabilityDescriptor]:
        """Descriptors ordered by combined rate, cheapest first."""
        return sorted(
            self.entries.values(),
            key=lambda d: (d.input_cost_per_million + d.output_cost_per_million, d.name),
        )


# Fixed rate card - no dynamic fetching
CAPABILITY_CATALOG = CapabilityCatalog({
    "claude-sonnet": CapabilityDescriptor(
        name="claude-sonnet",
        provider="anthropic",
        model="claude-3-5-sonnet-latest",
        input_cost_per_million=Decimal("3.00"),
        output_cost_per_million=Decimal("15.00"),
    ),
    "claude-haiku": CapabilityDescriptor(
        name="claude-haiku",
        provider="anthropic",
        model="claude-3-haiku-20240307",
        input_cost_per_million=Decimal("0.25"),
        output_cost_per_million=Decimal("1.25"),
    ),
    "gemini-pro": CapabilityDescriptor(
        name="gemini-pro",
        provider="google",
        model="gemini-1.5-pro",
        input_cost_per_million=Decimal("1.25"),
        output_cost_per_million=Decimal("5.00"),
    ),
    "gemini-flash": CapabilityDescriptor(
        name="gemini-flash",
        provider="google",
        model="gemini-1.5-flash",
        input_cost_per_million=Decimal("0.075"),
        output_cost_per_million=Decimal("0.30"),
    ),
    "gpt-4o-mini": CapabilityDescriptor(
        name="gpt-4o-mini",
        provider="openai",
        model="gpt-4o-mini",
        input_cost_per_million=Decimal("0.15"),
        output_cost_per_million=Decimal("0.60"),
    ),
})


def calculate_cost(capability: str, usage: TokenUsage) -> Decimal:
    """Calculate the cost of a call against a catalog capability.

    Raises:
        ValueError: If the capability is not in the catalog
    """
    return CAPABILITY_CATALOG.get(capability).estimate_cost(usage)
