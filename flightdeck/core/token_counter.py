"""
Token counting and usage tracking.

Holds the unit counts a capability reports for a single call.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class TokenUsage:
    """Token usage for one capability invocation.

    Contains exact counts as reported by the provider, without estimation.
    """
    input_tokens: int
    output_tokens: int

    def __post_init__(self):
        """Validate counts are non-negative."""
        if self.input_tokens < 0:
            raise ValueError("input_tokens cannot be negative")
        if self.output_tokens < 0:
            raise ValueError("output_tokens cannot be negative")

    @property
    def total_tokens(self) -> int:
        """Total tokens used (input + output)."""
        return self.input_tokens + self.output_tokens
