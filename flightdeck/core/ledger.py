"""
Usage ledger for capability consumption.

The one piece of shared mutable state in the runtime. Writers from any
number of in-flight dispatches may record against the same capability.
"""

import threading
from dataclasses import dataclass
from decimal import Decimal
from typing import Dict

from .pricing import CapabilityDescriptor
from .token_counter import TokenUsage


@dataclass(frozen=True)
class UsageRecord:
    """Accumulated usage for one capability."""
    total_requests: int = 0
    total_input_tokens: int = 0
    total_output_tokens: int = 0
    estimated_cost: Decimal = Decimal("0")

    @property
    def total_tokens(self) -> int:
        return self.total_input_tokens + self.total_output_tokens

    @property
    def average_cost_per_request(self) -> Decimal:
        if self.total_requests == 0:
            return Decimal("0")
        return self.estimated_cost / self.total_requests

    def add(self, usage: TokenUsage, cost: Decimal) -> "UsageRecord":
        """Return a new record with one more request folded in."""
        return UsageRecord(
            total_requests=self.total_requests + 1,
            total_input_tokens=self.total_input_tokens + usage.input_tokens,
            total_output_tokens=self.total_output_tokens + usage.output_tokens,
            estimated_cost=self.estimated_cost + cost,
        )


class UsageLedger:
    """Per-capability accumulator of requests, tokens and cost.

    Records are immutable values swapped under a lock, so ``snapshot()``
    never observes a record mid-update. Totals only grow until ``reset()``.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._records: Dict[CapabilityDescriptor, UsageRecord] = {}

    def record(self, capability: CapabilityDescriptor, input_tokens: int, output_tokens: int) -> UsageRecord:
        """Fold one successful call into the capability's record.

        Args:
            capability: Capability that produced the result
            input_tokens: Input units reported for the call
            output_tokens: Output units reported for the call

        Returns:
            The updated record for the capability

        Raises:
            ValueError: If either count is negative
        """
        usage = TokenUsage(input_tokens=input_tokens, output_tokens=output_tokens)
        cost = capability.estimate_cost(usage)
        with self._lock:
            updated = self._records.get(capability, UsageRecord()).add(usage, cost)
            self._records[capability] = updated
        return updated

    def snapshot(self) -> Dict[CapabilityDescriptor, UsageRecord]:
        """Point-in-time copy of every record."""
        with self._lock:
            return dict(self._records)

    def total_cost(self) -> Decimal:
        return sum((r.estimated_cost for r in self.snapshot().values()), Decimal("0"))

    def reset(self) -> None:
        with self._lock:
            self._records.clear()
