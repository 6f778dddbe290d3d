"""
Routing dispatcher.

Resolves a fallback chain for a unit of work, executes it one capability at
a time, and records usage for the single capability that succeeds.

Resolution order:
1. Explicit preference, if it names an available capability
2. The tier/category policy chain, minus unavailable capabilities
3. Any other available capability, when the policy chain is fully unavailable
"""

import asyncio
from dataclasses import dataclass
from typing import Awaitable, Callable, Dict, Iterable, List, Optional

from flightdeck.logging import get_logger

from .errors import CapabilityInvocationFailed, CapabilityUnavailable, DispatchExhausted
from .ledger import UsageLedger
from .pricing import CAPABILITY_CATALOG, CapabilityCatalog, CapabilityDescriptor
from .routing import GenerationParams, UserTier, WorkCategory, default_params, policy_chain
from .token_counter import TokenUsage

logger = get_logger(__name__)

DEFAULT_TIMEOUT_SECONDS = 30.0


@dataclass(frozen=True)
class Prompt:
    """System and user text for one generation request."""
    system: str
    user: str


@dataclass(frozen=True)
class CapabilityOutput:
    """What a capability returns for one successful call."""
    text: str
    input_tokens: int
    output_tokens: int


InvokeFn = Callable[[str, str, float, int], Awaitable[CapabilityOutput]]


@dataclass(frozen=True)
class Capability:
    """A catalog entry bound to the function that calls it.

    ``invoke(system_prompt, user_prompt, temperature, max_output_tokens)``
    must return a ``CapabilityOutput`` or raise.
    """
    descriptor: CapabilityDescriptor
    invoke: InvokeFn
    available: bool = True

    @property
    def name(self) -> str:
        return self.descriptor.name


@dataclass(frozen=True)
class GenerationResult:
    """Text produced by the capability that answered, and its usage delta."""
    text: str
    capability: CapabilityDescriptor
    usage: TokenUsage
    attempts: int = 1


class RoutingDispatcher:
    """Chooses and executes capabilities for generation work."""

    def __init__(
        self,
        capabilities: Iterable[Capability],
        ledger: UsageLedger,
        catalog: CapabilityCatalog = CAPABILITY_CATALOG,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
    ):
        """Initialize the dispatcher.

        Args:
            capabilities: Bound capabilities, one per catalog entry in use
            ledger: Shared usage ledger
            catalog: Catalog the capabilities come from
            timeout_seconds: Per-invocation timeout

        Raises:
            CapabilityUnavailable: If no capabilities are supplied at all
            ValueError: If timeout_seconds is not positive
        """
        self._capabilities: Dict[str, Capability] = {c.name: c for c in capabilities}
        if not self._capabilities:
            raise CapabilityUnavailable("No capabilities configured")
        if timeout_seconds <= 0:
            raise ValueError("timeout_seconds must be > 0")
        self.ledger = ledger
        self.catalog = catalog
        self.timeout_seconds = timeout_seconds

    @property
    def capabilities(self) -> List[Capability]:
        return list(self._capabilities.values())

    def is_available(self, name: str) -> bool:
        capability = self._capabilities.get(name)
        return capability is not None and capability.available

    def resolve(
        self,
        category: WorkCategory,
        tier: UserTier,
        preferred: Optional[str] = None,
    ) -> List[Capability]:
        """Compute the ordered fallback chain for a unit of work.

        The preference is matched case-insensitively; an unknown or
        unavailable preference is ignored.

        Raises:
            CapabilityUnavailable: If no capability is available at all
        """
        ordered: List[str] = []
        preferred = preferred.strip().lower() if preferred else None
        if preferred and self.is_available(preferred):
            ordered.append(preferred)

        for name in policy_chain(tier, category):
            if name not in ordered and self.is_available(name):
                ordered.append(name)

        if not ordered:
            if tier == UserTier.FREE:
                extras = [d.name for d in self.catalog.cheapest_first()]
            else:
                extras = self.catalog.names()
            extras += [name for name in self._capabilities if name not in extras]
            ordered = [name for name in extras if self.is_available(name)]

        if not ordered:
            raise CapabilityUnavailable(
                f"No available capability for {category.value} ({tier.value} tier); "
                "check provider credentials"
            )
        return [self._capabilities[name] for name in ordered]

    async def dispatch(
        self,
        category: WorkCategory,
        tier: UserTier,
        prompt: Prompt,
        params: Optional[GenerationParams] = None,
        preferred: Optional[str] = None,
    ) -> GenerationResult:
        """Execute a unit of work, falling back through the chain on failure.

        Attempts are strictly sequential. Usage is recorded only for the
        capability whose result is returned.

        Raises:
            CapabilityUnavailable: If no capability is available at all
            DispatchExhausted: If every candidate failed
        """
        params = params or default_params(category)
        chain = self.resolve(category, tier, preferred)

        last_error: Optional[BaseException] = None
        attempted: List[str] = []
        for attempt, capability in enumerate(chain, start=1):
            attempted.append(capability.name)
            try:
                output = await self._invoke(capability, prompt, params)
            except CapabilityInvocationFailed as e:
                last_error = e.cause
                logger.warning(
                    "capability_failed",
                    capability=capability.name,
                    category=category.value,
                    attempt=attempt,
                    error=type(e.cause).__name__,
                )
                continue

            usage = TokenUsage(input_tokens=output.input_tokens, output_tokens=output.output_tokens)
            self.ledger.record(capability.descriptor, usage.input_tokens, usage.output_tokens)
            logger.info(
                "dispatch_succeeded",
                capability=capability.name,
                category=category.value,
                tier=tier.value,
                attempt=attempt,
                input_tokens=usage.input_tokens,
                output_tokens=usage.output_tokens,
            )
            return GenerationResult(
                text=output.text,
                capability=capability.descriptor,
                usage=usage,
                attempts=attempt,
            )

        logger.error("dispatch_exhausted", category=category.value, tier=tier.value, attempted=attempted)
        raise DispatchExhausted(category.value, attempted, last_error)

    async def _invoke(self, capability: Capability, prompt: Prompt, params: GenerationParams) -> CapabilityOutput:
        """Run one attempt; every failure mode becomes CapabilityInvocationFailed."""
        try:
            output = await asyncio.wait_for(
                capability.invoke(prompt.system, prompt.user, params.temperature, params.max_output_tokens),
                timeout=self.timeout_seconds,
            )
        except asyncio.CancelledError:
            raise
        except Exception as e:
            raise CapabilityInvocationFailed(capability.name, e) from e

        if not isinstance(output, CapabilityOutput) or not output.text:
            raise CapabilityInvocationFailed(capability.name, ValueError("Malformed capability output"))
        if output.input_tokens < 0 or output.output_tokens < 0:
            raise CapabilityInvocationFailed(capability.name, ValueError("Negative token counts in output"))
        return output
